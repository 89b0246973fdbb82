"""Case-insensitive filesystem lookup.

Module folders, their ``Routes`` and ``Views`` subfolders, and the files
inside them are referenced by name in manifests and activation lists,
whose casing need not match the disk. Entries are listed in sorted order
so the first match is deterministic.
"""

from pathlib import Path


def case_insensitive_matches(base: Path, name: str, *, directory: bool) -> list[Path]:
    """Every entry of *base* whose name equals *name* ignoring case.

    Only directories are considered when *directory* is true, only files
    otherwise. A missing *base* yields no matches.
    """
    if not base.is_dir():
        return []
    folded = name.casefold()
    return [
        entry
        for entry in sorted(base.iterdir(), key=lambda p: p.name)
        if entry.name.casefold() == folded and entry.is_dir() == directory
    ]


def find_folder(base: Path, name: str) -> Path | None:
    """First directory of *base* named *name* ignoring case, or None."""
    matches = case_insensitive_matches(base, name, directory=True)
    return matches[0] if matches else None


def find_file(base: Path, name: str) -> Path | None:
    """First file of *base* named *name* ignoring case, or None."""
    matches = case_insensitive_matches(base, name, directory=False)
    return matches[0] if matches else None


def resolve_relative(base: Path, relative: str) -> Path | None:
    """Walk *relative* (``"Routes/routes.py"``) from *base* one part at a time.

    Every part but the last must be a directory; the last must be a file.
    """
    parts = [part for part in relative.replace("\\", "/").split("/") if part]
    if not parts:
        return None
    current = base
    for folder in parts[:-1]:
        found = find_folder(current, folder)
        if found is None:
            return None
        current = found
    return find_file(current, parts[-1])
