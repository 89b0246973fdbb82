"""Module composition: manifests, activation and the per-app registry."""

from axium.modules.loader import ModuleLoader
from axium.modules.manifest import Manifest, ModuleRef
from axium.modules.registry import ModuleRegistry

__all__ = [
    "Manifest",
    "ModuleLoader",
    "ModuleRef",
    "ModuleRegistry",
]
