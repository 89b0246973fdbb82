"""View rendering on top of kida templates.

``View.render(view, data, layout, module)`` renders ``<view>.html`` from
the application's ``view_path``, or from a module's ``Views`` folder when
*module* is given. Module and ``Views`` folder names are resolved ignoring
case. View names are paths relative to that root (``"users/list"``), and
templates include or extend each other by root-relative names. A layout
receives the rendered view as ``content``::

    {# views/layouts/main.html #}
    {% include "partials/nav.html" %}
    <main>{{ content }}</main>
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader
from kida.utils.html import Markup

from axium._internal.paths import find_folder
from axium.config import AppConfig
from axium.errors import NotFound

TEMPLATE_SUFFIX = ".html"


class View:
    """Renders templates for controllers and the VIEW-mode 404 page.

    One kida ``Environment`` is created per template root (``view_path``
    and each module's ``Views`` folder) and reused for the life of the app.
    """

    __slots__ = ("_autoescape", "_debug", "_envs", "_lock", "module_path", "view_path")

    def __init__(self, config: AppConfig) -> None:
        self.view_path = Path(config.view_path)
        self.module_path = Path(config.module_path)
        self._autoescape = config.autoescape
        self._debug = config.debug
        self._envs: dict[Path, Environment] = {}
        self._lock = threading.Lock()

    def render(
        self,
        view: str,
        data: dict[str, Any] | None = None,
        layout: str | None = None,
        module: str | None = None,
    ) -> str:
        """Render *view* with *data*, optionally wrapped in *layout*.

        Raises ``NotFound`` if the module, its ``Views`` folder, the view,
        or the layout cannot be found.
        """
        context = dict(data or {})
        root = self.view_path
        if module:
            views_dir = self._module_views(module)
            if (views_dir / f"{view}{TEMPLATE_SUFFIX}").is_file():
                root = views_dir

        if not (root / f"{view}{TEMPLATE_SUFFIX}").is_file():
            msg = f"View '{view}' not found."
            raise NotFound(msg)

        content = self._render(root, f"{view}{TEMPLATE_SUFFIX}", context)
        if layout is None:
            return content

        layout_root = self._module_views(module) if module else self.view_path
        if not (layout_root / f"{layout}{TEMPLATE_SUFFIX}").is_file():
            msg = f"Layout '{layout}' not found."
            raise NotFound(msg)
        return self._render(
            layout_root,
            f"{layout}{TEMPLATE_SUFFIX}",
            {**context, "content": Markup(content)},
        )

    def render_file(self, path: Path, context: dict[str, Any] | None = None) -> str:
        """Render the template file at *path*.

        A file under ``view_path`` is loaded through the application root so
        its includes resolve like any other view's.
        """
        path = path.resolve()
        root = self.view_path.resolve()
        if path.is_relative_to(root):
            return self._render(root, path.relative_to(root).as_posix(), context or {})
        return self._render(path.parent, path.name, context or {})

    def _render(self, root: Path, name: str, context: dict[str, Any]) -> str:
        return self._environment(root).get_template(name).render(context)

    def _module_views(self, module: str) -> Path:
        real_module = find_folder(self.module_path, module)
        if real_module is None:
            msg = f"Module '{module}' not found."
            raise NotFound(msg)
        views_dir = find_folder(real_module, "Views")
        if views_dir is None:
            msg = f"'Views' folder of module '{module}' not found."
            raise NotFound(msg)
        return views_dir

    def _environment(self, root: Path) -> Environment:
        key = root.resolve()
        env = self._envs.get(key)
        if env is not None:
            return env
        with self._lock:
            env = self._envs.get(key)
            if env is None:
                env = Environment(
                    loader=FileSystemLoader(str(key)),
                    autoescape=self._autoescape,
                    auto_reload=self._debug,
                )
                self._envs[key] = env
        return env
