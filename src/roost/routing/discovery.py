"""Filesystem route discovery for ``app/`` and ``pages/`` directories.

Walks the app directory tree and discovers:
- ``layout.py`` files as layout modules
- ``page.py`` files as page routes (page trees)
- ``route.py`` files as route handlers (flat routes)

Directory names wrapped in ``[brackets]`` become dynamic segments.
``(group)`` directories nest without adding to the URL, ``@slot``
directories are parallel branches of their parent, and ``_private`` or
dotted directories are ignored.

:class:`PagesDirLoader` does the same for a page-router ``pages/``
directory, where each module is one page.

Discovery only scans the filesystem; modules are imported lazily when a
route is loaded, once per file.
"""

from __future__ import annotations

import importlib.util
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from roost.errors import StructureError
from roost.routing.definition import (
    CHILDREN,
    PAGE_SEGMENT,
    FlatRoute,
    LoadedModule,
    PagesRoute,
    RouteDefinition,
    TreeNode,
    TreeRoute,
)

logger = logging.getLogger("roost.discovery")

# Regex matching (group) directory names
_GROUP_DIR_RE = re.compile(r"^\(.+\)$")

_LAYOUT_FILE = "layout.py"
_PAGE_FILE = "page.py"
_ROUTE_FILE = "route.py"


@dataclass(frozen=True, slots=True)
class _DiscoveredRoute:
    """A route found on disk: its kind and the directories leading to it."""

    pathname: str
    directories: tuple[Path, ...]
    is_page: bool


def _url_pathname(names: list[str]) -> str:
    url_parts = [name for name in names if not _GROUP_DIR_RE.match(name)]
    return "/" + "/".join(url_parts) if url_parts else "/"


def _load_cached(
    root: Path,
    file: Path,
    prefix: str,
    cache: dict[Path, ModuleType],
) -> LoadedModule | None:
    """Import *file* at most once per loader.

    Returns None if the file doesn't exist.

    Raises:
        StructureError: The module raised while being imported.
    """
    if not file.is_file():
        return None

    module = cache.get(file)
    if module is None:
        relative = file.relative_to(root).with_suffix("")
        module_name = prefix + re.sub(r"\W", "_", str(relative))
        spec = importlib.util.spec_from_file_location(module_name, file)
        if spec is None or spec.loader is None:
            return None
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            msg = f"Failed to import {file}: {type(exc).__name__}: {exc}"
            raise StructureError(msg) from exc
        cache[file] = module

    return LoadedModule(path=str(file), exports=module)


class AppDirLoader:
    """Load route definitions from an app directory.

    Implements the :class:`~roost.resolve.RouteLoader` protocol::

        loader = AppDirLoader("app")
        for route_id in loader.route_ids():
            route = loader.load(route_id)
    """

    def __init__(self, app_dir: str | Path) -> None:
        self.root = Path(app_dir).resolve()
        if not self.root.is_dir():
            raise FileNotFoundError(f"App directory not found: {self.root}")
        self._routes: dict[str, _DiscoveredRoute] | None = None
        self._modules: dict[Path, ModuleType] = {}

    # -- Discovery --

    def _discover(self) -> dict[str, _DiscoveredRoute]:
        if self._routes is None:
            routes: dict[str, _DiscoveredRoute] = {}
            self._walk_directory(self.root, names=[], directories=[], routes=routes)
            self._routes = routes
            logger.debug("Discovered %d route(s) under %s", len(routes), self.root)
        return self._routes

    def _walk_directory(
        self,
        directory: Path,
        *,
        names: list[str],
        directories: list[Path],
        routes: dict[str, _DiscoveredRoute],
    ) -> None:
        """Recursively walk a directory, recording page and route files."""
        current = [*directories, directory]
        has_page = (directory / _PAGE_FILE).is_file()
        has_route = (directory / _ROUTE_FILE).is_file()

        if has_page and has_route:
            msg = f"Conflicting page.py and route.py in {directory}"
            raise StructureError(msg)

        if has_page or has_route:
            pathname = _url_pathname(names)
            if pathname in routes:
                msg = (
                    f"Route {pathname!r} is defined by both "
                    f"{routes[pathname].directories[-1]} and {directory}"
                )
                raise StructureError(msg)
            routes[pathname] = _DiscoveredRoute(pathname, tuple(current), is_page=has_page)

        for item in sorted(directory.iterdir()):
            if not item.is_dir():
                continue
            if item.name.startswith(("_", ".", "@")):
                continue
            self._walk_directory(
                item,
                names=[*names, item.name],
                directories=current,
                routes=routes,
            )

    def route_ids(self) -> list[str]:
        """Return the pathnames of every discovered route, sorted."""
        return sorted(self._discover())

    # -- Loading --

    def _load_module(self, file: Path) -> LoadedModule | None:
        """Import *file* once and wrap it, or return None if it doesn't exist."""
        return _load_cached(self.root, file, "_roost_app_", self._modules)

    def _build_slots(self, directory: Path) -> dict[str, TreeNode]:
        """Build the parallel ``@slot`` branches of *directory*."""
        slots: dict[str, TreeNode] = {}
        for item in sorted(directory.iterdir()):
            if not item.is_dir() or not item.name.startswith("@"):
                continue
            page = self._load_module(item / _PAGE_FILE)
            children = {CHILDREN: TreeNode(PAGE_SEGMENT, page=page)} if page else {}
            slots[item.name] = TreeNode(
                item.name,
                layout=self._load_module(item / _LAYOUT_FILE),
                parallel_routes=children,
            )
        return slots

    def _build_tree(self, discovered: _DiscoveredRoute) -> TreeNode:
        """Build the page tree bottom-up, ending in a ``__PAGE__`` leaf."""
        leaf_dir = discovered.directories[-1]
        node = TreeNode(PAGE_SEGMENT, page=self._load_module(leaf_dir / _PAGE_FILE))

        for directory in reversed(discovered.directories):
            segment = "" if directory == self.root else directory.name
            node = TreeNode(
                segment,
                layout=self._load_module(directory / _LAYOUT_FILE),
                parallel_routes={CHILDREN: node, **self._build_slots(directory)},
            )
        return node

    def load(self, route_id: str) -> RouteDefinition:
        """Load the route definition for *route_id*.

        Raises:
            StructureError: If no route with that id was discovered.
        """
        discovered = self._discover().get(route_id)
        if discovered is None:
            msg = f"No route {route_id!r} under {self.root}"
            raise StructureError(msg)

        if discovered.is_page:
            return TreeRoute(route_id, discovered.pathname, self._build_tree(discovered))

        module = self._load_module(discovered.directories[-1] / _ROUTE_FILE)
        if module is None:
            msg = f"Could not import route handler for {route_id!r}"
            raise StructureError(msg)
        return FlatRoute(route_id, discovered.pathname, module)


class PagesDirLoader:
    """Load page-router pages from a ``pages/`` directory.

    Every module is one page named by its path::

        pages/index.py          → /
        pages/about.py          → /about
        pages/blog/[slug].py    → /blog/[slug]
        pages/docs/index.py     → /docs

    Modules starting with ``_`` (``_app.py``) and everything under
    ``api/`` are not pages.
    """

    def __init__(self, pages_dir: str | Path) -> None:
        self.root = Path(pages_dir).resolve()
        if not self.root.is_dir():
            raise FileNotFoundError(f"Pages directory not found: {self.root}")
        self._pages: dict[str, Path] | None = None
        self._modules: dict[Path, ModuleType] = {}

    def _discover(self) -> dict[str, Path]:
        if self._pages is not None:
            return self._pages

        pages: dict[str, Path] = {}
        for file in sorted(self.root.rglob("*.py")):
            parts = file.relative_to(self.root).with_suffix("").parts
            if len(parts) > 1 and parts[0] == "api":
                continue
            if any(part.startswith(("_", ".")) for part in parts):
                continue

            names = parts[:-1] if parts[-1] == "index" else parts
            pathname = "/" + "/".join(names) if names else "/"
            if pathname in pages:
                msg = f"Page {pathname!r} is defined by both {pages[pathname]} and {file}"
                raise StructureError(msg)
            pages[pathname] = file

        self._pages = pages
        logger.debug("Discovered %d page(s) under %s", len(pages), self.root)
        return pages

    def route_ids(self) -> list[str]:
        """Return the pathnames of every discovered page, sorted."""
        return sorted(self._discover())

    def load(self, route_id: str) -> PagesRoute:
        """Load the page-router page for *route_id*.

        Raises:
            StructureError: If no page with that id was discovered, or
                its module failed to import.
        """
        file = self._discover().get(route_id)
        if file is None:
            msg = f"No page {route_id!r} under {self.root}"
            raise StructureError(msg)

        module = _load_cached(self.root, file, "_roost_pages_", self._modules)
        if module is None:
            msg = f"Could not import page module for {route_id!r}"
            raise StructureError(msg)
        return PagesRoute(route_id, route_id, module)
