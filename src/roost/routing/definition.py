"""Route definitions handed over by the module loader.

A route is a flat route handler (one module behind a URL pathname), a
page tree (nested layout/page modules with parallel branches), or a
page-router page (one module that lists its own paths).  The closed
union is dispatched once, in the orchestrator.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

# Key of the primary branch in a node's parallel route map
CHILDREN = "children"

# Segment name of the leaf node holding a page module
PAGE_SEGMENT = "__PAGE__"


@dataclass(frozen=True, slots=True)
class LoadedModule:
    """A loaded user module and the file it came from.

    *exports* is whatever the loader produced: a module object, a
    ``SimpleNamespace``, or a plain mapping of names to values.
    """

    path: str | None
    exports: Any


@dataclass(frozen=True, slots=True)
class FlatRoute:
    """A route handler: one module serving a URL pathname."""

    route_id: str
    pathname: str
    module: LoadedModule


@dataclass(frozen=True, slots=True)
class TreeNode:
    """One directory level of a page tree.

    Attributes:
        segment: Path component for this level (``""`` for the root).
        layout: The level's layout module, if any.
        page: The level's page module, if any.
        parallel_routes: Named branches; ``"children"`` is the primary one,
            ``"@slot"`` names are parallel siblings.
    """

    segment: str
    layout: LoadedModule | None = None
    page: LoadedModule | None = None
    parallel_routes: Mapping[str, TreeNode] = field(default_factory=dict)

    @property
    def module(self) -> LoadedModule | None:
        """The module backing this level: layout first, then page."""
        return self.layout if self.layout is not None else self.page

    @property
    def primary_child(self) -> TreeNode | None:
        return self.parallel_routes.get(CHILDREN)


@dataclass(frozen=True, slots=True)
class TreeRoute:
    """A page route: a tree of layouts ending in a page."""

    route_id: str
    pathname: str
    root: TreeNode


@dataclass(frozen=True, slots=True)
class PagesRoute:
    """A page-router page: one module that lists its own paths.

    The module's ``get_static_paths`` returns the concrete paths and the
    fallback policy directly; there is no segment chain to walk.
    """

    route_id: str
    pathname: str
    module: LoadedModule


RouteDefinition: TypeAlias = FlatRoute | TreeRoute | PagesRoute
