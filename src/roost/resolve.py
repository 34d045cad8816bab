"""Route resolution — the build pipeline's entry point.

Loads a route definition, walks its segment chain, reduces the segment
configs into a policy, and expands the static paths::

    loader = AppDirLoader("app")
    resolved = await resolve_route("/[lang]/blog/[slug]", loader)
    resolved.static_paths.pathnames  # ("/en/blog/a", "/fr/blog/a", ...)

Page-router pages skip the segment chain; their module's
``get_static_paths`` supplies paths and fallback directly.

Each route resolves independently.  Errors keep their type and gain the
route id (``exc.route_id`` plus an exception note); there is no partial
success for a single route.  :func:`build_manifest` resolves many routes
and records failures per route instead of aborting the whole build.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import anyio

from roost.config import ResolverConfig
from roost.errors import RoostError, StructureError
from roost.page_paths import build_page_paths, page_params
from roost.routing.definition import PagesRoute, RouteDefinition, TreeRoute
from roost.segments.collect import collect_segments
from roost.segments.reduce import reduce_segments
from roost.segments.types import DynamicMode, RoutePolicy, StaticPathsResult
from roost.static_paths import expand_static_paths

logger = logging.getLogger("roost.resolve")


class RouteLoader(Protocol):
    """Produces route definitions by id (the external module loader)."""

    def load(self, route_id: str) -> RouteDefinition: ...


class RouteKind(Enum):
    PAGE = "page"
    ROUTE = "route"
    PAGES = "pages"


@dataclass(frozen=True, slots=True)
class ResolvedRoute:
    """The rendering policy and static paths computed for one route."""

    route_id: str
    kind: RouteKind
    policy: RoutePolicy
    static_paths: StaticPathsResult

    def to_dict(self) -> dict[str, Any]:
        policy = self.policy
        region = policy.preferred_region
        return {
            "kind": self.kind.value,
            "dynamicMode": policy.dynamic_mode.value,
            "revalidate": policy.revalidate,
            "pprEligible": policy.ppr_eligible,
            "dynamicParams": policy.dynamic_params,
            "fetchCache": policy.fetch_cache,
            "preferredRegion": list(region) if isinstance(region, tuple) else region,
            "maxDuration": policy.max_duration,
            "fallback": self.static_paths.fallback,
            "paths": [
                {k: list(v) if isinstance(v, tuple) else v for k, v in record.items()}
                for record in self.static_paths.paths
            ],
            "pathnames": list(self.static_paths.pathnames),
        }


async def resolve_definition(
    route: RouteDefinition,
    config: ResolverConfig | None = None,
) -> ResolvedRoute:
    """Resolve an already-loaded route definition."""
    config = config or ResolverConfig()
    if isinstance(route, PagesRoute):
        return await _resolve_pages_route(route, config)
    is_page = isinstance(route, TreeRoute)

    segments = collect_segments(route)
    # Partial prerendering only applies to page trees
    policy = reduce_segments(segments, ppr=config.ppr if is_page else False)
    static_paths = await expand_static_paths(
        segments,
        policy,
        pathname=route.pathname,
        fallback_shells=is_page and policy.ppr_eligible and config.ppr_fallbacks,
        concurrency=config.concurrency,
    )

    return ResolvedRoute(
        route_id=route.route_id,
        kind=RouteKind.PAGE if is_page else RouteKind.ROUTE,
        policy=policy,
        static_paths=static_paths,
    )


async def _resolve_pages_route(route: PagesRoute, config: ResolverConfig) -> ResolvedRoute:
    # Page-router pages carry no segment config; the module decides the fallback
    static_paths = await build_page_paths(
        route,
        locales=config.locales,
        default_locale=config.default_locale,
    )
    dynamic = bool(page_params(route))
    policy = RoutePolicy(
        dynamic_mode=DynamicMode.DYNAMIC if dynamic else DynamicMode.STATIC,
        dynamic_params=not dynamic or static_paths.fallback is not False,
    )
    return ResolvedRoute(
        route_id=route.route_id,
        kind=RouteKind.PAGES,
        policy=policy,
        static_paths=static_paths,
    )


def _load(route_id: str, loader: RouteLoader) -> RouteDefinition:
    """Load *route_id*, turning loader failures into a StructureError."""
    try:
        return loader.load(route_id)
    except RoostError:
        raise
    except Exception as exc:
        msg = f"Could not load route {route_id!r}: {type(exc).__name__}: {exc}"
        raise StructureError(msg) from exc


async def resolve_route(
    route_id: str,
    loader: RouteLoader,
    config: ResolverConfig | None = None,
) -> ResolvedRoute:
    """Resolve the policy and static paths for *route_id*.

    Raises:
        StructureError: The route definition is inconsistent.
        ConflictError: Two segments claim the same parameter name.
        GeneratorError: A ``generate_static_params`` or ``get_static_paths``
            call failed.
    """
    try:
        route = _load(route_id, loader)
        resolved = await resolve_definition(route, config)
    except RoostError as exc:
        if exc.route_id is None:
            exc.route_id = route_id
            exc.add_note(f"while resolving route {route_id!r}")
        raise

    logger.debug(
        "Resolved %s: mode=%s revalidate=%r ppr=%s",
        route_id,
        resolved.policy.dynamic_mode.value,
        resolved.policy.revalidate,
        resolved.policy.ppr_eligible,
    )
    return resolved


def resolve_route_sync(
    route_id: str,
    loader: RouteLoader,
    config: ResolverConfig | None = None,
) -> ResolvedRoute:
    """Blocking wrapper around :func:`resolve_route` for synchronous callers."""
    return anyio.run(resolve_route, route_id, loader, config)


@dataclass(frozen=True, slots=True)
class PrerenderManifest:
    """Resolution results for a whole build, keyed by route id."""

    routes: dict[str, ResolvedRoute] = field(default_factory=dict)
    errors: dict[str, RoostError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": 1,
            "routes": {
                route_id: self.routes[route_id].to_dict() for route_id in sorted(self.routes)
            },
            "errors": {route_id: str(self.errors[route_id]) for route_id in sorted(self.errors)},
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


async def build_manifest(
    route_ids: Iterable[str],
    loader: RouteLoader,
    config: ResolverConfig | None = None,
) -> PrerenderManifest:
    """Resolve every route, recording failures without affecting other routes."""
    routes: dict[str, ResolvedRoute] = {}
    errors: dict[str, RoostError] = {}

    for route_id in route_ids:
        try:
            routes[route_id] = await resolve_route(route_id, loader, config)
        except RoostError as exc:
            logger.error("Failed to resolve %s: %s", route_id, exc)
            errors[route_id] = exc

    logger.info("Resolved %d route(s), %d failed", len(routes), len(errors))
    return PrerenderManifest(routes=routes, errors=errors)
