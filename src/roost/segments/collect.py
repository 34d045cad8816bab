"""Segment-chain walking for flat route handlers and page trees.

Produces the ordered, root-to-leaf list of segments that contribute to
static generation: those carrying a config, a generator, or a dynamic
parameter.  Purely structural segments are dropped.

- Route handlers (:class:`FlatRoute`) are split on ``/``; only the last
  component is backed by the handler module.
- Page trees (:class:`TreeRoute`) are walked along the ``children``
  branch; parallel ``@slot`` branches never contribute path params.
"""

import logging

from roost.errors import StructureError
from roost.routing.definition import FlatRoute, LoadedModule, RouteDefinition, TreeRoute
from roost.routing.params import is_dynamic_segment, parse_segment_param
from roost.segments.extract import extract, is_client_module
from roost.segments.types import Segment

logger = logging.getLogger("roost.segments")


def _filter_segments(segments: list[Segment]) -> list[Segment]:
    return [segment for segment in segments if segment.contributes]


def _make_segment(
    name: str,
    module: LoadedModule | None = None,
    *,
    route_id: str,
) -> Segment:
    """Build a segment for *name*, extracting *module* when it's a server module."""
    is_dynamic = is_dynamic_segment(name)
    param = parse_segment_param(name) if is_dynamic else None
    if is_dynamic and param is None:
        msg = f"Dynamic segment {name!r} in route {route_id!r} has no valid parameter name"
        raise StructureError(msg)

    if module is None:
        return Segment(name=name, param=param, is_dynamic=is_dynamic)

    # Only server modules can declare build-time configuration
    if is_client_module(module.exports):
        logger.debug("Skipping client module %s for segment %r", module.path, name)
        return Segment(name=name, param=param, source_path=module.path, is_dynamic=is_dynamic)

    extraction = extract(module.exports)
    return Segment(
        name=name,
        param=param,
        source_path=module.path,
        config=extraction.config,
        generator=extraction.generator,
        is_dynamic=is_dynamic,
    )


def collect_route_segments(route: FlatRoute) -> list[Segment]:
    """Collect the segments of a route handler.

    Raises:
        StructureError: If the pathname has no components.
    """
    # Drop the empty component produced by the leading separator
    parts = route.pathname.split("/")[1:]
    if not parts:
        msg = f"Route {route.route_id!r}: expected at least one segment"
        raise StructureError(msg)

    segments = [_make_segment(name, route_id=route.route_id) for name in parts[:-1]]
    # The last component represents the handler module itself
    segments.append(_make_segment(parts[-1], route.module, route_id=route.route_id))

    return _filter_segments(segments)


def collect_page_segments(route: TreeRoute) -> list[Segment]:
    """Collect the segments of a page tree, root to primary leaf."""
    segments: list[Segment] = []

    current = route.root
    while current is not None:
        segments.append(_make_segment(current.segment, current.module, route_id=route.route_id))
        current = current.primary_child

    return _filter_segments(segments)


def collect_segments(route: RouteDefinition) -> list[Segment]:
    """Collect the contributing segments of any route definition.

    Raises:
        StructureError: If *route* is neither a route handler nor a page
            tree, or if its structure is inconsistent.
    """
    if isinstance(route, FlatRoute):
        segments = collect_route_segments(route)
    elif isinstance(route, TreeRoute):
        segments = collect_page_segments(route)
    else:
        msg = f"Expected a route handler or page tree, got {type(route).__name__}"
        raise StructureError(msg)

    logger.debug(
        "Collected %d segment(s) for %s: %s",
        len(segments),
        route.route_id,
        [s.name for s in segments],
    )
    return segments
