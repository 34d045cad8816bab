"""Fold per-segment configuration into one route-level policy.

Precedence, scanning root → leaf:

- ``dynamic``: any ``"force-dynamic"`` wins outright; otherwise any
  ``"force-static"`` or ``"error"`` forces static rendering.
- ``revalidate``: ``False`` resets the running value; a finite value
  replaces ``False`` and otherwise keeps the minimum.  A leaf-ward
  finite value therefore beats a root-ward ``False``.
- ``dynamic_params``: ``False`` anywhere disables un-enumerated params.
- Caching hints: the leaf-most declaration wins.
"""

from collections.abc import Sequence

from roost.config import PPRMode
from roost.segments.types import DynamicMode, Revalidate, RoutePolicy, Segment


def _reduce_revalidate(segments: Sequence[Segment]) -> Revalidate:
    current: Revalidate | None = None
    for segment in segments:
        if segment.config is None or segment.config.revalidate is None:
            continue
        value = segment.config.revalidate
        if value is False:
            current = False
        elif current is None or current is False:
            current = value
        else:
            current = min(current, value)
    return False if current is None else current


def _reduce_dynamic_mode(segments: Sequence[Segment]) -> DynamicMode:
    declared = {s.config.dynamic for s in segments if s.config is not None}
    if "force-dynamic" in declared:
        return DynamicMode.FORCE_DYNAMIC
    if "force-static" in declared or "error" in declared:
        return DynamicMode.FORCE_STATIC
    if any(s.is_dynamic or s.generator is not None for s in segments):
        return DynamicMode.DYNAMIC
    return DynamicMode.STATIC


def _is_ppr_eligible(segments: Sequence[Segment], ppr: PPRMode) -> bool:
    if ppr is False:
        return False
    opt_ins = [
        s.config.experimental_ppr
        for s in segments
        if s.config is not None and s.config.experimental_ppr is not None
    ]
    if False in opt_ins:
        return False
    if ppr == "incremental":
        return True in opt_ins
    return True


def reduce_segments(segments: Sequence[Segment], *, ppr: PPRMode = False) -> RoutePolicy:
    """Reduce *segments* into a :class:`RoutePolicy`.

    Pure and total: every input produces a policy.

    Args:
        segments: Contributing segments, root first.
        ppr: The experimental partial-prerendering flag for this route.
    """
    fetch_cache = None
    preferred_region = None
    max_duration = None
    dynamic_params = True

    for segment in segments:
        config = segment.config
        if config is None:
            continue
        if config.fetch_cache is not None:
            fetch_cache = config.fetch_cache
        if config.preferred_region is not None:
            preferred_region = config.preferred_region
        if config.max_duration is not None:
            max_duration = config.max_duration
        if config.dynamic_params is False:
            dynamic_params = False

    return RoutePolicy(
        dynamic_mode=_reduce_dynamic_mode(segments),
        revalidate=_reduce_revalidate(segments),
        ppr_eligible=_is_ppr_eligible(segments, ppr),
        dynamic_params=dynamic_params,
        fetch_cache=fetch_cache,
        preferred_region=preferred_region,
        max_duration=max_duration,
    )
