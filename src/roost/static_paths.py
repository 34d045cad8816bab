"""Nested static parameter expansion.

Walks the contributing segments root → leaf, invoking each segment's
``generate_static_params`` once per parameter record resolved so far.
Each call receives its parent's resolved params, so one lineage is
strictly sequential across depths, while calls for sibling records at
the same depth run concurrently (bounded by a capacity limiter).

Pipeline::

    segments:  [lang]            blog          [slug]
    records:   {}  ──gen──▶  {lang: en}  ──▶  {lang: en, slug: a}
                         └─▶ {lang: fr}  ──▶  {lang: fr, slug: a}
                                         └─▶  {lang: fr, slug: b}

A generator on a non-dynamic segment (usually a page below its dynamic
directories) filters its parent records and may fill in the params of
dynamic segments that have no generator of their own.

Results are reassembled in parent order, so the output order is the
traversal order regardless of which generator finished first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import anyio

from roost._internal.invoke import invoke
from roost.errors import ConflictError, GeneratorError, RoostError, StructureError
from roost.routing.params import ParamKind, ParamValue, interpolate_pathname
from roost.segments.types import (
    DynamicMode,
    Fallback,
    ParamRecord,
    RoutePolicy,
    Segment,
    StaticPathsResult,
)

logger = logging.getLogger("roost.static_paths")

_MISSING: Any = object()


def _check_param_conflicts(dynamic: Sequence[Segment]) -> dict[str, Segment]:
    """Map each parameter name to its segment, rejecting duplicates."""
    owners: dict[str, Segment] = {}
    for segment in dynamic:
        name = segment.param_name
        if name is None:
            msg = f"Dynamic segment {segment.describe()} has no parameter name"
            raise StructureError(msg)
        if name in owners:
            first = owners[name]
            msg = (
                f"Parameter {name!r} is declared by both {first.describe()} "
                f"and {segment.describe()}"
            )
            raise ConflictError(msg, first.describe(), segment.describe())
        owners[name] = segment
    return owners


def _derive_fallback(policy: RoutePolicy, fallback_shells: bool) -> Fallback:
    if not policy.dynamic_params:
        return False
    return True if fallback_shells else "blocking"


def _comparable(value: Any) -> Any:
    if isinstance(value, list | tuple):
        return tuple(value)
    return value


def _normalize_value(segment: Segment, value: Any, origin: Segment | None = None) -> ParamValue:
    """Validate a generated value against *segment*'s parameter arity.

    Errors are attributed to *origin*, the segment whose generator
    produced the value (defaults to *segment* itself).
    """
    param = segment.param
    if param is None:
        msg = f"Dynamic segment {segment.describe()} has no parameter name"
        raise StructureError(msg)
    origin = origin or segment

    if value is _MISSING and param.kind is not ParamKind.OPTIONAL_CATCH_ALL:
        msg = (
            f"A required parameter ({param.name}) was not provided "
            f"in generate_static_params for segment {origin.name!r}"
        )
        raise GeneratorError(msg, origin.name, origin.source_path)

    if param.kind is ParamKind.SINGLE:
        if isinstance(value, str):
            return value
        msg = (
            f"A required parameter ({param.name}) was not provided as a string "
            f"in generate_static_params for segment {origin.name!r}, received {value!r}"
        )
        raise GeneratorError(msg, origin.name, origin.source_path)

    if param.kind is ParamKind.OPTIONAL_CATCH_ALL and (value is _MISSING or value is None):
        return None

    if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
        if value:
            return tuple(value)
        if param.kind is ParamKind.OPTIONAL_CATCH_ALL:
            return None

    msg = (
        f"A required parameter ({param.name}) was not provided as a non-empty list of strings "
        f"in generate_static_params for segment {origin.name!r}, received {value!r}"
    )
    raise GeneratorError(msg, origin.name, origin.source_path)


async def _call_generator(segment: Segment, parent: ParamRecord) -> list[Mapping[str, Any]]:
    """Invoke the segment's generator for one parent record."""
    if segment.generator is None:
        msg = f"Segment {segment.describe()} has no generate_static_params to call"
        raise StructureError(msg)
    try:
        result = await invoke(segment.generator, params=dict(parent))
        if result is None or isinstance(result, str | bytes | Mapping):
            msg = (
                f"generate_static_params for segment {segment.name!r} must return "
                f"a list of params, received {type(result).__name__}"
            )
            raise GeneratorError(msg, segment.name, segment.source_path)
        items = list(result)
    except RoostError:
        raise
    except Exception as exc:
        msg = f"generate_static_params failed for segment {segment.name!r}: {exc}"
        raise GeneratorError(msg, segment.name, segment.source_path) from exc

    for item in items:
        if not isinstance(item, Mapping):
            msg = (
                f"generate_static_params for segment {segment.name!r} returned "
                f"{type(item).__name__}, expected a mapping of params"
            )
            raise GeneratorError(msg, segment.name, segment.source_path)
    return items


def _merge_dynamic(
    segment: Segment,
    parent: ParamRecord,
    items: Iterable[Mapping[str, Any]],
    owners: Mapping[str, Segment],
) -> list[ParamRecord]:
    """Combine *parent* with every value the segment generated for it."""
    name = segment.param_name
    if name is None:
        msg = f"Dynamic segment {segment.describe()} has no parameter name"
        raise StructureError(msg)

    merged: list[ParamRecord] = []
    for item in items:
        for key in item:
            if key in parent:
                first = owners[key].describe() if key in owners else repr(key)
                msg = (
                    f"generate_static_params for {segment.describe()} returned parameter "
                    f"{key!r}, which is already resolved by {first}"
                )
                raise ConflictError(msg, first, segment.describe())
            if key in owners and key != name:
                first = owners[key].describe()
                msg = (
                    f"generate_static_params for {segment.describe()} returned parameter "
                    f"{key!r}, which belongs to {first}"
                )
                raise ConflictError(msg, first, segment.describe())
            if key != name:
                msg = (
                    f"generate_static_params for segment {segment.name!r} returned "
                    f"unknown parameter {key!r}, expected only {name!r}"
                )
                raise GeneratorError(msg, segment.name, segment.source_path)
        value = _normalize_value(segment, item.get(name, _MISSING))
        merged.append({**parent, name: value})
    return merged


def _merge_static(
    segment: Segment,
    parent: ParamRecord,
    items: Sequence[Mapping[str, Any]],
    owners: Mapping[str, Segment],
) -> list[ParamRecord]:
    """Apply a non-dynamic segment's generator to *parent*.

    Such a generator (typically a ``page.py`` below its dynamic
    directories) may supply params for dynamic segments that have not
    been resolved yet, or re-affirm values *parent* already holds.  An
    empty result rejects the parent.
    """
    merged: list[ParamRecord] = []
    for item in items:
        record = dict(parent)
        for key, value in item.items():
            owner = owners.get(key)
            if key in parent:
                if owner is not None:
                    value = _normalize_value(owner, value, segment)
                if _comparable(value) != parent[key]:
                    first = owner.describe() if owner is not None else repr(key)
                    msg = (
                        f"generate_static_params for {segment.describe()} returned "
                        f"{key}={value!r}, conflicting with {parent[key]!r} from {first}"
                    )
                    raise ConflictError(msg, first, segment.describe())
                continue
            if owner is None:
                msg = (
                    f"generate_static_params for segment {segment.name!r} returned "
                    f"unknown parameter {key!r}, expected one of {sorted(owners)}"
                )
                raise GeneratorError(msg, segment.name, segment.source_path)
            record[key] = _normalize_value(owner, value, segment)
        merged.append(record)
    return merged


async def _expand_level(
    segment: Segment,
    parents: Sequence[ParamRecord],
    owners: Mapping[str, Segment],
    limiter: anyio.CapacityLimiter,
) -> list[ParamRecord]:
    """Run one segment's generator for every parent record.

    The first failure cancels the remaining invocations and is raised
    as-is; no partial results escape.
    """
    results: list[list[ParamRecord]] = [[] for _ in parents]
    failures: list[RoostError] = []

    async def _resolve(index: int, parent: ParamRecord) -> None:
        try:
            async with limiter:
                items = await _call_generator(segment, parent)
            if segment.is_dynamic:
                results[index] = _merge_dynamic(segment, parent, items, owners)
            else:
                results[index] = _merge_static(segment, parent, items, owners)
        except RoostError as exc:
            if not failures:
                failures.append(exc)
            tg.cancel_scope.cancel()

    async with anyio.create_task_group() as tg:
        for index, parent in enumerate(parents):
            tg.start_soon(_resolve, index, parent)

    if failures:
        raise failures[0]

    return [record for group in results for record in group]


def _dedupe(records: Iterable[ParamRecord]) -> tuple[ParamRecord, ...]:
    seen: set[frozenset[tuple[str, ParamValue]]] = set()
    unique: list[ParamRecord] = []
    for record in records:
        key = frozenset(record.items())
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return tuple(unique)


async def expand_static_paths(
    segments: Sequence[Segment],
    policy: RoutePolicy,
    *,
    pathname: str | None = None,
    fallback_shells: bool = False,
    concurrency: int = 8,
) -> StaticPathsResult:
    """Expand every concrete parameter combination for a route.

    Args:
        segments: Contributing segments, root first (from the walker).
        policy: The route's reduced policy.
        pathname: Bracketed route URL; when given, ``pathnames`` is filled.
        fallback_shells: Whether the route can serve a generated fallback
            shell for un-enumerated params.
        concurrency: Max generator calls in flight per depth.

    Raises:
        ConflictError: Two segments claim the same parameter name.
        GeneratorError: A generator raised or returned malformed data.
    """
    dynamic = [s for s in segments if s.is_dynamic]
    if not dynamic:
        return StaticPathsResult(paths=(), fallback=False, revalidate=policy.revalidate)

    owners = _check_param_conflicts(dynamic)
    fallback = _derive_fallback(policy, fallback_shells)

    if policy.dynamic_mode is DynamicMode.FORCE_DYNAMIC:
        logger.debug("Skipping param enumeration for force-dynamic route %s", pathname)
        return StaticPathsResult(paths=(), fallback=fallback, revalidate=policy.revalidate)

    limiter = anyio.CapacityLimiter(concurrency)
    records: list[ParamRecord] = [{}]
    for segment in segments:
        if segment.generator is None:
            if segment.is_dynamic:
                logger.debug("Segment %r has no generate_static_params", segment.name)
            continue
        if not records:
            break
        records = await _expand_level(segment, records, owners, limiter)
        logger.debug("Segment %r expanded to %d record(s)", segment.name, len(records))

    expected = set(owners)
    paths = _dedupe(r for r in records if set(r) == expected)

    pathnames: tuple[str, ...] = ()
    if pathname is not None:
        pathnames = tuple(interpolate_pathname(pathname, p) for p in paths)

    logger.info(
        "Resolved %d static path(s) for %s (fallback=%r)",
        len(paths),
        pathname or "<route>",
        fallback,
    )
    return StaticPathsResult(
        paths=paths,
        fallback=fallback,
        revalidate=policy.revalidate,
        pathnames=pathnames,
    )
