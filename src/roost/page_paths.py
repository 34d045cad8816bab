"""Static paths for page-router pages.

A page-router module lists its own paths and fallback instead of
contributing generators segment by segment::

    def get_static_paths(locales, default_locale):
        return {
            "paths": [
                "/blog/hello",
                {"params": {"slug": "bonjour"}, "locale": "fr"},
            ],
            "fallback": "blocking",
        }

Entries are either concrete URLs (matched against the page's pathname)
or mappings with ``params`` and an optional ``locale``.  When locales
are configured every path is prefixed with its locale, the default
locale standing in for entries that name none.  Duplicates collapse on
the final pathname.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from roost._internal.invoke import invoke
from roost.errors import ConflictError, GeneratorError, RoostError, StructureError
from roost.routing.definition import PagesRoute
from roost.routing.params import (
    ParamKind,
    ParamValue,
    SegmentParam,
    interpolate_pathname,
    is_dynamic_segment,
    match_pathname,
    parse_segment_param,
)
from roost.segments.extract import PATHS_FUNCTION_NAME, paths_function
from roost.segments.types import Fallback, ParamRecord, StaticPathsResult

logger = logging.getLogger("roost.page_paths")

_RESULT_KEYS = frozenset({"paths", "fallback"})
_ENTRY_KEYS = frozenset({"params", "locale"})

_MISSING: Any = object()


def _error(route: PagesRoute, detail: str) -> GeneratorError:
    msg = f"{PATHS_FUNCTION_NAME} for page {route.pathname!r} {detail}"
    return GeneratorError(msg, route.pathname, route.module.path)


def page_params(route: PagesRoute) -> list[SegmentParam]:
    """Parameters declared by the page's pathname, in URL order.

    Raises:
        StructureError: A bracketed component has no valid name.
        ConflictError: Two components declare the same name.
    """
    params: list[SegmentParam] = []
    for component in route.pathname.split("/"):
        if not is_dynamic_segment(component):
            continue
        param = parse_segment_param(component)
        if param is None:
            msg = f"Dynamic segment {component!r} of {route.pathname!r} has no parameter name"
            raise StructureError(msg)
        if any(p.name == param.name for p in params):
            msg = f"Parameter {param.name!r} is declared twice in {route.pathname!r}"
            raise ConflictError(msg, route.pathname, component)
        params.append(param)
    return params


def _validate_result(route: PagesRoute, result: Any) -> tuple[Sequence[Any], Fallback]:
    if not isinstance(result, Mapping):
        raise _error(
            route,
            f"must return a mapping with 'paths' and 'fallback', received {type(result).__name__}",
        )
    extra = set(result) - _RESULT_KEYS
    if extra:
        raise _error(route, f"returned extra keys {sorted(extra)}, expected 'paths' and 'fallback'")

    fallback = result.get("fallback", _MISSING)
    if not (isinstance(fallback, bool) or fallback == "blocking"):
        shown = "nothing" if fallback is _MISSING else repr(fallback)
        raise _error(route, f"must return fallback as True, False or 'blocking', received {shown}")

    paths = result.get("paths")
    if not isinstance(paths, list | tuple):
        raise _error(route, f"must return paths as a list, received {type(paths).__name__}")
    return paths, fallback


def _coerce(route: PagesRoute, param: SegmentParam, value: Any) -> ParamValue:
    if value is _MISSING and param.kind is not ParamKind.OPTIONAL_CATCH_ALL:
        raise _error(route, f"returned params without {param.name!r}")

    if param.kind is ParamKind.SINGLE:
        if isinstance(value, str):
            return value
        raise _error(route, f"must provide {param.name!r} as a string, received {value!r}")

    if param.kind is ParamKind.OPTIONAL_CATCH_ALL and (value is _MISSING or value is None):
        return None
    if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
        if value:
            return tuple(value)
        if param.kind is ParamKind.OPTIONAL_CATCH_ALL:
            return None
    raise _error(
        route,
        f"must provide {param.name!r} as a non-empty list of strings, received {value!r}",
    )


def _from_url(
    route: PagesRoute,
    entry: str,
    locales: Sequence[str],
) -> tuple[ParamRecord, str | None]:
    url = entry
    locale = None
    components = [c for c in entry.split("/") if c]
    if locales and components and components[0] in locales:
        locale = components[0]
        url = "/" + "/".join(components[1:])

    record = match_pathname(route.pathname, url)
    if record is None:
        raise _error(route, f"returned path {entry!r}, which does not match the page")
    return record, locale


def _from_mapping(
    route: PagesRoute,
    entry: Mapping[str, Any],
    params: Sequence[SegmentParam],
    locales: Sequence[str],
) -> tuple[ParamRecord, str | None]:
    extra = set(entry) - _ENTRY_KEYS
    if extra:
        raise _error(route, f"returned a path with extra keys {sorted(extra)}")

    values = entry.get("params")
    if not isinstance(values, Mapping):
        raise _error(route, f"returned a path without a 'params' mapping: {entry!r}")

    locale = entry.get("locale")
    if locale is not None and locale not in locales:
        raise _error(route, f"returned a path with unknown locale {locale!r}")

    # Keys naming no placeholder are ignored
    record = {p.name: _coerce(route, p, values.get(p.name, _MISSING)) for p in params}
    return record, locale


async def build_page_paths(
    route: PagesRoute,
    *,
    locales: Sequence[str] = (),
    default_locale: str | None = None,
) -> StaticPathsResult:
    """Call the page's ``get_static_paths`` and validate what it returns.

    A page without dynamic components yields no paths and never calls the
    function.  A dynamic page without one is rendered on demand
    (``fallback="blocking"``, no paths).

    Raises:
        GeneratorError: The function raised or returned malformed data.
    """
    params = page_params(route)
    if not params:
        return StaticPathsResult()

    get_static_paths = paths_function(route.module.exports)
    if get_static_paths is None:
        logger.debug("Page %s has no %s", route.pathname, PATHS_FUNCTION_NAME)
        return StaticPathsResult(fallback="blocking")

    try:
        result = await invoke(
            get_static_paths,
            locales=list(locales),
            default_locale=default_locale,
        )
    except RoostError:
        raise
    except Exception as exc:
        raise _error(route, f"failed: {exc}") from exc

    entries, fallback = _validate_result(route, result)

    records: list[ParamRecord] = []
    pathnames: list[str] = []
    seen: set[str] = set()
    for entry in entries:
        if isinstance(entry, str):
            record, locale = _from_url(route, entry, locales)
        elif isinstance(entry, Mapping):
            record, locale = _from_mapping(route, entry, params, locales)
        else:
            raise _error(route, f"returned a {type(entry).__name__} path, expected str or mapping")

        built = interpolate_pathname(route.pathname, record)
        if locales:
            prefix = locale or default_locale
            built = f"/{prefix}" if built == "/" else f"/{prefix}{built}"
        if built in seen:
            continue
        seen.add(built)
        records.append(record)
        pathnames.append(built)

    logger.info(
        "Resolved %d static path(s) for page %s (fallback=%r)",
        len(pathnames),
        route.pathname,
        fallback,
    )
    return StaticPathsResult(
        paths=tuple(records),
        fallback=fallback,
        pathnames=tuple(pathnames),
    )
