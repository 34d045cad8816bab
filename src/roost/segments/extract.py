"""Segment config and generator extraction from untrusted user modules.

User modules are loosely typed and often only partially correct, so
extraction never raises: anything that doesn't parse is treated as
"no configuration".

Recognized module-level names::

    revalidate = 60                      # seconds, or False
    dynamic = "force-static"             # auto | force-dynamic | force-static | error
    dynamic_params = False
    fetch_cache = "force-cache"
    preferred_region = ("iad1", "sfo1")
    experimental_ppr = True
    max_duration = 30

    async def generate_static_params(params): ...
"""

from __future__ import annotations

import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from roost.segments.types import SegmentConfig, StaticParamsGenerator

# Reserved name of the per-segment parameter generator
GENERATOR_NAME = "generate_static_params"

# Page-router modules list their paths with this instead
PATHS_FUNCTION_NAME = "get_static_paths"

_DYNAMIC_VALUES = frozenset({"auto", "force-dynamic", "force-static", "error"})

_FETCH_CACHE_VALUES = frozenset(
    {
        "auto",
        "default-cache",
        "only-cache",
        "force-cache",
        "force-no-store",
        "default-no-store",
        "only-no-store",
    }
)


class _Invalid(Exception):
    """Internal signal: a recognized key carried a value of the wrong shape."""


@dataclass(frozen=True, slots=True)
class Extraction:
    """What one module contributes to its segment."""

    config: SegmentConfig | None = None
    generator: StaticParamsGenerator | None = None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _check_revalidate(value: Any) -> Any:
    if value is False:
        return False
    if _is_number(value) and value >= 0:
        return value
    raise _Invalid


def _check_dynamic(value: Any) -> Any:
    if isinstance(value, str) and value in _DYNAMIC_VALUES:
        return value
    raise _Invalid


def _check_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    raise _Invalid


def _check_fetch_cache(value: Any) -> Any:
    if isinstance(value, str) and value in _FETCH_CACHE_VALUES:
        return value
    raise _Invalid


def _check_region(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise _Invalid


def _check_duration(value: Any) -> Any:
    if _is_number(value) and value >= 0:
        return value
    raise _Invalid


# field name → validator returning the normalized value
_SCHEMA: dict[str, Callable[[Any], Any]] = {
    "revalidate": _check_revalidate,
    "dynamic": _check_dynamic,
    "dynamic_params": _check_bool,
    "fetch_cache": _check_fetch_cache,
    "preferred_region": _check_region,
    "experimental_ppr": _check_bool,
    "max_duration": _check_duration,
}


def _namespace(exports: Any) -> Mapping[str, Any] | None:
    """Return a read-only view of *exports*' names, or None if unstructured."""
    if isinstance(exports, Mapping):
        return exports
    if isinstance(exports, types.ModuleType | types.SimpleNamespace):
        return vars(exports)
    return None


def parse_segment_config(exports: Any) -> SegmentConfig | None:
    """Parse the recognized configuration keys out of *exports*.

    Unknown names are ignored.  A recognized name bound to an invalid
    value fails the whole parse, and a parse that finds no recognized
    names yields ``None`` as well.
    """
    namespace = _namespace(exports)
    if namespace is None:
        return None

    values: dict[str, Any] = {}
    for name, check in _SCHEMA.items():
        if name not in namespace:
            continue
        raw = namespace[name]
        if raw is None:
            continue
        try:
            values[name] = check(raw)
        except _Invalid:
            return None

    if not values:
        return None
    return SegmentConfig(**values)


def extract(exports: Any) -> Extraction:
    """Extract a module's segment config and static params generator.

    Never raises; non-structured *exports* yield an empty
    :class:`Extraction`.  The generator is only checked for being
    callable; contract violations surface when it is invoked.
    """
    namespace = _namespace(exports)
    if namespace is None:
        return Extraction()

    generator = namespace.get(GENERATOR_NAME)
    if not callable(generator):
        generator = None

    return Extraction(config=parse_segment_config(namespace), generator=generator)


def paths_function(exports: Any) -> Callable[..., Any] | None:
    """Return a page-router module's ``get_static_paths``, if callable."""
    namespace = _namespace(exports)
    if namespace is None:
        return None
    func = namespace.get(PATHS_FUNCTION_NAME)
    return func if callable(func) else None


def is_client_module(exports: Any) -> bool:
    """Return True if *exports* belong to a client-only module.

    Client modules are opaque to build-time extraction.  A module marks
    itself client-only with ``__client__ = True`` or a docstring that
    reads exactly ``"use client"``.
    """
    namespace = _namespace(exports)
    if namespace is None:
        return False
    if namespace.get("__client__") is True:
        return True
    doc = namespace.get("__doc__")
    return isinstance(doc, str) and doc.strip() == "use client"
