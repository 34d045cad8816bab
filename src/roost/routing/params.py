"""Dynamic path component parsing.

Shared with request routing: a component wrapped in one bracket pair
is a parameter placeholder.

    [slug]        → single value          ("a")
    [...parts]    → catch-all             (("a", "b"))
    [[...parts]]  → optional catch-all    (("a", "b") or None)
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias
from urllib.parse import quote, unquote

ParamValue: TypeAlias = str | tuple[str, ...] | None


class ParamKind(Enum):
    """Arity of a dynamic segment's parameter."""

    SINGLE = "single"
    CATCH_ALL = "catch-all"
    OPTIONAL_CATCH_ALL = "optional-catch-all"


@dataclass(frozen=True, slots=True)
class SegmentParam:
    """The parameter declared by a dynamic path component.

    ``[slug]`` → ``SegmentParam("slug", SINGLE)``
    ``[...parts]`` → ``SegmentParam("parts", CATCH_ALL)``
    ``[[...parts]]`` → ``SegmentParam("parts", OPTIONAL_CATCH_ALL)``
    """

    name: str
    kind: ParamKind = ParamKind.SINGLE

    @property
    def is_catch_all(self) -> bool:
        """True when the bound value is a sequence of strings."""
        return self.kind is not ParamKind.SINGLE


# Regex matching any bracket-wrapped component
_DYNAMIC_RE = re.compile(r"^\[.*\]$")

# (regex, kind) checked in order; optional catch-all must win over catch-all
_PARAM_PATTERNS: tuple[tuple[re.Pattern[str], ParamKind], ...] = (
    (re.compile(r"^\[\[\.\.\.(\w+)\]\]$"), ParamKind.OPTIONAL_CATCH_ALL),
    (re.compile(r"^\[\.\.\.(\w+)\]$"), ParamKind.CATCH_ALL),
    (re.compile(r"^\[(\w+)\]$"), ParamKind.SINGLE),
)


def is_dynamic_segment(name: str) -> bool:
    """Return True if *name* is fully wrapped in a bracket pair."""
    return _DYNAMIC_RE.match(name) is not None


def parse_segment_param(name: str) -> SegmentParam | None:
    """Parse a path component into its parameter, or ``None``.

    Returns ``None`` for literal components and for bracketed components
    whose interior is not a valid identifier (``[]``, ``[a-b]``).
    """
    for pattern, kind in _PARAM_PATTERNS:
        match = pattern.match(name)
        if match:
            return SegmentParam(match.group(1), kind)
    return None


def interpolate_pathname(pathname: str, params: Mapping[str, ParamValue]) -> str:
    """Substitute *params* into a bracketed *pathname*.

    Each value is percent-encoded as one path component.  Catch-all
    values contribute one component per element; an optional catch-all
    bound to ``None`` or ``()`` drops its component entirely.

    Raises ``KeyError`` if a placeholder has no value in *params*.
    """
    parts: list[str] = []
    for component in pathname.split("/"):
        if not component:
            continue
        param = parse_segment_param(component)
        if param is None:
            parts.append(component)
            continue
        value = params[param.name]
        if value is None:
            continue
        if isinstance(value, str):
            parts.append(quote(value, safe=""))
        else:
            parts.extend(quote(v, safe="") for v in value)
    return "/" + "/".join(parts)


def match_pathname(pathname: str, url: str) -> dict[str, ParamValue] | None:
    """Match a concrete *url* against a bracketed *pathname*.

    Returns the decoded params on a match, ``None`` otherwise.  A
    catch-all consumes every component not needed by the placeholders
    after it; an optional catch-all that consumes nothing binds ``None``.

        >>> match_pathname("/blog/[slug]", "/blog/hello%20world")
        {'slug': 'hello world'}
    """
    pattern = [c for c in pathname.split("/") if c]
    components = [unquote(c) for c in url.split("/") if c]
    params: dict[str, ParamValue] = {}

    i = 0
    for j, component in enumerate(pattern):
        param = parse_segment_param(component)
        if param is None or param.kind is ParamKind.SINGLE:
            if i >= len(components):
                return None
            if param is None:
                if components[i] != component:
                    return None
            else:
                params[param.name] = components[i]
            i += 1
            continue

        take = len(components) - i - (len(pattern) - j - 1)
        if take < 0 or (take == 0 and param.kind is ParamKind.CATCH_ALL):
            return None
        params[param.name] = tuple(components[i : i + take]) or None
        i += take

    if i != len(components):
        return None
    return params
