"""Data models for segment collection and static path resolution.

Immutable frozen dataclasses representing the contributing segments of
a route, the reduced route-level policy, and the expanded static paths.
Built fresh for every resolution and never shared between routes.
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Literal, TypeAlias

from roost.routing.params import ParamValue, SegmentParam

ParamRecord: TypeAlias = dict[str, ParamValue]
Fallback: TypeAlias = bool | Literal["blocking"]
Revalidate: TypeAlias = int | float | Literal[False]
StaticParamsGenerator: TypeAlias = Callable[
    ..., Iterable[Mapping[str, Any]] | Awaitable[Iterable[Mapping[str, Any]]]
]


class DynamicMode(Enum):
    """Route-level rendering mode produced by the reducer."""

    STATIC = "static"
    DYNAMIC = "dynamic"
    FORCE_STATIC = "force-static"
    FORCE_DYNAMIC = "force-dynamic"


@dataclass(frozen=True, slots=True)
class SegmentConfig:
    """Recognized configuration keys declared by one segment module.

    A field left at ``None`` was not declared.  ``revalidate = False``
    is a declaration (never revalidate), distinct from ``None``.
    """

    revalidate: Revalidate | None = None
    dynamic: Literal["auto", "force-dynamic", "force-static", "error"] | None = None
    dynamic_params: bool | None = None
    fetch_cache: str | None = None
    preferred_region: str | tuple[str, ...] | None = None
    experimental_ppr: bool | None = None
    max_duration: int | float | None = None

    def declared_keys(self) -> tuple[str, ...]:
        """Names of the keys this segment actually declared."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)


@dataclass(frozen=True, slots=True)
class Segment:
    """One node along a route's path chain.

    Attributes:
        name: Literal path component (e.g. ``"blog"``, ``"[slug]"``).
        param: Parsed parameter for dynamic components, ``None`` otherwise.
        source_path: File that defines this segment, if any.
        config: Recognized configuration, if the module declared any.
        generator: The module's ``generate_static_params`` callable.
        is_dynamic: True when *name* is a bracketed placeholder.
    """

    name: str
    param: SegmentParam | None = None
    source_path: str | None = None
    config: SegmentConfig | None = None
    generator: StaticParamsGenerator | None = None
    is_dynamic: bool = False

    def __post_init__(self) -> None:
        if not self.is_dynamic and self.param is not None:
            msg = f"Static segment {self.name!r} cannot carry a parameter"
            raise ValueError(msg)

    @property
    def param_name(self) -> str | None:
        return self.param.name if self.param is not None else None

    @property
    def contributes(self) -> bool:
        """True if the segment carries config, a generator, or a parameter."""
        return self.config is not None or self.generator is not None or self.is_dynamic

    def describe(self) -> str:
        """Human-readable identity used in diagnostics."""
        if self.source_path:
            return f"{self.name!r} ({self.source_path})"
        return repr(self.name)


@dataclass(frozen=True, slots=True)
class RoutePolicy:
    """Route-level rendering policy folded from every segment's config.

    Computed once per resolution and consumed by the expander and by
    the external renderer.
    """

    dynamic_mode: DynamicMode = DynamicMode.STATIC
    revalidate: Revalidate = False
    ppr_eligible: bool = False
    dynamic_params: bool = True
    fetch_cache: str | None = None
    preferred_region: str | tuple[str, ...] | None = None
    max_duration: int | float | None = None


@dataclass(frozen=True, slots=True)
class StaticPathsResult:
    """Fully-resolved parameter combinations for one route.

    Attributes:
        paths: One record per pre-renderable path, in traversal order.
            Empty when the route has no dynamic segments (the single
            static shell is implicit) or when params can't be enumerated.
        fallback: Policy for requests whose params are not in *paths*:
            ``False`` (not found), ``True`` (serve a fallback shell,
            then render), or ``"blocking"`` (render synchronously).
        revalidate: Carried from the :class:`RoutePolicy`.
        pathnames: *paths* interpolated into the route URL, same order.
            Page-router paths carry their locale prefix here, so one
            record may appear once per locale.
    """

    paths: tuple[ParamRecord, ...] = ()
    fallback: Fallback = False
    revalidate: Revalidate = False
    pathnames: tuple[str, ...] = ()
