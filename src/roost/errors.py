"""Roost exception hierarchy.

Shared across the walker, expander, and orchestrator so every module
raises and catches the same types.  Malformed segment configuration is
deliberately absent: it is treated as "no configuration", never raised.
"""


class RoostError(Exception):
    """Base for all roost-specific errors.

    ``route_id`` is filled in by the orchestrator once the error has
    crossed a route boundary, so build tooling can attribute it.
    """

    route_id: str | None = None


class ConfigurationError(RoostError):
    """Raised when a :class:`~roost.config.ResolverConfig` is invalid."""


class StructureError(RoostError):
    """The route definition is internally inconsistent.

    Examples: a path-based route with zero components, a dynamic
    component without a parameter name, or a route kind that matches
    neither supported variant.
    """


class ConflictError(RoostError):
    """Two sources claim the same parameter name.

    Raised when two dynamic segments at different depths declare the
    same parameter, or when a generator returns a record that reuses an
    ancestor's parameter.
    """

    def __init__(self, message: str, first: str, second: str) -> None:
        super().__init__(message)
        self.first = first
        self.second = second


class GeneratorError(RoostError):
    """A user-supplied parameter generator failed or returned malformed data.

    Carries the originating segment and its source file so the build
    tool can point the user at the failing module.  When the generator
    itself raised, the original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, segment: str, source_path: str | None = None) -> None:
        super().__init__(message)
        self.segment = segment
        self.source_path = source_path

    def __str__(self) -> str:
        base = super().__str__()
        if self.source_path:
            return f"{base} (in {self.source_path})"
        return base
