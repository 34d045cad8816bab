"""Resolver configuration.

ResolverConfig is a frozen dataclass — immutable after creation, passed
explicitly into every resolution instead of living in a process-wide
registry.
"""

from dataclasses import dataclass
from typing import Literal, TypeAlias

from roost.errors import ConfigurationError

PPRMode: TypeAlias = bool | Literal["incremental"]


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Build-time resolution settings. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ResolverConfig(ppr="incremental", concurrency=16)
    """

    # Experimental partial prerendering: True, False, or "incremental"
    # (only routes that opt in with ``experimental_ppr = True``)
    ppr: PPRMode = False

    # Serve a generated fallback shell for un-enumerated params on
    # PPR-eligible page routes (otherwise hold the request and render)
    ppr_fallbacks: bool = True

    # Max generator invocations in flight per tree depth
    concurrency: int = 8

    # Page-router i18n: paths are prefixed with their locale
    locales: tuple[str, ...] = ()
    default_locale: str | None = None

    def __post_init__(self) -> None:
        if self.ppr not in (True, False, "incremental"):
            msg = f"ppr must be True, False, or 'incremental', got {self.ppr!r}"
            raise ConfigurationError(msg)
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            msg = f"concurrency must be an int, got {type(self.concurrency).__name__}"
            raise ConfigurationError(msg)
        if self.concurrency < 1:
            msg = f"concurrency must be at least 1, got {self.concurrency}"
            raise ConfigurationError(msg)
        if not isinstance(self.locales, tuple) or not all(
            isinstance(locale, str) and locale for locale in self.locales
        ):
            msg = f"locales must be a tuple of non-empty strings, got {self.locales!r}"
            raise ConfigurationError(msg)
        if self.default_locale is not None and self.default_locale not in self.locales:
            msg = f"default_locale {self.default_locale!r} is not one of {self.locales!r}"
            raise ConfigurationError(msg)
        if self.locales and self.default_locale is None:
            msg = "default_locale is required when locales are configured"
            raise ConfigurationError(msg)
