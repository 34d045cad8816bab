"""Roost — build-time static path and rendering policy resolution.

Computes, for each route of an app directory, the concrete URL paths to
prerender and the route's rendering policy (static, dynamic, or
partially prerendered with a deferred dynamic region).

Basic usage::

    from roost import AppDirLoader, ResolverConfig, resolve_route_sync

    loader = AppDirLoader("app")
    resolved = resolve_route_sync("/[lang]/blog/[slug]", loader)
    resolved.static_paths.paths     # ({"lang": "en", "slug": "a"}, ...)
    resolved.static_paths.fallback  # False, True, or "blocking"

Whole builds::

    manifest = await build_manifest(loader.route_ids(), loader, ResolverConfig(ppr=True))
    Path("prerender-manifest.json").write_text(manifest.to_json())
"""

__version__ = "0.1.0-dev"
__all__ = [
    "AppDirLoader",
    "ConfigurationError",
    "ConflictError",
    "DynamicMode",
    "GeneratorError",
    "PagesDirLoader",
    "PrerenderManifest",
    "ResolvedRoute",
    "ResolverConfig",
    "RoostError",
    "RoutePolicy",
    "StaticPathsResult",
    "StructureError",
    "build_manifest",
    "resolve_route",
    "resolve_route_sync",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name in ("AppDirLoader", "PagesDirLoader"):
        from roost.routing import discovery as _discovery

        return getattr(_discovery, name)

    if name == "ResolverConfig":
        from roost.config import ResolverConfig

        return ResolverConfig

    if name in ("DynamicMode", "RoutePolicy", "StaticPathsResult"):
        from roost.segments import types as _types

        return getattr(_types, name)

    if name in (
        "PrerenderManifest",
        "ResolvedRoute",
        "build_manifest",
        "resolve_route",
        "resolve_route_sync",
    ):
        from roost import resolve as _resolve

        return getattr(_resolve, name)

    if name in (
        "ConfigurationError",
        "ConflictError",
        "GeneratorError",
        "RoostError",
        "StructureError",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
