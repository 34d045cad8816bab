"""Invoke helpers — call sync or async parameter generators uniformly.

``generate_static_params`` and ``get_static_paths`` can be ``def`` or
``async def``.  Every call site goes through :func:`invoke` so the
sync/async check lives in exactly one place.

Usage::

    from roost._internal.invoke import invoke

    records = await invoke(segment.generator, params=parent)
"""

import inspect
from typing import Any


async def invoke(generator: Any, **kwargs: Any) -> Any:
    """Call a user generator with keyword arguments and return its result.

    Generators receive their inputs by keyword (``params=`` for segment
    generators, ``locales=`` and ``default_locale=`` for page-router
    path functions).  A coroutine result is awaited; anything else,
    including a plain iterable of records, is returned unchanged::

        def generate_static_params(params):
            return [{"slug": "a"}]

        async def generate_static_params(params):
            posts = await fetch_posts(params["lang"])
            return [{"slug": p.slug} for p in posts]
    """
    result = generator(**kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
