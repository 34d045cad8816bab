"""Segment collection and configuration reduction.

Walks a route's segment chain, extracting each module's declared
configuration and ``generate_static_params``, then folds the configs
into one route-level policy.

Conventions (module-level names in ``layout.py``/``page.py``/``route.py``)::

    app/
      layout.py          # revalidate = 3600
      [lang]/
        layout.py        # def generate_static_params(params): ...
        blog/
          [slug]/
            page.py      # dynamic_params = False
"""

from roost.routing.params import ParamKind, SegmentParam
from roost.segments.collect import collect_segments
from roost.segments.extract import extract, is_client_module, parse_segment_config
from roost.segments.reduce import reduce_segments
from roost.segments.types import (
    DynamicMode,
    RoutePolicy,
    Segment,
    SegmentConfig,
    StaticPathsResult,
)

__all__ = [
    "DynamicMode",
    "ParamKind",
    "RoutePolicy",
    "Segment",
    "SegmentConfig",
    "SegmentParam",
    "StaticPathsResult",
    "collect_segments",
    "extract",
    "is_client_module",
    "parse_segment_config",
    "reduce_segments",
]
