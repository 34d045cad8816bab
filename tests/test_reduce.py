"""Tests for roost.segments.reduce — route policy precedence."""

import itertools

import pytest

from roost.routing.params import SegmentParam
from roost.segments.reduce import reduce_segments
from roost.segments.types import DynamicMode, RoutePolicy, Segment, SegmentConfig


def _gen(params):
    return []


def _seg(name: str = "x", **config: object) -> Segment:
    return Segment(name=name, config=SegmentConfig(**config) if config else None)


def _dyn(name: str, **config: object) -> Segment:
    return Segment(
        name=f"[{name}]",
        param=SegmentParam(name),
        is_dynamic=True,
        config=SegmentConfig(**config) if config else None,
    )


class TestDynamicMode:
    def test_empty_chain_is_static(self) -> None:
        assert reduce_segments([]) == RoutePolicy()

    def test_static_configs_only(self) -> None:
        assert reduce_segments([_seg(revalidate=10)]).dynamic_mode is DynamicMode.STATIC

    def test_dynamic_segment_makes_route_dynamic(self) -> None:
        assert reduce_segments([_dyn("id")]).dynamic_mode is DynamicMode.DYNAMIC

    def test_generator_makes_route_dynamic(self) -> None:
        segment = Segment(name="blog", generator=_gen)
        assert reduce_segments([segment]).dynamic_mode is DynamicMode.DYNAMIC

    def test_force_dynamic_overrides_everything(self) -> None:
        segments = [_seg(dynamic="force-static"), _dyn("id"), _seg(dynamic="force-dynamic")]
        assert reduce_segments(segments).dynamic_mode is DynamicMode.FORCE_DYNAMIC
        segments = [_seg(dynamic="force-dynamic"), _seg(dynamic="force-static")]
        assert reduce_segments(segments).dynamic_mode is DynamicMode.FORCE_DYNAMIC

    @pytest.mark.parametrize("value", ["force-static", "error"])
    def test_force_static(self, value: str) -> None:
        segments = [_dyn("id"), _seg(dynamic=value)]
        assert reduce_segments(segments).dynamic_mode is DynamicMode.FORCE_STATIC

    def test_auto_is_not_a_directive(self) -> None:
        assert reduce_segments([_seg(dynamic="auto")]).dynamic_mode is DynamicMode.STATIC


class TestRevalidate:
    def test_default_is_false(self) -> None:
        assert reduce_segments([_dyn("id")]).revalidate is False

    def test_minimum_finite_value_wins(self) -> None:
        segments = [_seg(revalidate=60), _seg(revalidate=10), _seg(revalidate=30)]
        assert reduce_segments(segments).revalidate == 10

    def test_leaf_finite_overrides_root_false(self) -> None:
        segments = [_seg("root", revalidate=False), _seg("leaf", revalidate=60)]
        assert reduce_segments(segments).revalidate == 60

    def test_leaf_false_overrides_root_finite(self) -> None:
        segments = [_seg("root", revalidate=60), _seg("leaf", revalidate=False)]
        assert reduce_segments(segments).revalidate is False

    def test_finite_after_false_does_not_see_earlier_values(self) -> None:
        segments = [_seg(revalidate=5), _seg(revalidate=False), _seg(revalidate=60)]
        assert reduce_segments(segments).revalidate == 60

    def test_zero_is_finite(self) -> None:
        segments = [_seg(revalidate=False), _seg(revalidate=0)]
        assert reduce_segments(segments).revalidate == 0


class TestDynamicParams:
    def test_defaults_to_true(self) -> None:
        assert reduce_segments([_dyn("id")]).dynamic_params is True

    def test_false_anywhere_wins(self) -> None:
        segments = [_dyn("lang", dynamic_params=False), _dyn("slug", dynamic_params=True)]
        assert reduce_segments(segments).dynamic_params is False


class TestPPR:
    def test_disabled_flag(self) -> None:
        assert reduce_segments([_seg(experimental_ppr=True)], ppr=False).ppr_eligible is False

    def test_enabled_flag(self) -> None:
        assert reduce_segments([_dyn("id")], ppr=True).ppr_eligible is True

    def test_segment_opt_out(self) -> None:
        segments = [_seg(experimental_ppr=True), _seg(experimental_ppr=False)]
        assert reduce_segments(segments, ppr=True).ppr_eligible is False

    def test_incremental_requires_opt_in(self) -> None:
        assert reduce_segments([_dyn("id")], ppr="incremental").ppr_eligible is False
        segments = [_seg(experimental_ppr=True), _dyn("id")]
        assert reduce_segments(segments, ppr="incremental").ppr_eligible is True

    def test_incremental_opt_out_wins(self) -> None:
        segments = [_seg(experimental_ppr=True), _seg(experimental_ppr=False)]
        assert reduce_segments(segments, ppr="incremental").ppr_eligible is False


class TestHints:
    def test_leaf_most_declaration_wins(self) -> None:
        segments = [
            _seg(fetch_cache="force-cache", preferred_region="iad1", max_duration=10),
            _seg(fetch_cache="force-no-store"),
            _seg(max_duration=30),
        ]
        policy = reduce_segments(segments)
        assert policy.fetch_cache == "force-no-store"
        assert policy.preferred_region == "iad1"
        assert policy.max_duration == 30


class TestProperties:
    def test_idempotent(self) -> None:
        segments = [_seg(revalidate=30), _dyn("id", dynamic_params=False)]
        assert reduce_segments(segments, ppr=True) == reduce_segments(segments, ppr=True)

    def test_order_independent_without_dynamic_or_revalidate(self) -> None:
        segments = [
            _dyn("lang", experimental_ppr=True),
            _dyn("slug", dynamic_params=False),
            Segment(name="blog", generator=_gen),
            _seg("docs"),
        ]
        expected = reduce_segments(segments, ppr="incremental")
        for permutation in itertools.permutations(segments):
            assert reduce_segments(list(permutation), ppr="incremental") == expected
