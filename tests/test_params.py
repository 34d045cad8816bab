"""Tests for roost.routing.params — dynamic component parsing."""

import pytest

from roost.routing.params import (
    ParamKind,
    SegmentParam,
    interpolate_pathname,
    is_dynamic_segment,
    match_pathname,
    parse_segment_param,
)


class TestIsDynamicSegment:
    @pytest.mark.parametrize("name", ["[slug]", "[...parts]", "[[...parts]]", "[]"])
    def test_bracketed(self, name: str) -> None:
        assert is_dynamic_segment(name) is True

    @pytest.mark.parametrize("name", ["blog", "", "(marketing)", "@modal", "[slug", "x[slug]"])
    def test_literal(self, name: str) -> None:
        assert is_dynamic_segment(name) is False


class TestParseSegmentParam:
    def test_single(self) -> None:
        assert parse_segment_param("[slug]") == SegmentParam("slug", ParamKind.SINGLE)

    def test_catch_all(self) -> None:
        param = parse_segment_param("[...parts]")
        assert param == SegmentParam("parts", ParamKind.CATCH_ALL)
        assert param.is_catch_all is True

    def test_optional_catch_all(self) -> None:
        param = parse_segment_param("[[...parts]]")
        assert param == SegmentParam("parts", ParamKind.OPTIONAL_CATCH_ALL)
        assert param.is_catch_all is True

    def test_single_is_not_catch_all(self) -> None:
        assert parse_segment_param("[id]").is_catch_all is False

    @pytest.mark.parametrize("name", ["blog", "[]", "[a-b]", "[[slug]]", "[..slug]"])
    def test_not_a_param(self, name: str) -> None:
        assert parse_segment_param(name) is None


class TestInterpolatePathname:
    def test_single_params(self) -> None:
        path = interpolate_pathname("/[lang]/blog/[slug]", {"lang": "en", "slug": "a"})
        assert path == "/en/blog/a"

    def test_catch_all_expands_components(self) -> None:
        path = interpolate_pathname("/docs/[...parts]", {"parts": ("api", "v2")})
        assert path == "/docs/api/v2"

    def test_absent_optional_catch_all_drops_component(self) -> None:
        assert interpolate_pathname("/shop/[[...filters]]", {"filters": None}) == "/shop"
        assert interpolate_pathname("/[[...all]]", {"all": None}) == "/"

    def test_values_are_encoded(self) -> None:
        path = interpolate_pathname("/tags/[tag]", {"tag": "c/c++ & more"})
        assert path == "/tags/c%2Fc%2B%2B%20%26%20more"

    def test_static_path(self) -> None:
        assert interpolate_pathname("/about", {}) == "/about"

    def test_missing_value_raises(self) -> None:
        with pytest.raises(KeyError):
            interpolate_pathname("/[slug]", {})


class TestMatchPathname:
    def test_single(self) -> None:
        assert match_pathname("/blog/[slug]", "/blog/hello") == {"slug": "hello"}

    def test_values_are_decoded(self) -> None:
        assert match_pathname("/tags/[tag]", "/tags/c%2B%2B%20more") == {"tag": "c++ more"}

    def test_catch_all_before_literal(self) -> None:
        params = match_pathname("/docs/[...parts]/edit", "/docs/a/b/edit")
        assert params == {"parts": ("a", "b")}

    def test_optional_catch_all_may_match_nothing(self) -> None:
        assert match_pathname("/shop/[[...filters]]", "/shop") == {"filters": None}
        assert match_pathname("/shop/[[...filters]]", "/shop/red/xl") == {"filters": ("red", "xl")}

    @pytest.mark.parametrize(
        ("pathname", "url"),
        [
            ("/blog/[slug]", "/news/hello"),
            ("/blog/[slug]", "/blog"),
            ("/blog/[slug]", "/blog/a/b"),
            ("/docs/[...parts]", "/docs"),
            ("/about", "/about/team"),
        ],
    )
    def test_no_match(self, pathname: str, url: str) -> None:
        assert match_pathname(pathname, url) is None

    def test_inverse_of_interpolate(self) -> None:
        pathname = "/[lang]/docs/[...parts]"
        params = {"lang": "en", "parts": ("a b", "c")}
        assert match_pathname(pathname, interpolate_pathname(pathname, params)) == params
