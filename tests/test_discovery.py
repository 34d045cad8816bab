"""Tests for roost.routing.discovery — app directory loading."""

from pathlib import Path

import pytest

from roost.errors import StructureError
from roost.routing.definition import PAGE_SEGMENT, FlatRoute, PagesRoute, TreeRoute
from roost.routing.discovery import AppDirLoader, PagesDirLoader


def _write(root: Path, relative: str, source: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    root = tmp_path / "app"
    _write(root, "layout.py", "revalidate = 3600\n")
    _write(root, "page.py")
    _write(
        root,
        "[lang]/layout.py",
        "def generate_static_params(params):\n    return [{'lang': 'en'}]\n",
    )
    _write(root, "[lang]/blog/[slug]/page.py", "dynamic_params = False\n")
    _write(root, "(marketing)/pricing/page.py")
    _write(root, "api/[version]/route.py", "revalidate = 10\n")
    _write(root, "@modal/page.py", "revalidate = 1\n")
    _write(root, "_components/page.py")
    return root


class TestRouteIds:
    def test_discovers_pages_and_handlers(self, app_dir: Path) -> None:
        loader = AppDirLoader(app_dir)
        assert loader.route_ids() == [
            "/",
            "/[lang]/blog/[slug]",
            "/api/[version]",
            "/pricing",
        ]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            AppDirLoader(tmp_path / "nope")

    def test_page_and_route_in_same_directory(self, tmp_path: Path) -> None:
        _write(tmp_path, "feed/page.py")
        _write(tmp_path, "feed/route.py")
        with pytest.raises(StructureError, match="Conflicting"):
            AppDirLoader(tmp_path).route_ids()

    def test_duplicate_pathname_through_groups(self, tmp_path: Path) -> None:
        _write(tmp_path, "(a)/about/page.py")
        _write(tmp_path, "(b)/about/page.py")
        with pytest.raises(StructureError, match="defined by both"):
            AppDirLoader(tmp_path).route_ids()


class TestLoad:
    def test_page_tree(self, app_dir: Path) -> None:
        route = AppDirLoader(app_dir).load("/[lang]/blog/[slug]")

        assert isinstance(route, TreeRoute)
        names = []
        node = route.root
        while node is not None:
            names.append(node.segment)
            node = node.primary_child
        assert names == ["", "[lang]", "blog", "[slug]", PAGE_SEGMENT]
        assert route.root.layout.exports.revalidate == 3600

    def test_parallel_slots_attached_to_parent(self, app_dir: Path) -> None:
        route = AppDirLoader(app_dir).load("/")
        assert set(route.root.parallel_routes) == {"children", "@modal"}
        modal = route.root.parallel_routes["@modal"]
        assert modal.primary_child.page.exports.revalidate == 1

    def test_group_kept_in_tree_but_not_pathname(self, app_dir: Path) -> None:
        route = AppDirLoader(app_dir).load("/pricing")
        assert route.pathname == "/pricing"
        assert route.root.primary_child.segment == "(marketing)"

    def test_route_handler(self, app_dir: Path) -> None:
        route = AppDirLoader(app_dir).load("/api/[version]")
        assert isinstance(route, FlatRoute)
        assert route.pathname == "/api/[version]"
        assert route.module.path.endswith("route.py")
        assert route.module.exports.revalidate == 10

    def test_modules_are_imported_once(self, app_dir: Path) -> None:
        loader = AppDirLoader(app_dir)
        first = loader.load("/")
        second = loader.load("/pricing")
        assert first.root.layout.exports is second.root.layout.exports

    def test_unknown_route(self, app_dir: Path) -> None:
        with pytest.raises(StructureError, match="No route"):
            AppDirLoader(app_dir).load("/missing")

    def test_failing_module_is_a_structure_error(self, tmp_path: Path) -> None:
        _write(tmp_path, "bad/page.py", "raise RuntimeError('boom')\n")
        with pytest.raises(StructureError, match="Failed to import") as exc_info:
            AppDirLoader(tmp_path).load("/bad")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "page.py" in str(exc_info.value)


@pytest.fixture
def pages_dir(tmp_path: Path) -> Path:
    root = tmp_path / "pages"
    _write(root, "index.py")
    _write(root, "about.py")
    _write(
        root,
        "blog/[slug].py",
        "def get_static_paths(locales, default_locale):\n"
        "    return {'paths': ['/blog/a'], 'fallback': False}\n",
    )
    _write(root, "docs/index.py")
    _write(root, "_app.py")
    _write(root, "api/users.py")
    return root


class TestPagesDirLoader:
    def test_route_ids(self, pages_dir: Path) -> None:
        assert PagesDirLoader(pages_dir).route_ids() == ["/", "/about", "/blog/[slug]", "/docs"]

    def test_load(self, pages_dir: Path) -> None:
        route = PagesDirLoader(pages_dir).load("/blog/[slug]")
        assert isinstance(route, PagesRoute)
        assert route.pathname == "/blog/[slug]"
        assert route.module.path.endswith("[slug].py")
        assert callable(route.module.exports.get_static_paths)

    def test_duplicate_page(self, tmp_path: Path) -> None:
        _write(tmp_path, "docs.py")
        _write(tmp_path, "docs/index.py")
        with pytest.raises(StructureError, match="defined by both"):
            PagesDirLoader(tmp_path).route_ids()

    def test_unknown_page(self, pages_dir: Path) -> None:
        with pytest.raises(StructureError, match="No page"):
            PagesDirLoader(pages_dir).load("/missing")

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            PagesDirLoader(tmp_path / "nope")
