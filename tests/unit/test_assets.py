"""
Unit Tests for Asset Rendering
==============================

Tests for icon resolution, SVG shapes and arrangement grouping of worksheet
assets.
"""

import base64
import re

import pytest

from worksheet_renderer.core.rendering.assets import (
    BUNDLED_ICONS_PATH,
    SHAPES,
    AssetRenderer,
    FileSystemIconResolver,
    clamp_count,
    render_shape_svg,
)
from worksheet_renderer.models.schemas import WorksheetAsset

from tests.utils.assertions import count_class


class TestIconResolvers:
    """Test icon catalogue implementations."""

    def test_bundled_icons_available(self):
        """Test the bundled icon catalogue."""
        resolver = FileSystemIconResolver()
        assert resolver.icons_path == BUNDLED_ICONS_PATH
        assert {"apple", "bug", "ball", "pencil", "sun"} <= set(resolver.available_icons())
        assert resolver.resolve_icon("bug").lstrip().startswith(b"<svg")

    def test_missing_icon_returns_none(self, tmp_path):
        """Test that missing icons resolve to None."""
        resolver = FileSystemIconResolver(tmp_path)
        assert resolver.resolve_icon("unicorn") is None
        assert resolver.available_icons() == []

    @pytest.mark.parametrize("name", ["../secret", "a/b", "a\\b", ".hidden", ""])
    def test_path_like_names_rejected(self, tmp_path, name):
        """Test that names cannot escape the catalogue."""
        (tmp_path / "secret.svg").write_text("<svg/>")
        resolver = FileSystemIconResolver(tmp_path / "icons")
        assert resolver.resolve_icon(name) is None

    def test_custom_directory(self, tmp_path):
        """Test a custom catalogue directory."""
        (tmp_path / "cat.svg").write_bytes(b"<svg>cat</svg>")
        resolver = FileSystemIconResolver(tmp_path)
        assert resolver.resolve_icon("cat") == b"<svg>cat</svg>"
        assert resolver.available_icons() == ["cat"]

    def test_in_memory_resolver(self, icon_resolver):
        """Test the in-memory catalogue."""
        assert icon_resolver.resolve_icon("bug") is not None
        assert icon_resolver.resolve_icon("dog") is None
        assert icon_resolver.available_icons() == ["bug", "sun"]


class TestShapes:
    """Test SVG shape primitives."""

    def test_ten_shapes(self):
        """Test the shape catalogue."""
        assert set(SHAPES) == {
            "circle", "square", "triangle", "star", "heart",
            "diamond", "hexagon", "octagon", "oval", "rectangle",
        }

    def test_fill_color(self):
        """Test color substitution."""
        assert 'fill="#E74C3C"' in render_shape_svg("heart", "#E74C3C")
        assert 'fill="#000000"' in render_shape_svg("square")

    def test_unknown_shape_is_circle(self):
        """Test unknown shapes fall back to a circle."""
        assert render_shape_svg("blob", "red") == render_shape_svg("circle", "red")

    def test_color_is_escaped(self):
        """Test that color values cannot break out of the attribute."""
        svg = render_shape_svg("circle", '"><script>')
        assert "<script>" not in svg


class TestClampCount:
    """Test repetition clamping."""

    @pytest.mark.parametrize("raw,expected", [(None, 1), (0, 1), (1, 1), (5, 5), (20, 20), (99, 20)])
    def test_clamp(self, raw, expected):
        """Test count clamping."""
        assert clamp_count(raw) == expected


class TestAssetRenderer:
    """Test type-dispatched asset rendering."""

    @pytest.fixture
    def renderer(self, icon_resolver):
        """Create asset renderer with in-memory icons."""
        return AssetRenderer(icon_resolver)

    def test_icon_inlined_as_data_uri(self, renderer, icon_resolver):
        """Test icon rendering."""
        html = renderer.render_asset(WorksheetAsset(type="icon", name="bug", size="large"))
        encoded = base64.b64encode(icon_resolver.resolve_icon("bug")).decode("ascii")
        assert f"data:image/svg+xml;base64,{encoded}" in html
        assert "width: 40px" in html
        assert "data-fallback" not in html

    def test_missing_icon_renders_name(self, renderer):
        """Test the placeholder for unknown icons."""
        html = renderer.render_asset(WorksheetAsset(type="icon", name="unicorn"))
        assert 'data-fallback="icon"' in html
        assert ">unicorn</div>" in html
        assert "border: 1px solid #ccc" in html
        assert "<img" not in html

    def test_shape(self, renderer):
        """Test shape rendering."""
        html = renderer.render_asset(WorksheetAsset(type="shape", name="star", color="#F1C40F", size="small"))
        assert '<svg viewBox="0 0 100 100"' in html
        assert 'fill="#F1C40F"' in html
        assert "width: 20px" in html

    @pytest.mark.parametrize("size,font", [("small", 12), ("medium", 18), ("large", 24)])
    def test_number_font_is_sixty_percent(self, renderer, size, font):
        """Test number font sizing."""
        html = renderer.render_asset(WorksheetAsset(type="number", name="7", size=size))
        assert f"font-size: {font}px" in html
        assert "font-weight: bold" in html
        assert ">7</div>" in html

    @pytest.mark.parametrize("size,font", [("small", 10), ("medium", 15), ("large", 20)])
    def test_text_font_is_half(self, renderer, size, font):
        """Test text font sizing."""
        html = renderer.render_asset(WorksheetAsset(type="text", name="hot", size=size))
        assert f"font-size: {font}px" in html

    def test_text_is_escaped(self, renderer):
        """Test that text content is escaped."""
        html = renderer.render_asset(WorksheetAsset(type="text", name="<b>bold</b>"))
        assert "<b>" not in html
        assert "&lt;b&gt;" in html

    def test_image_renders_name(self, renderer):
        """Test the generic builder used for image assets."""
        html = renderer.render_asset(WorksheetAsset(type="image", name="playground"))
        assert html == '<div class="asset">playground</div>'

    def test_count_repeats_asset(self, renderer):
        """Test that each asset is repeated count times."""
        html = renderer.render_assets([WorksheetAsset(type="shape", name="circle", count=5, arrangement="grid")])
        assert count_class(html, "asset") == 5
        assert html.count('class="assets-container asset-grid"') == 1

    def test_groups_in_first_use_order(self, renderer):
        """Test arrangement grouping."""
        html = renderer.render_assets([
            WorksheetAsset(type="number", name="1", arrangement="pattern"),
            WorksheetAsset(type="number", name="2"),
            WorksheetAsset(type="number", name="3", arrangement="pattern"),
        ])
        containers = re.findall(r'class="assets-container asset-(\w+)"', html)
        assert containers == ["pattern", "row"]
        pattern_group = html.split('asset-row')[0]
        assert ">1</div>" in pattern_group and ">3</div>" in pattern_group

    def test_null_arrangement_groups_as_row(self, renderer):
        """Test that assets without arrangement share the row container."""
        html = renderer.render_assets([
            WorksheetAsset(type="number", name="1", arrangement=None),
            WorksheetAsset(type="number", name="2"),
        ])
        assert re.findall(r'class="assets-container asset-(\w+)"', html) == ["row"]
        assert count_class(html, "asset") == 2

    def test_empty_assets(self, renderer):
        """Test that no assets render nothing."""
        assert renderer.render_assets([]) == ""

    def test_scattered_positions_are_seeded(self, renderer):
        """Test deterministic scattered placement."""
        assets = [WorksheetAsset(type="icon", name="sun", count=4, arrangement="scattered")]
        first = renderer.render_assets(assets, placement_seed="42:0")
        second = renderer.render_assets(assets, placement_seed="42:0")
        other = renderer.render_assets(assets, placement_seed="43:0")

        assert first == second
        assert first != other
        assert len(re.findall(r"left: \d+%", first)) == 4
        assert len(re.findall(r"top: \d+px", first)) == 4

    def test_row_assets_have_no_offsets(self, renderer):
        """Test that only scattered assets are positioned."""
        html = renderer.render_assets([WorksheetAsset(type="icon", name="sun", count=3)], placement_seed="1:0")
        assert "left:" not in html
