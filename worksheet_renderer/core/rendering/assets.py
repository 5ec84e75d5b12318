"""
Asset Rendering
===============

HTML fragments for the visual assets attached to worksheet items: inline
icons from an icon catalogue, SVG shapes, numbers and text. Rendering never
fails on a bad asset; unknown names degrade to text placeholders.
"""

from typing import Callable, Dict, List, Optional, Protocol
from pathlib import Path
import base64
import random

from markupsafe import Markup, escape

from worksheet_renderer.config.logging import get_logger
from worksheet_renderer.core.rendering.themes import resolve_asset_size
from worksheet_renderer.models.schemas import (
    Arrangement,
    AssetType,
    WorksheetAsset,
    MIN_ASSET_COUNT,
    MAX_ASSET_COUNT,
)

logger = get_logger(__name__)

BUNDLED_ICONS_PATH = Path(__file__).resolve().parent.parent.parent / "resources" / "icons"

DEFAULT_SHAPE_COLOR = "#000000"

SHAPES: Dict[str, str] = {
    "circle": '<circle cx="50" cy="50" r="40" fill="{color}" />',
    "square": '<rect x="10" y="10" width="80" height="80" fill="{color}" />',
    "triangle": '<polygon points="50,10 90,90 10,90" fill="{color}" />',
    "star": '<polygon points="50,10 61,35 90,35 65,55 75,80 50,65 25,80 35,55 10,35 39,35" fill="{color}" />',
    "heart": '<path d="M50,30 C35,10 10,20 10,40 C10,60 25,65 50,90 C75,65 90,60 90,40 C90,20 65,10 50,30 Z" fill="{color}" />',
    "diamond": '<polygon points="50,10 90,50 50,90 10,50" fill="{color}" />',
    "hexagon": '<polygon points="25,10 75,10 90,50 75,90 25,90 10,50" fill="{color}" />',
    "octagon": '<polygon points="30,10 70,10 90,30 90,70 70,90 30,90 10,70 10,30" fill="{color}" />',
    "oval": '<ellipse cx="50" cy="50" rx="40" ry="30" fill="{color}" />',
    "rectangle": '<rect x="10" y="25" width="80" height="50" fill="{color}" />',
}

DEFAULT_SHAPE = "circle"


class IconResolver(Protocol):
    """Capability for looking up icon SVG bytes by name."""

    def resolve_icon(self, name: str) -> Optional[bytes]:
        """Return the SVG bytes for ``name`` or None when it does not exist."""
        ...


class FileSystemIconResolver:
    """Icon catalogue backed by a directory of ``<name>.svg`` files."""

    def __init__(self, icons_path: Optional[Path] = None):
        self.icons_path = Path(icons_path) if icons_path else BUNDLED_ICONS_PATH
        self.logger = logger.bind(component="icon_resolver")

    def resolve_icon(self, name: str) -> Optional[bytes]:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            return None

        icon_file = self.icons_path / f"{name}.svg"
        try:
            return icon_file.read_bytes()
        except OSError as e:
            self.logger.warning("Icon not found", icon=name, path=str(icon_file), error=str(e))
            return None

    def available_icons(self) -> List[str]:
        """List icon names present in the catalogue."""
        if not self.icons_path.is_dir():
            return []
        return sorted(path.stem for path in self.icons_path.glob("*.svg"))


class InMemoryIconResolver:
    """Icon catalogue held in memory, for embedded bundles and tests."""

    def __init__(self, icons: Optional[Dict[str, bytes]] = None):
        self.icons = dict(icons or {})

    def resolve_icon(self, name: str) -> Optional[bytes]:
        return self.icons.get(name)

    def available_icons(self) -> List[str]:
        return sorted(self.icons.keys())


def render_shape_svg(name: str, color: Optional[str] = None) -> Markup:
    """Return the SVG primitive for ``name`` filled with ``color``."""
    template = SHAPES.get(name)
    if template is None:
        logger.debug("Unknown shape, using default", shape=name, default=DEFAULT_SHAPE)
        template = SHAPES[DEFAULT_SHAPE]
    return Markup(template.format(color=escape(color or DEFAULT_SHAPE_COLOR)))


def clamp_count(count: Optional[int]) -> int:
    """Clamp an asset repetition count into the supported range."""
    if count is None:
        return MIN_ASSET_COUNT
    return max(MIN_ASSET_COUNT, min(MAX_ASSET_COUNT, count))


def _enum_value(value) -> str:
    return getattr(value, "value", value)


class AssetRenderer:
    """Type-dispatched HTML builder for worksheet assets."""

    def __init__(self, icon_resolver: Optional[IconResolver] = None):
        self.icon_resolver: IconResolver = icon_resolver or FileSystemIconResolver()
        self.logger = logger.bind(component="asset_renderer")
        self.registry = self._setup_registry()

    def _setup_registry(self) -> Dict[str, Callable[[WorksheetAsset, int, List[str]], Markup]]:
        """Map asset types to their builders."""
        return {
            AssetType.ICON.value: self._render_icon,
            AssetType.SHAPE.value: self._render_shape,
            AssetType.NUMBER.value: self._render_number,
            AssetType.TEXT.value: self._render_text,
        }

    def render_asset(self, asset: WorksheetAsset, position: Optional[List[str]] = None) -> Markup:
        """Render a single asset occurrence."""
        size = resolve_asset_size(asset.size)
        builder = self.registry.get(_enum_value(asset.type), self._render_generic)
        return builder(asset, size, list(position or []))

    def render_assets(self, assets: List[WorksheetAsset], placement_seed: Optional[str] = None) -> Markup:
        """
        Render assets grouped by arrangement.

        Groups appear in order of first use; within a group every asset is
        repeated ``count`` times.

        Args:
            assets: Assets of one item
            placement_seed: Seed for scattered placement offsets

        Returns:
            HTML with one container per arrangement
        """
        groups: Dict[str, List[WorksheetAsset]] = {}
        for asset in assets:
            arrangement = _enum_value(asset.arrangement or Arrangement.ROW)
            groups.setdefault(arrangement, []).append(asset)

        parts: List[Markup] = []
        for arrangement, group in groups.items():
            rng = None
            if arrangement == Arrangement.SCATTERED.value:
                rng = random.Random(f"{placement_seed}:{arrangement}")

            group_html: List[Markup] = []
            for asset in group:
                for _ in range(clamp_count(asset.count)):
                    position = None
                    if rng is not None:
                        position = [f"left: {rng.randint(0, 85)}%", f"top: {rng.randint(0, 60)}px"]
                    group_html.append(self.render_asset(asset, position))

            parts.append(
                Markup('<div class="assets-container asset-{arrangement}">{body}</div>').format(
                    arrangement=arrangement, body=Markup("").join(group_html)
                )
            )

        return Markup("").join(parts)

    def _wrap(self, content: Markup, styles: List[str], fallback: Optional[str] = None) -> Markup:
        """Wrap asset content in its ``.asset`` element."""
        style_attr = Markup(' style="{}"').format("; ".join(styles) + ";") if styles else Markup("")
        fallback_attr = Markup(' data-fallback="{}"').format(fallback) if fallback else Markup("")
        return Markup('<div class="asset"{fallback}{style}>{content}</div>').format(
            fallback=fallback_attr, style=style_attr, content=content
        )

    def _render_icon(self, asset: WorksheetAsset, size: int, position: List[str]) -> Markup:
        svg_bytes = self.icon_resolver.resolve_icon(asset.name)
        box = [f"width: {size}px", f"height: {size}px"]
        if svg_bytes is None:
            self.logger.warning("Icon unavailable, rendering name instead", icon=asset.name)
            placeholder = [
                "border: 1px solid #ccc",
                "display: flex",
                "align-items: center",
                "justify-content: center",
            ]
            return self._wrap(escape(asset.name), box + placeholder + position, fallback="icon")

        data_uri = "data:image/svg+xml;base64," + base64.b64encode(svg_bytes).decode("ascii")
        image = Markup('<img src="{src}" alt="{name}" style="width: 100%; height: 100%;">').format(
            src=data_uri, name=asset.name
        )
        return self._wrap(image, box + position)

    def _render_shape(self, asset: WorksheetAsset, size: int, position: List[str]) -> Markup:
        svg = Markup('<svg viewBox="0 0 100 100" width="100%" height="100%">{}</svg>').format(
            render_shape_svg(asset.name, asset.color)
        )
        return self._wrap(svg, [f"width: {size}px", f"height: {size}px"] + position)

    def _render_number(self, asset: WorksheetAsset, size: int, position: List[str]) -> Markup:
        styles = [
            f"width: {size}px",
            f"height: {size}px",
            "font-weight: bold",
            f"font-size: {size * 3 // 5}px",
        ]
        return self._wrap(escape(asset.name), styles + position)

    def _render_text(self, asset: WorksheetAsset, size: int, position: List[str]) -> Markup:
        return self._wrap(escape(asset.name), [f"font-size: {size // 2}px"] + position)

    def _render_generic(self, asset: WorksheetAsset, size: int, position: List[str]) -> Markup:
        return self._wrap(escape(asset.name), position)
