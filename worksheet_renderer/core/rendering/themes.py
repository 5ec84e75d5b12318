"""
Themes and Sizing
=================

Named palettes and the size/spacing tables used to parameterize the
worksheet stylesheet. Unknown names resolve to the defaults without error.
"""

from typing import Any, Dict, Optional

from worksheet_renderer.config.logging import get_logger
from worksheet_renderer.models.schemas import ThemePalette, ThemeName, BoxSize, Spacing, AssetSize

logger = get_logger(__name__)


DEFAULT_THEME = ThemeName.ORANGE_WHITE_BLACK.value

THEME_PALETTES: Dict[str, ThemePalette] = {
    ThemeName.ORANGE_WHITE_BLACK.value: ThemePalette(
        primary="#FF6B35", secondary="#FFB366", text="#2C3E50", background="#FFFFFF", accent="#F8F9FA"
    ),
    ThemeName.BLUE_WHITE_GRAY.value: ThemePalette(
        primary="#3498DB", secondary="#85C1E9", text="#2C3E50", background="#FFFFFF", accent="#F8F9FA"
    ),
    ThemeName.GREEN_WHITE_BLACK.value: ThemePalette(
        primary="#2ECC71", secondary="#82E0AA", text="#2C3E50", background="#FFFFFF", accent="#F8F9FA"
    ),
    ThemeName.PURPLE_WHITE_GRAY.value: ThemePalette(
        primary="#9B59B6", secondary="#D2B4DE", text="#2C3E50", background="#FFFFFF", accent="#F8F9FA"
    ),
}

# Answer box edge length
BOX_SIZES: Dict[str, str] = {
    BoxSize.SMALL.value: "30px",
    BoxSize.MEDIUM.value: "40px",
    BoxSize.LARGE.value: "50px",
}

# Gap between items
SPACINGS: Dict[str, str] = {
    Spacing.TIGHT.value: "0.8rem",
    Spacing.NORMAL.value: "1.2rem",
    Spacing.SPACIOUS.value: "1.8rem",
}

# Asset edge length in pixels
ASSET_SIZES: Dict[str, int] = {
    AssetSize.SMALL.value: 20,
    AssetSize.MEDIUM.value: 30,
    AssetSize.LARGE.value: 40,
}


def _key(value: Any) -> Optional[str]:
    """Normalize enum members and raw strings to lookup keys."""
    if value is None:
        return None
    return getattr(value, "value", value)


def resolve_theme(name: Optional[str]) -> ThemePalette:
    """Return the palette for ``name``, or the default palette."""
    key = _key(name)
    palette = THEME_PALETTES.get(key) if key else None
    if palette is None:
        if key:
            logger.debug("Unknown theme, using default", theme=key, default=DEFAULT_THEME)
        return THEME_PALETTES[DEFAULT_THEME]
    return palette


def resolve_box_size(size: Optional[Any]) -> str:
    """Return the CSS edge length of an answer box."""
    return BOX_SIZES.get(_key(size) or "", BOX_SIZES[BoxSize.MEDIUM.value])


def resolve_spacing(spacing: Optional[Any]) -> str:
    """Return the CSS gap between items."""
    return SPACINGS.get(_key(spacing) or "", SPACINGS[Spacing.NORMAL.value])


def resolve_asset_size(size: Optional[Any]) -> int:
    """Return the pixel edge length of an asset."""
    return ASSET_SIZES.get(_key(size) or "", ASSET_SIZES[AssetSize.MEDIUM.value])


def get_supported_themes() -> list[str]:
    """List the palette names that resolve without fallback."""
    return list(THEME_PALETTES.keys())
