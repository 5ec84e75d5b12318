"""
Pydantic Models and Schemas
===========================

Core data models for worksheet DSL documents, parsing results and rendering
artifacts. All models include validation and type hints.
"""

from typing import Optional, List, Union, Any, Dict
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


MIN_ASSET_COUNT = 1
MAX_ASSET_COUNT = 20


# Enums
class LayoutType(str, Enum):
    """Item list layout strategies."""
    GRID = "grid"
    LIST = "list"
    COLUMNS = "columns"
    FREE = "free"


class AssetType(str, Enum):
    """Visual asset types."""
    ICON = "icon"
    IMAGE = "image"
    SHAPE = "shape"
    NUMBER = "number"
    TEXT = "text"


class BoxSize(str, Enum):
    """Answer box sizes."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class AssetSize(str, Enum):
    """Asset sizes."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Spacing(str, Enum):
    """Gap between items."""
    TIGHT = "tight"
    NORMAL = "normal"
    SPACIOUS = "spacious"


class Arrangement(str, Enum):
    """Spatial grouping of repeated assets."""
    ROW = "row"
    GRID = "grid"
    SCATTERED = "scattered"
    PATTERN = "pattern"


class ThemeName(str, Enum):
    """Named branding palettes."""
    ORANGE_WHITE_BLACK = "orange-white-black"
    BLUE_WHITE_GRAY = "blue-white-gray"
    GREEN_WHITE_BLACK = "green-white-black"
    PURPLE_WHITE_GRAY = "purple-white-gray"


# DSL Models
class WorksheetMeta(BaseModel):
    """Worksheet header information and reproducibility seed."""
    id: Optional[str] = Field(None, description="External worksheet identifier")
    grade: str = Field(..., description="Grade level")
    subject: str = Field(..., description="Subject name")
    title: str = Field(..., description="Worksheet title")
    seed: Optional[int] = Field(None, description="Seed for deterministic rendering")


class WorksheetLayout(BaseModel):
    """Arrangement of the item list on the page."""
    type: LayoutType = Field(..., description="Layout strategy")
    rows: Optional[int] = Field(None, ge=1, description="Grid rows")
    cols: Optional[int] = Field(None, ge=1, description="Grid columns")
    show_answer_boxes: bool = Field(True, description="Render an answer box per item")
    box_size: BoxSize = Field(BoxSize.MEDIUM, description="Answer box size")
    spacing: Spacing = Field(Spacing.NORMAL, description="Gap between items")

    @model_validator(mode="after")
    def validate_grid_dimensions(self) -> "WorksheetLayout":
        """Grid layouts need both rows and cols."""
        if self.type == LayoutType.GRID and (self.rows is None or self.cols is None):
            raise ValueError("Grid layout requires both 'rows' and 'cols'")
        return self


class WorksheetAsset(BaseModel):
    """A single visual element repeated within an item."""
    type: AssetType = Field(..., description="Asset type")
    name: str = Field(..., description="Icon name, shape name, number or text")
    count: int = Field(MIN_ASSET_COUNT, description="Repetitions, clamped to 1..20")
    color: Optional[str] = Field(None, description="Fill color for shapes")
    size: Optional[AssetSize] = Field(None, description="Asset size")
    arrangement: Optional[Arrangement] = Field(Arrangement.ROW, description="Grouping strategy, row when null")

    @field_validator("count", mode="before")
    @classmethod
    def clamp_count(cls, v: Any) -> int:
        """Clamp repetitions into the supported range."""
        if v is None:
            return MIN_ASSET_COUNT
        return max(MIN_ASSET_COUNT, min(MAX_ASSET_COUNT, int(v)))


class WorksheetItem(BaseModel):
    """A numbered prompt with its expected answer."""
    prompt: str = Field(..., min_length=1, description="Question text")
    target_answer: Union[str, int, float, List[str]] = Field(..., description="Expected answer")
    assets: List[WorksheetAsset] = Field(default_factory=list, description="Visual assets")


class WorksheetBranding(BaseModel):
    """Logo, palette and footer text."""
    logo: str = Field("PracticeGenius", description="Logo text")
    theme: str = Field(ThemeName.ORANGE_WHITE_BLACK.value, description="Palette name")
    footer: Optional[str] = Field(None, description="Footer text")


class WorksheetDocument(BaseModel):
    """Complete worksheet DSL document."""
    meta: WorksheetMeta
    instructions: str = Field(..., description="Instructions shown above the items")
    layout: WorksheetLayout
    items: List[WorksheetItem] = Field(..., min_length=1, description="Ordered items")
    answer_key: bool = Field(True, description="Append an answer-key rendition")
    branding: WorksheetBranding = Field(default_factory=WorksheetBranding)


class ThemePalette(BaseModel):
    """Resolved colors of a branding theme."""
    primary: str
    secondary: str
    text: str
    background: str
    accent: str

    model_config = ConfigDict(frozen=True)


# Parsing Results
class ParseResult(BaseModel):
    """Result of worksheet DSL parsing operation."""
    success: bool = Field(..., description="Whether parsing succeeded")
    document: Optional[WorksheetDocument] = Field(None, description="Parsed document")
    errors: List[str] = Field(default_factory=list, description="Parsing errors")
    warnings: List[str] = Field(default_factory=list, description="Parsing warnings")
    processing_time: Optional[float] = Field(None, description="Parsing time in seconds")


# Rendering Results
class RenderResult(BaseModel):
    """Files produced by a full worksheet render."""
    pdf_path: Path = Field(..., description="Generated PDF file")
    preview_path: Path = Field(..., description="PNG preview of the first page")
    timestamp: int = Field(..., description="Millisecond timestamp used in both filenames")
    seed: int = Field(..., description="Seed the worksheet was rendered with")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Render metadata")
