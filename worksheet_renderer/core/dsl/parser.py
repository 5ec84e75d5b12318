"""
Worksheet DSL Parser
====================

Intake helpers that run before rendering: parsing JSON or YAML worksheet
definitions (including fenced model output), schema validation with
Cerberus, safe defaults, and seeded item randomization. The renderer itself
never calls into this module; it expects an already validated document.
"""

from typing import Dict, List, Any, Optional, Tuple
import copy
import json
import random
import re
import time
from abc import ABC, abstractmethod

import yaml  # type: ignore[import-untyped]
from cerberus import Validator  # type: ignore[import-untyped]
from pydantic import ValidationError

from worksheet_renderer.config.logging import get_logger
from worksheet_renderer.models.schemas import (
    Arrangement,
    AssetSize,
    AssetType,
    BoxSize,
    LayoutType,
    ParseResult,
    Spacing,
    ThemeName,
    WorksheetDocument,
    MIN_ASSET_COUNT,
    MAX_ASSET_COUNT,
)

logger = get_logger(__name__)

CODE_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)
NUMBERED_PROMPT_PATTERN = re.compile(r"^\d+\.")


class DSLParseError(Exception):
    """Exception raised when worksheet DSL parsing fails."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


def _values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


class WorksheetValidator:
    """Worksheet DSL validation using Cerberus schemas."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="validator")  # structlog.BoundLoggerBase
        self._setup_schemas()

    def _setup_schemas(self) -> None:
        """Setup validation schemas."""
        self.meta_schema = {
            "id": {"type": "string"},
            "seed": {"type": "integer", "nullable": True},
            "grade": {"type": "string", "required": True, "empty": False},
            "subject": {"type": "string", "required": True, "empty": False},
            "title": {"type": "string", "required": True, "empty": False},
        }

        self.layout_schema = {
            "type": {"type": "string", "required": True, "allowed": _values(LayoutType)},
            "rows": {"type": "integer", "min": 1},
            "cols": {"type": "integer", "min": 1},
            "show_answer_boxes": {"type": "boolean"},
            "box_size": {"type": "string", "allowed": _values(BoxSize)},
            "spacing": {"type": "string", "allowed": _values(Spacing)},
        }

        self.asset_schema = {
            "type": {"type": "string", "required": True, "allowed": _values(AssetType)},
            "name": {"type": "string", "required": True, "empty": False},
            "count": {"type": "integer", "min": MIN_ASSET_COUNT, "max": MAX_ASSET_COUNT},
            "color": {"type": "string"},
            "size": {"type": "string", "allowed": _values(AssetSize)},
            "arrangement": {"type": "string", "nullable": True, "allowed": _values(Arrangement)},
        }

        self.item_schema = {
            "prompt": {"type": "string", "required": True, "empty": False},
            "target_answer": {"type": ["string", "number", "list"], "required": True},
            "assets": {
                "type": "list",
                "schema": {"type": "dict", "schema": self.asset_schema},
            },
        }

        self.branding_schema = {
            "logo": {"type": "string"},
            "theme": {"type": "string", "allowed": _values(ThemeName)},
            "footer": {"type": "string"},
        }

        self.document_schema: Dict[str, Any] = {
            "meta": {"type": "dict", "required": True, "schema": self.meta_schema},
            "instructions": {"type": "string", "required": True},
            "layout": {"type": "dict", "required": True, "schema": self.layout_schema},
            "items": {
                "type": "list",
                "required": True,
                "minlength": 1,
                "schema": {"type": "dict", "schema": self.item_schema},
            },
            "answer_key": {"type": "boolean"},
            "branding": {"type": "dict", "schema": self.branding_schema},
        }

    def validate_document(self, data: Dict[str, Any]) -> Tuple[bool, List[str], List[str]]:
        """
        Validate worksheet document structure.

        Args:
            data: Document data to validate

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        validator = Validator(self.document_schema)  # type: ignore[misc]

        is_valid = validator.validate(data)  # type: ignore[misc]
        errors: List[str] = []
        warnings: List[str] = []

        if not is_valid:
            errors.extend(self._format_validation_errors(validator.errors))  # type: ignore[attr-defined]

        custom_errors, custom_warnings = self._perform_custom_validations(data)
        errors.extend(custom_errors)
        warnings.extend(custom_warnings)

        if errors:
            self.logger.debug("Worksheet validation failed", error_count=len(errors))

        return bool(is_valid) and not custom_errors, errors, warnings

    def _format_validation_errors(self, errors: Any, path: str = "") -> List[str]:
        """Format Cerberus validation errors into readable messages."""
        formatted_errors: List[str] = []

        for field, error_info in errors.items():
            current_path = f"{path}.{field}" if path else str(field)

            if isinstance(error_info, list):
                for error in error_info:
                    if isinstance(error, dict):
                        formatted_errors.extend(self._format_validation_errors(error, current_path))
                    else:
                        formatted_errors.append(f"{current_path}: {error}")
            elif isinstance(error_info, dict):
                formatted_errors.extend(self._format_validation_errors(error_info, current_path))

        return formatted_errors

    def _perform_custom_validations(self, data: Dict[str, Any]) -> Tuple[List[str], List[str]]:
        """Checks Cerberus cannot express declaratively."""
        errors: List[str] = []
        warnings: List[str] = []

        layout = data.get("layout")
        items = data.get("items")
        if isinstance(layout, dict) and layout.get("type") == LayoutType.GRID.value:
            for dimension in ("rows", "cols"):
                if layout.get(dimension) is None:
                    errors.append(f"layout.{dimension}: required field for grid layout")

            rows, cols = layout.get("rows"), layout.get("cols")
            if isinstance(rows, int) and isinstance(cols, int) and isinstance(items, list):
                if len(items) > rows * cols:
                    warnings.append(
                        f"layout: {len(items)} items exceed the {rows}x{cols} grid"
                    )

        if isinstance(items, list):
            for i, item in enumerate(items):
                if not isinstance(item, dict):
                    continue
                answer = item.get("target_answer")
                if isinstance(answer, list) and not all(isinstance(part, str) for part in answer):
                    errors.append(f"items.{i}.target_answer: list answers must contain only strings")

        return errors, warnings


def apply_safe_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill optional fields and clamp asset counts.

    Args:
        data: Raw worksheet document

    Returns:
        A sanitized copy; the input is left untouched
    """
    sanitized = copy.deepcopy(data)

    if not sanitized.get("branding"):
        sanitized["branding"] = {"logo": "PracticeGenius", "theme": ThemeName.ORANGE_WHITE_BLACK.value}

    if sanitized.get("answer_key") is None:
        sanitized["answer_key"] = True

    layout = sanitized.get("layout")
    if isinstance(layout, dict):
        if layout.get("show_answer_boxes") is None:
            layout["show_answer_boxes"] = True
        layout["box_size"] = layout.get("box_size") or BoxSize.MEDIUM.value
        layout["spacing"] = layout.get("spacing") or Spacing.NORMAL.value

    for item in sanitized.get("items") or []:
        if not isinstance(item, dict):
            continue
        if "assets" in item and not isinstance(item["assets"], list):
            item["assets"] = []
        for asset in item.get("assets") or []:
            if isinstance(asset, dict) and isinstance(asset.get("count"), int):
                asset["count"] = max(MIN_ASSET_COUNT, min(MAX_ASSET_COUNT, asset["count"]))

    return sanitized


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence, as produced by LLMs."""
    content = content.strip()
    match = CODE_FENCE_PATTERN.match(content)
    return match.group(1) if match else content


def randomize_items(document: WorksheetDocument, seed: Optional[int] = None) -> WorksheetDocument:
    """
    Shuffle items deterministically and renumber numbered prompts.

    Args:
        document: Source document, left untouched
        seed: Shuffle seed; falls back to ``meta.seed`` and then a fresh seed

    Returns:
        A shuffled copy whose ``meta.seed`` holds the seed used
    """
    shuffled = document.model_copy(deep=True)
    if seed is None:
        seed = shuffled.meta.seed
    if seed is None:
        seed = random.SystemRandom().randrange(1_000_000)
    shuffled.meta.seed = seed

    rng = random.Random(seed)
    items = shuffled.items
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]

    for index, item in enumerate(items):
        if NUMBERED_PROMPT_PATTERN.match(item.prompt):
            item.prompt = f"{index + 1}.{item.prompt.split('.', 1)[1]}"

    logger.debug("Randomized worksheet items", seed=seed, items=len(items))
    return shuffled


class BaseWorksheetParser(ABC):
    """Abstract base class for worksheet DSL parsers."""

    def __init__(self) -> None:
        self.validator = WorksheetValidator()

    @abstractmethod
    def load(self, content: str) -> Any:
        """Deserialize raw content."""
        pass

    @abstractmethod
    def validate_syntax(self, content: str) -> bool:
        """Validate DSL syntax without full parsing."""
        pass

    def parse(self, content: str) -> ParseResult:
        """
        Parse worksheet DSL content into a WorksheetDocument.

        Args:
            content: Raw DSL content as string

        Returns:
            ParseResult containing parsed document or errors
        """
        start_time = time.time()

        try:
            raw_data = self.load(strip_code_fences(content))
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            error_msg = self._syntax_error_message(e)
            self.logger.error("Worksheet DSL parsing failed", error=error_msg)
            return ParseResult(
                success=False, errors=[error_msg], processing_time=time.time() - start_time
            )

        if not isinstance(raw_data, dict):
            return ParseResult(
                success=False,
                errors=[f"Worksheet content must be an object, got {type(raw_data).__name__}"],
                processing_time=time.time() - start_time,
            )

        is_valid, errors, warnings = self.validator.validate_document(raw_data)
        if not is_valid:
            return ParseResult(
                success=False,
                errors=errors,
                warnings=warnings,
                processing_time=time.time() - start_time,
            )

        try:
            document = WorksheetDocument.model_validate(apply_safe_defaults(raw_data))
        except ValidationError as e:
            return ParseResult(
                success=False,
                errors=[
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ],
                warnings=warnings,
                processing_time=time.time() - start_time,
            )

        return ParseResult(
            success=True,
            document=document,
            warnings=warnings,
            processing_time=time.time() - start_time,
        )

    def _syntax_error_message(self, error: Exception) -> str:
        return f"Invalid syntax: {error}"


class JSONWorksheetParser(BaseWorksheetParser):
    """JSON-based worksheet DSL parser."""

    def __init__(self) -> None:
        super().__init__()
        self.logger: Any = logger.bind(parser="json")  # structlog.BoundLoggerBase

    def load(self, content: str) -> Any:
        return json.loads(content)

    def validate_syntax(self, content: str) -> bool:
        try:
            json.loads(strip_code_fences(content))
            return True
        except json.JSONDecodeError:
            return False

    def _syntax_error_message(self, error: Exception) -> str:
        if isinstance(error, json.JSONDecodeError):
            return f"Invalid JSON syntax at line {error.lineno}, column {error.colno}: {error.msg}"
        return super()._syntax_error_message(error)


class YAMLWorksheetParser(BaseWorksheetParser):
    """YAML-based worksheet DSL parser."""

    def __init__(self) -> None:
        super().__init__()
        self.logger: Any = logger.bind(parser="yaml")  # structlog.BoundLoggerBase

    def load(self, content: str) -> Any:
        return yaml.safe_load(content)

    def validate_syntax(self, content: str) -> bool:
        try:
            yaml.safe_load(strip_code_fences(content))
            return True
        except yaml.YAMLError:
            return False

    def _syntax_error_message(self, error: Exception) -> str:
        return f"Invalid YAML syntax: {error}"


class WorksheetParserFactory:
    """Factory for creating worksheet parsers based on content type."""

    _parsers = {
        "json": JSONWorksheetParser,
        "yaml": YAMLWorksheetParser,
    }

    @classmethod
    def create_parser(cls, parser_type: str) -> BaseWorksheetParser:
        """
        Create a worksheet parser instance.

        Raises:
            ValueError: If parser type is not supported
        """
        if parser_type not in cls._parsers:
            raise ValueError(f"Unsupported parser type: {parser_type}")

        return cls._parsers[parser_type]()

    @classmethod
    def detect_parser_type(cls, content: str) -> str:
        """Detect parser type from content."""
        content = strip_code_fences(content)
        if content.startswith("{"):
            return "json"
        try:
            json.loads(content)
            return "json"
        except json.JSONDecodeError:
            return "yaml"


def parse_worksheet_dsl(content: str, parser_type: Optional[str] = None) -> ParseResult:
    """
    Parse worksheet DSL content using the appropriate parser.

    Args:
        content: Raw DSL content
        parser_type: Optional parser type override

    Returns:
        ParseResult containing parsed document or errors
    """
    if not content or not content.strip():
        return ParseResult(success=False, errors=["Empty worksheet content provided"], processing_time=0.0)

    if not parser_type:
        parser_type = WorksheetParserFactory.detect_parser_type(content)

    try:
        parser = WorksheetParserFactory.create_parser(parser_type)
    except ValueError as e:
        return ParseResult(success=False, errors=[str(e)], processing_time=0.0)

    return parser.parse(content)


def load_worksheet_document(content: str, parser_type: Optional[str] = None) -> WorksheetDocument:
    """
    Parse worksheet DSL content, raising on failure.

    Raises:
        DSLParseError: If the content cannot be parsed or validated
    """
    result = parse_worksheet_dsl(content, parser_type)
    if not result.success or result.document is None:
        raise DSLParseError("Invalid worksheet DSL: " + "; ".join(result.errors), result.errors)
    for warning in result.warnings:
        logger.warning("Worksheet DSL warning", warning=warning)
    return result.document
