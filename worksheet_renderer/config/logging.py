"""
Logging Configuration
=====================

structlog on top of the stdlib logging tree. Each render binds the worksheet
seed and title as context variables, so HTML, PDF and preview events of one
worksheet carry the same identity without threading it through every call.
"""

import logging
import logging.config
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import structlog
from structlog.types import Processor

from .settings import Settings, get_settings

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# Third-party loggers that only report warnings and above
QUIET_LOGGERS = ("playwright", "asyncio", "PIL", "pdf2image")


def log_directory(settings: Settings) -> Path:
    """Directory holding the rotating renderer logs."""
    return settings.storage_path / "logs"


def build_processors(settings: Settings) -> List[Processor]:
    """structlog processor chain; render context is merged first."""
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def _rotating_handler(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "file",
        "filename": str(path),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": LOG_BACKUP_COUNT,
        "delay": True,
    }


def get_logging_config(settings: Settings) -> Dict[str, Any]:
    """
    Build the ``dictConfig`` for the renderer.

    The testing environment logs to the console only; other environments
    add ``renderer.log`` and an errors-only ``error.log``.
    """
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.log_level,
            "formatter": "json" if settings.environment == "production" else "console",
            "stream": sys.stdout,
        },
    }
    if settings.environment != "testing":
        logs = log_directory(settings)
        handlers["renderer_file"] = _rotating_handler(logs / "renderer.log", settings.log_level)
        handlers["error_file"] = _rotating_handler(logs / "error.log", "ERROR")

    loggers: Dict[str, Any] = {
        name: {"level": "WARNING", "handlers": ["console"], "propagate": False}
        for name in QUIET_LOGGERS
    }
    loggers[""] = {"level": settings.log_level, "handlers": list(handlers), "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": CONSOLE_FORMAT, "datefmt": DATE_FORMAT},
            "file": {"format": FILE_FORMAT, "datefmt": DATE_FORMAT},
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": loggers,
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog and the stdlib handlers."""
    settings = settings or get_settings()

    if settings.environment != "testing":
        log_directory(settings).mkdir(parents=True, exist_ok=True)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.config.dictConfig(get_logging_config(settings))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


@contextmanager
def render_context(seed: Optional[int], title: str, **fields: Any) -> Iterator[None]:
    """
    Bind a worksheet's identity to every log event emitted inside the block.

    Nested blocks may rebind the same keys; the outer values are restored on
    exit. Context follows ``asyncio`` tasks and ``asyncio.to_thread`` calls.
    """
    with structlog.contextvars.bound_contextvars(seed=seed, title=title, **fields):
        yield


# Initialize logging on import
setup_logging()
