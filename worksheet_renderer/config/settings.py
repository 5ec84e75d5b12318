"""
Application Settings
===================

Renderer settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    """Renderer settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="Worksheet DSL Renderer", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Storage Configuration
    storage_path: Path = Field(default=Path("./storage"), description="Storage directory path")
    output_path: Path = Field(
        default=Path("./storage/worksheets"), description="Default directory for rendered files"
    )

    # Asset Configuration
    icons_path: Optional[Path] = Field(
        default=None, description="Icon catalogue directory, bundled icons when unset"
    )
    default_logo: str = Field(default="PracticeGenius", description="Fallback branding logo text")
    font_stylesheet_url: str = Field(
        default="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;700&display=swap",
        description="Web font stylesheet linked from rendered HTML, empty to disable",
    )

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")

    # PDF Configuration
    pdf_format: str = Field(default="Letter", description="Paper format for PDF output")
    pdf_margin: str = Field(default="0.1in", description="Margin applied to every PDF page edge")

    # Preview Configuration
    preview_dpi: int = Field(default=100, gt=0, le=600, description="Preview rasterization DPI")
    poppler_path: Optional[Path] = Field(
        default=None, description="Directory holding poppler binaries, PATH lookup when unset"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("storage_path")
    @classmethod
    def create_directories(cls, v: Path) -> Path:
        """Ensure directories exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="WORKSHEET_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
