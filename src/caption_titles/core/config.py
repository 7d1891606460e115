"""Configuration for the caption-to-titles converter using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .env import AppEnv, normalize_app_env

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent

# FCPXML document constants
FCPXML_VERSION = "1.13"
FORMAT_WIDTH = 1920
FORMAT_HEIGHT = 1080
FORMAT_COLOR_SPACE = "1-1-1 (Rec. 709)"

# Timeline reference defaults (29.97 fps)
DEFAULT_TIMESCALE = 30000
DEFAULT_FRAME_TICKS = 1001
DEFAULT_FORMAT_NAME = "FFVideoFormat1080p2997"
DEFAULT_EFFECT_UID = "rmd/Title/Basic Title"

# Frame rate assumed for SMPTE frame fields when a document declares none
DEFAULT_SOURCE_FPS = 30.0

# Single default title style
TITLE_FONT = "Helvetica Neue"
TITLE_FONT_SIZE = 96
TITLE_FONT_COLOR = "1 1 1 1"  # RGBA, opaque white
TITLE_ALIGNMENT = "center"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # --- Environment ---
    app_env: AppEnv = Field(
        default=AppEnv.PRODUCTION,
        validation_alias=AliasChoices("CT_APP_ENV", "APP_ENV", "ENV"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("CT_LOG_LEVEL", "LOG_LEVEL"),
    )

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_env(cls, v: Any) -> AppEnv:
        if isinstance(v, AppEnv):
            return v
        return normalize_app_env(v if isinstance(v, str) else None)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "INFO"
        return v.strip().upper()

    @property
    def is_dev(self) -> bool:
        return self.app_env == AppEnv.DEV

    # --- Project Paths ---
    project_root: Path = PROJECT_ROOT

    # --- Conversion ---
    default_project_name: str = Field(
        default="captions_as_titles",
        validation_alias=AliasChoices("CT_DEFAULT_PROJECT_NAME", "default_project_name"),
    )
    reference_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("CT_REFERENCE_FILE", "reference_file"),
    )

    # --- API ---
    max_upload_mb: int = Field(
        default=20,
        ge=1,
        validation_alias=AliasChoices("CT_MAX_UPLOAD_MB", "max_upload_mb"),
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    # --- Metrics ---
    metrics_enabled: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("CT_METRICS", "metrics_enabled"),
    )
    metrics_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("CT_METRICS_PATH", "metrics_path"),
    )


settings = Settings()
