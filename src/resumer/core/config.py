# src/resumer/core/config.py
"""
Configuration schema and loading for resumer.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from resumer.contracts.enums import DeprecationMode


class CursorSettings(BaseModel):
    """Cursor serializability enforcement.

    The enforcement horizon is an opaque identifier reported in deprecation
    notices ("This will raise starting in <horizon>"). Reaching it is an
    explicit switch of ``mode`` to "raise", not a version comparison.

    Example YAML:
        cursor:
          mode: warn
          enforcement_horizon: "2.0"
    """

    model_config = {"frozen": True}

    mode: DeprecationMode = DeprecationMode.WARN
    enforcement_horizon: str = Field(default="2.0", min_length=1)
    source_name: str = Field(default="resumer", min_length=1)


class SliceSettings(BaseModel):
    """Bounds of one execution slice.

    Both limits are optional; with neither set a slice runs until its
    iterator is exhausted (or a shutdown signal arrives).
    """

    model_config = {"frozen": True}

    max_runtime_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Stop after this many seconds of wall time",
    )
    max_iterations: int | None = Field(
        default=None,
        gt=0,
        description="Stop after this many completed iterations",
    )


class ResumerSettings(BaseModel):
    """Top-level settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    cursor: CursorSettings = Field(default_factory=CursorSettings)
    slice: SliceSettings = Field(default_factory=SliceSettings)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_logs: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.upper()
        return v


def load_settings(config_path: Path) -> ResumerSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (RESUMER_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: RESUMER_CURSOR__MODE=raise for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated ResumerSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="RESUMER",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return ResumerSettings(**raw_config)


def _lower_keys(value: object) -> object:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
