"""Configuration file loading.

A single ``closeplan_config.yaml`` holds scheduling and display settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from .scheduling.config import SchedulingConfig
from .scheduling.dates import DEFAULT_WARNING_DAYS
from .scheduling.factory import DEFAULT_MONTH_NAMES

CONFIG_FILENAME = "closeplan_config.yaml"


class DisplayConfig(BaseModel):
    """How schedules are presented by the CLI."""

    warning_days: int = Field(default=DEFAULT_WARNING_DAYS, ge=0)
    month_names: list[str] = Field(default_factory=lambda: list(DEFAULT_MONTH_NAMES))

    @field_validator("month_names")
    @classmethod
    def twelve_months(cls, v: list[str]) -> list[str]:
        """Require one name per month."""
        if len(v) != 12:  # noqa: PLR2004
            raise ValueError(f"month_names must list 12 names, got {len(v)}")
        return v


class UnifiedConfig(BaseModel):
    """Complete closeplan configuration."""

    scheduling: SchedulingConfig = SchedulingConfig()
    display: DisplayConfig = DisplayConfig()


def load_config(config_path: Path | str) -> UnifiedConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is not valid YAML or does not match the schema
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse config file {config_path}: {e}") from e

    if data is None:
        return UnifiedConfig()
    if not isinstance(data, dict):
        raise ValueError("Config must contain a dictionary at the root level")

    # pydantic's ValidationError is a ValueError
    return UnifiedConfig.model_validate(data)


def discover_config(
    workspace_path: Path | str | None = None,
    config_path: Path | None = None,
) -> UnifiedConfig:
    """Find and load configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument (CLI --config)
    2. Workspace directory / closeplan_config.yaml
    3. Current directory / closeplan_config.yaml
    """
    if config_path:
        return load_config(config_path)

    candidates: list[Path] = []
    if workspace_path is not None:
        candidates.append(Path(workspace_path).parent / CONFIG_FILENAME)
    candidates.append(Path(CONFIG_FILENAME))

    for candidate in candidates:
        if candidate.exists():
            return load_config(candidate)

    return UnifiedConfig()
