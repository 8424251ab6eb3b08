"""
Collector configuration.

Configuration is loaded from the [reqstats] table of a TOML file, e.g.:

    [reqstats]
    max_bins = 20
    histogram_path = "reports/histogram.txt"
    clock = "wall"
"""

from __future__ import annotations

import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .chart import DEFAULT_CHART_PATH
from .collector import Clock, monotonic_ms, wall_clock_ms
from .errors import ConfigurationError

CONFIG_SECTION = "reqstats"


class ClockKind(StrEnum):
    """Timestamp source used for captures."""

    MONOTONIC = "monotonic"
    WALL = "wall"


class CollectorConfig(BaseModel):
    """Settings for a LatencyStatsCollector."""

    model_config = ConfigDict(extra="forbid")

    max_bins: int = Field(default=10, gt=0, strict=True)
    histogram_path: Path = DEFAULT_CHART_PATH
    clock: ClockKind = ClockKind.MONOTONIC

    def clock_function(self) -> Clock:
        """Get the millisecond clock for this configuration."""
        return {
            ClockKind.MONOTONIC: monotonic_ms,
            ClockKind.WALL: wall_clock_ms,
        }[self.clock]


def parse_config(data: dict[str, Any]) -> CollectorConfig:
    """
    Validate a [reqstats] table.

    Raises:
        ConfigurationError: If a value is missing its expected type or range
    """
    try:
        return CollectorConfig.model_validate(data)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid [{CONFIG_SECTION}] configuration: {problems}") from e


def load_config(toml_path: Path) -> CollectorConfig:
    """
    Load collector configuration from a TOML file.

    Args:
        toml_path: Path to the TOML file

    Returns:
        CollectorConfig with values from the file, or defaults when the
        file or the [reqstats] table is absent
    """
    if not toml_path.exists():
        return CollectorConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Cannot parse {toml_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {toml_path}: {e}") from e

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{CONFIG_SECTION}] in {toml_path} must be a table")
    if not section:
        return CollectorConfig()

    return parse_config(section)
