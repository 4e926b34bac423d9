#!/usr/bin/env python3
"""Configuration management for Q-score plot generation.

This module provides a configuration system that supports:
1. JSON configuration files
2. CLI argument overrides (via cli/main.py)
3. Validation and defaults

A configuration names the metrics document to read, the filter to apply
and where to write the resulting plot data.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from qscore_plot.core.filter_options import FilterOptions, TileNaming, VALID_TILE_NAMINGS


@dataclass
class FilterConfig:
    """Which records go into the histogram. None selects everything."""

    lane: Optional[int] = None
    surface: Optional[int] = None
    read: Optional[int] = None
    cycle: Optional[int] = None
    tile_naming: str = TileNaming.FOUR_DIGIT.value

    def to_filter_options(self) -> FilterOptions:
        """Convert to the FilterOptions used by the plotting code."""
        return FilterOptions(
            naming=TileNaming(self.tile_naming),
            lane=self.lane,
            surface=self.surface,
            read=self.read,
            cycle=self.cycle,
        )


@dataclass
class InputConfig:
    """Input document location."""

    metrics_file: str = ""  # JSON metrics document (REQUIRED)


@dataclass
class OutputConfig:
    """Output configuration."""

    output_file: Optional[str] = None  # None = write to stdout
    indent: int = 2  # JSON indentation level
    debug: bool = False  # Enable debug logging


@dataclass
class PlotConfig:
    """Complete plot configuration."""

    filter: FilterConfig = field(default_factory=FilterConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Metadata
    created_at: Optional[str] = None
    version: str = "1.0"

    def __post_init__(self):
        """Initialize timestamp if not provided."""
        if self.created_at is None:
            self.created_at = datetime.now(ZoneInfo("UTC")).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    def to_json(self, filepath: str, indent: int = 2) -> None:
        """Save configuration to JSON file.

        Args:
            filepath: Path to JSON file
            indent: JSON indentation level
        """
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlotConfig":
        """Create config from dictionary.

        Keys starting with ``_`` are documentation fields and are ignored.

        Args:
            data: Configuration dictionary

        Returns:
            PlotConfig instance
        """

        def filter_meta(d: dict) -> dict:
            """Remove keys starting with _ (documentation fields)."""
            return {k: v for k, v in d.items() if not k.startswith("_")}

        try:
            return cls(
                filter=FilterConfig(**filter_meta(data.get("filter", {}))),
                input=InputConfig(**filter_meta(data.get("input", {}))),
                output=OutputConfig(**filter_meta(data.get("output", {}))),
                created_at=data.get("created_at"),
                version=data.get("version", "1.0"),
            )
        except TypeError as exc:
            raise ValueError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def from_json(cls, filepath: str) -> "PlotConfig":
        """Load configuration from JSON file.

        Args:
            filepath: Path to JSON file

        Returns:
            PlotConfig instance
        """
        with open(filepath, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.input.metrics_file:
            errors.append("input.metrics_file is required (path to a JSON metrics document).")

        for name in ("lane", "surface", "read", "cycle"):
            value = getattr(self.filter, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                errors.append(
                    f"filter.{name} must be a positive integer or null. Got {value!r}."
                )

        if self.filter.tile_naming not in VALID_TILE_NAMINGS:
            errors.append(
                "filter.tile_naming must be one of {options}. Got '{value}'.".format(
                    options=", ".join(sorted(VALID_TILE_NAMINGS)),
                    value=self.filter.tile_naming,
                )
            )

        if self.output.indent < 0:
            errors.append("output.indent must be zero or greater.")

        return len(errors) == 0, errors


def load_config(
    config_file: Optional[str] = None,
    config_dict: Optional[Dict[str, Any]] = None,
) -> PlotConfig:
    """Load configuration from file or dictionary.

    Args:
        config_file: Path to JSON config file
        config_dict: Configuration dictionary (alternative to file)

    Returns:
        PlotConfig instance

    Raises:
        ValueError: If neither file nor dict provided, or if file doesn't exist
    """
    if config_file:
        if not os.path.exists(config_file):
            raise ValueError(f"Config file not found: {config_file}")
        return PlotConfig.from_json(config_file)
    elif config_dict:
        return PlotConfig.from_dict(config_dict)
    else:
        raise ValueError("Must provide either config_file or config_dict")


def create_example_config(output_path: str = "qscore_plot_example.json") -> None:
    """Create an example configuration file with all sections populated.

    Args:
        output_path: Path to write example config
    """
    config = PlotConfig(
        filter=FilterConfig(lane=1, read=1, tile_naming="four_digit"),
        input=InputConfig(metrics_file="run_metrics.json"),
        output=OutputConfig(output_file="qscore_histogram.json"),
    )

    config.to_json(output_path)
    print(f"Example configuration written to: {output_path}")


# =============================================================================
# Default Configuration Instances
# =============================================================================

DEFAULT_FILTER_CONFIG = FilterConfig()
DEFAULT_INPUT_CONFIG = InputConfig()
DEFAULT_OUTPUT_CONFIG = OutputConfig()


if __name__ == "__main__":
    create_example_config()
