#!/usr/bin/env python3
"""CLI wrapper that loads run metrics and writes Q-score histogram plot data.

Uses:
- config_manager.load_config / PlotConfig
- metrics_io.load_run_metrics
- qscore_histogram.plot_qscore_histogram

The plot is written as JSON (see PlotData.to_dict) to a file or stdout;
drawing it is left to whatever consumes that JSON.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from qscore_plot.core.config_manager import (
    PlotConfig,
    create_example_config,
    load_config,
)
from qscore_plot.core.exceptions import IndexOutOfBoundsError, InvalidReadError
from qscore_plot.core.metrics_io import load_run_metrics
from qscore_plot.core.plot_data import PlotData
from qscore_plot.core.qscore_histogram import plot_qscore_histogram

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_READ = 1
EXIT_BAD_BINS = 2


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qscore-plot",
        description="Plot a Q-score histogram from a JSON metrics document. "
        "Use --example-config to generate a template config file.",
    )
    parser.add_argument(
        "config_file",
        nargs="?",
        help="Path to JSON configuration file (optional when --metrics is given).",
    )
    parser.add_argument("--metrics", help="JSON metrics document (overrides config)")
    parser.add_argument("--lane", type=int, help="Plot a single lane")
    parser.add_argument("--surface", type=int, help="Plot a single surface")
    parser.add_argument("--read", type=int, help="Plot a single read")
    parser.add_argument("--cycle", type=int, help="Stop at this cycle")
    parser.add_argument(
        "--tile-naming",
        choices=["four_digit", "five_digit", "absolute"],
        help="Tile naming convention used to find the surface",
    )
    parser.add_argument("--output", help="Write plot JSON here instead of stdout")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--example-config",
        metavar="PATH",
        help="Write an example configuration file and exit",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> PlotConfig:
    """Load the config file (if any) and apply command-line overrides.

    Args:
        args: Parsed command-line arguments

    Returns:
        PlotConfig with overrides applied
    """
    if args.config_file:
        config = load_config(config_file=args.config_file)
    else:
        config = PlotConfig()

    if args.metrics:
        config.input.metrics_file = args.metrics
    for name in ("lane", "surface", "read", "cycle"):
        value = getattr(args, name)
        if value is not None:
            setattr(config.filter, name, value)
    if args.tile_naming:
        config.filter.tile_naming = args.tile_naming
    if args.output:
        config.output.output_file = args.output
    if args.debug:
        config.output.debug = True
    return config


def write_plot_data(data: PlotData, config: PlotConfig) -> None:
    """Write plot data as JSON to the configured file, or stdout."""
    payload = json.dumps(data.to_dict(), indent=config.output.indent)
    if config.output.output_file:
        with open(config.output.output_file, "w") as f:
            f.write(payload + "\n")
        logger.info("Wrote plot data to %s", config.output.output_file)
    else:
        sys.stdout.write(payload + "\n")


def run(config: PlotConfig) -> int:
    """Load metrics, build the plot and write it out.

    Returns:
        Process exit code
    """
    metrics = load_run_metrics(config.input.metrics_file)
    if metrics.is_empty():
        logger.info("%s has no Q-score records", config.input.metrics_file)
    options = config.filter.to_filter_options()

    try:
        data = plot_qscore_histogram(metrics, options)
    except InvalidReadError as exc:
        logger.error("Cannot plot Q-score histogram: %s", exc)
        return EXIT_INVALID_READ
    except IndexOutOfBoundsError as exc:
        logger.error("Q-score bin table does not match the histogram: %s", exc)
        return EXIT_BAD_BINS

    if data.point_count() == 0:
        logger.info("No Q-score data for %s", options.lane_description())

    write_plot_data(data, config)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.example_config:
        create_example_config(args.example_config)
        return EXIT_OK

    if not args.config_file and not args.metrics:
        parser.error("config_file or --metrics is required")

    try:
        config = resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    _configure_logging(config.output.debug)

    is_valid, errors = config.validate()
    if not is_valid:
        parser.error(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    try:
        return run(config)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
