#!/usr/bin/env python3
"""Build RunMetrics from a JSON metrics document.

The document is a plain JSON export of the run, not a binary InterOp file:

    {
      "run_info": {"flowcell": {...}, "reads": [...]},
      "q_metrics": {"bins": [...], "records": [...]},
      "q_by_lane_metrics": {"bins": [...], "records": [...]}   # optional
    }

Exporters disagree on field names, so record fields are looked up through
an alias table in the same way API rows are normalised elsewhere.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from qscore_plot.core.filter_options import TileNaming, VALID_TILE_NAMINGS
from qscore_plot.core.metrics import (
    QByLaneMetric,
    QByLaneMetricSet,
    QMetric,
    QMetricSet,
    QScoreBin,
    RunMetrics,
)
from qscore_plot.core.run_info import FlowcellLayout, ReadInfo, RunInfo

logger = logging.getLogger(__name__)


# =============================================================================
# Field Alias Mappings
# =============================================================================

FIELD_ALIASES: Dict[str, List[str]] = {
    # Record keys
    "lane": ["lane", "Lane", "lane_number"],
    "tile": ["tile", "Tile", "tile_number"],
    "cycle": ["cycle", "Cycle", "cycle_number"],
    "qscore_hist": ["qscore_hist", "QScoreHist", "histogram", "hist"],
    # Bin keys
    "value": ["value", "Value", "qscore"],
    "lower": ["lower", "Lower", "lower_bound"],
    "upper": ["upper", "Upper", "upper_bound"],
    # Read keys
    "number": ["number", "Number", "read", "read_number"],
    "first_cycle": ["first_cycle", "FirstCycle", "cycle_start"],
    "last_cycle": ["last_cycle", "LastCycle", "cycle_end"],
    "num_cycles": ["num_cycles", "NumCycles", "cycles"],
    "is_index": ["is_index", "IsIndexedRead"],
    # Flowcell keys
    "barcode": ["barcode", "Barcode", "flowcell_id", "FlowcellId"],
    "surface_count": ["surface_count", "SurfaceCount", "surfaces"],
    "lane_count": ["lane_count", "LaneCount", "lanes"],
    "swath_count": ["swath_count", "SwathCount", "swaths"],
    "tile_count": ["tile_count", "TileCount", "tiles"],
    "naming_method": ["naming_method", "TileNamingConvention", "tile_naming"],
}

TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off"}


# =============================================================================
# RecordNormalizer Class
# =============================================================================


class RecordNormalizer:
    """Looks up fields of exported records under any of their known names.

    Example:
        normalizer = RecordNormalizer()
        row = {"Lane": 1, "Tile": 1101, "Cycle": 3, "QScoreHist": [0, 5]}
        normalizer.get_int(row, "lane")  # 1
    """

    def __init__(self, aliases: Optional[Dict[str, List[str]]] = None):
        """Initialize the normalizer with field aliases.

        Args:
            aliases: Optional custom alias mapping. If None, uses FIELD_ALIASES.
        """
        self.aliases = aliases or FIELD_ALIASES

    def get_value(self, row: Dict[str, Any], field: str, default: Any = None) -> Any:
        """Get field value trying all known aliases.

        Args:
            row: Data row dictionary
            field: Normalized field name (e.g., 'lane', 'qscore_hist')
            default: Default value if field not found

        Returns:
            Field value or default if not found
        """
        if field not in self.aliases:
            return row.get(field, default)

        for alias in self.aliases[field]:
            if alias in row and row[alias] is not None:
                return row[alias]

        return default

    def get_int(self, row: Dict[str, Any], field: str, default: Optional[int] = None) -> int:
        """Get an integer field, raising ValueError if missing or not numeric."""
        value = self.get_value(row, field, default)
        if value is None:
            raise ValueError(f"Missing required field '{field}' in {row!r}")
        try:
            return int(value)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Field '{field}' is not an integer: {value!r}") from exc

    def get_counts(self, row: Dict[str, Any]) -> tuple:
        """Get the per-bin count vector of a metric record."""
        counts = self.get_value(row, "qscore_hist")
        if counts is None:
            raise ValueError(f"Missing required field 'qscore_hist' in {row!r}")
        try:
            return tuple(int(c) for c in counts)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Field 'qscore_hist' must be a list of counts: {counts!r}") from exc

    def get_bool(self, row: Dict[str, Any], field: str, default: bool = False) -> bool:
        """Get a flag given as a JSON boolean, 0/1, or a yes/no style string."""
        value = self.get_value(row, field, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in TRUE_STRINGS:
                return True
            if text in FALSE_STRINGS:
                return False
        raise ValueError(f"Field '{field}' is not a boolean: {value!r}")


# =============================================================================
# Document Parsing
# =============================================================================


def _parse_bins(rows: List[Dict[str, Any]], normalizer: RecordNormalizer) -> List[QScoreBin]:
    return [
        QScoreBin(
            value=normalizer.get_int(row, "value"),
            lower=normalizer.get_int(row, "lower"),
            upper=normalizer.get_int(row, "upper"),
        )
        for row in rows
    ]


def _check_record_lengths(records: List[Any], section: str) -> None:
    """All records of one metric set must share a histogram length."""
    sizes = sorted({record.size() for record in records})
    if len(sizes) > 1:
        raise ValueError(
            f"Records in '{section}' have differing qscore_hist lengths: {sizes}"
        )


def _parse_reads(rows: List[Dict[str, Any]], normalizer: RecordNormalizer) -> List[ReadInfo]:
    """Parse reads given either as explicit cycle windows or as lengths."""
    reads: List[ReadInfo] = []
    next_cycle = 1
    for row in rows:
        number = normalizer.get_int(row, "number")
        is_index = normalizer.get_bool(row, "is_index")
        if normalizer.get_value(row, "first_cycle") is not None:
            first_cycle = normalizer.get_int(row, "first_cycle")
            last_cycle = normalizer.get_int(row, "last_cycle")
        else:
            first_cycle = next_cycle
            last_cycle = first_cycle + normalizer.get_int(row, "num_cycles") - 1
        reads.append(ReadInfo(number, first_cycle, last_cycle, is_index))
        next_cycle = last_cycle + 1
    return reads


def _parse_flowcell(row: Dict[str, Any], normalizer: RecordNormalizer) -> FlowcellLayout:
    naming = str(normalizer.get_value(row, "naming_method", TileNaming.FOUR_DIGIT.value))
    if naming not in VALID_TILE_NAMINGS:
        raise ValueError(
            "naming_method must be one of {options}. Got '{value}'.".format(
                options=", ".join(sorted(VALID_TILE_NAMINGS)), value=naming
            )
        )
    return FlowcellLayout(
        barcode=str(normalizer.get_value(row, "barcode", "")),
        lane_count=normalizer.get_int(row, "lane_count", 1),
        surface_count=normalizer.get_int(row, "surface_count", 1),
        swath_count=normalizer.get_int(row, "swath_count", 1),
        tile_count=normalizer.get_int(row, "tile_count", 1),
        naming_method=TileNaming(naming),
    )


def run_info_from_dict(
    data: Dict[str, Any], normalizer: Optional[RecordNormalizer] = None
) -> RunInfo:
    """Build RunInfo from the ``run_info`` section of a metrics document."""
    if normalizer is None:
        normalizer = RecordNormalizer()
    return RunInfo(
        flowcell=_parse_flowcell(data.get("flowcell", {}), normalizer),
        reads=_parse_reads(data.get("reads", []), normalizer),
    )


def q_metric_set_from_dict(
    data: Dict[str, Any], normalizer: Optional[RecordNormalizer] = None
) -> QMetricSet:
    """Build the per-tile metric set from the ``q_metrics`` section.

    Raises:
        ValueError: If a record is malformed or the count vectors differ in length
    """
    if normalizer is None:
        normalizer = RecordNormalizer()
    records = [
        QMetric(
            lane=normalizer.get_int(row, "lane"),
            tile=normalizer.get_int(row, "tile"),
            cycle=normalizer.get_int(row, "cycle"),
            qscore_hist=normalizer.get_counts(row),
        )
        for row in data.get("records", [])
    ]
    _check_record_lengths(records, "q_metrics")
    return QMetricSet(records, _parse_bins(data.get("bins", []), normalizer))


def q_by_lane_metric_set_from_dict(
    data: Dict[str, Any], normalizer: Optional[RecordNormalizer] = None
) -> QByLaneMetricSet:
    """Build the per-lane metric set from the ``q_by_lane_metrics`` section."""
    if normalizer is None:
        normalizer = RecordNormalizer()
    records = [
        QByLaneMetric(
            lane=normalizer.get_int(row, "lane"),
            cycle=normalizer.get_int(row, "cycle"),
            qscore_hist=normalizer.get_counts(row),
        )
        for row in data.get("records", [])
    ]
    _check_record_lengths(records, "q_by_lane_metrics")
    return QByLaneMetricSet(records, _parse_bins(data.get("bins", []), normalizer))


def run_metrics_from_dict(data: Dict[str, Any]) -> RunMetrics:
    """Build RunMetrics from a parsed metrics document.

    Raises:
        ValueError: If a required field is missing or malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Metrics document must be a JSON object")

    normalizer = RecordNormalizer()
    metrics = RunMetrics(
        run_info=run_info_from_dict(data.get("run_info", {}), normalizer),
        q_metrics=q_metric_set_from_dict(data.get("q_metrics", {}), normalizer),
        q_by_lane_metrics=q_by_lane_metric_set_from_dict(
            data.get("q_by_lane_metrics", {}), normalizer
        ),
    )
    logger.debug(
        "Loaded %d tile records, %d lane records, %d reads",
        len(metrics.q_metrics),
        len(metrics.q_by_lane_metrics),
        len(metrics.run_info.reads),
    )
    return metrics


def load_run_metrics(filepath: str) -> RunMetrics:
    """Load RunMetrics from a JSON metrics document.

    Raises:
        ValueError: If the file is missing or is not a valid metrics document
    """
    if not os.path.exists(filepath):
        raise ValueError(f"Metrics file not found: {filepath}")
    with open(filepath, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Failed to decode JSON from metrics file: {exc}") from exc
    return run_metrics_from_dict(data)
