#!/usr/bin/env python3
"""Q-score metric records and the collections that hold them.

Records come in two flavours:
- QMetric: one tile on one cycle
- QByLaneMetric: all tiles of a lane summed for one cycle

Each record carries a fixed-length vector of per-bin counts. A collection may
also carry a bin table (QScoreBin) describing how raw Q-scores were folded
into those bins.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from qscore_plot.core.run_info import RunInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QScoreBin:
    """A contiguous range of Q-scores reported as a single bin."""

    value: int
    lower: int
    upper: int

    def width(self) -> int:
        return self.upper - self.lower + 1


class _HistogramRecord:
    """Operations shared by tile and lane records."""

    qscore_hist: Tuple[int, ...]

    def size(self) -> int:
        return len(self.qscore_hist)

    def accumulate_into(self, histogram: np.ndarray) -> None:
        """Add this record's counts into ``histogram`` in place.

        Raises:
            ValueError: If the record and the histogram differ in length
        """
        if self.size() != histogram.shape[0]:
            raise ValueError(
                f"Record has {self.size()} Q-score bins, histogram has {histogram.shape[0]}"
            )
        histogram += np.asarray(self.qscore_hist, dtype=histogram.dtype)


@dataclass(frozen=True)
class QMetric(_HistogramRecord):
    """Q-score histogram for a single tile and cycle."""

    lane: int
    tile: int
    cycle: int
    qscore_hist: Tuple[int, ...] = ()


@dataclass(frozen=True)
class QByLaneMetric(_HistogramRecord):
    """Q-score histogram for a whole lane and cycle."""

    lane: int
    cycle: int
    qscore_hist: Tuple[int, ...] = ()

    # Lane records are not tied to a tile
    tile: ClassVar[int] = 0


class _MetricSet:
    """Ordered, list-like collection of metric records plus a bin table."""

    def __init__(
        self,
        metrics: Optional[Iterable[QMetric]] = None,
        bins: Optional[Iterable[QScoreBin]] = None,
    ):
        self._metrics: List[QMetric] = list(metrics or [])
        self.bins: List[QScoreBin] = list(bins or [])

    def __len__(self) -> int:
        return len(self._metrics)

    def __iter__(self) -> Iterator[QMetric]:
        return iter(self._metrics)

    def __getitem__(self, index):
        return self._metrics[index]

    def add(self, metric: QMetric) -> None:
        self._metrics.append(metric)

    def clear(self) -> None:
        self._metrics.clear()
        self.bins.clear()

    def clear_records(self) -> None:
        """Drop the records but keep the bin table."""
        self._metrics.clear()

    def max_cycle(self) -> int:
        """Largest cycle number in the set, 0 when empty."""
        return max((m.cycle for m in self._metrics), default=0)


class QMetricSet(_MetricSet):
    """Per-tile Q-score metrics."""


class QByLaneMetricSet(_MetricSet):
    """Per-lane Q-score metrics, derived from per-tile metrics on demand."""

    def get_or_compute(self, source: Sequence[QMetric]) -> "QByLaneMetricSet":
        """Return this set, aggregating it from ``source`` first if empty.

        Args:
            source: Per-tile metric set to aggregate from

        Returns:
            self
        """
        if len(self) == 0:
            create_q_metrics_by_lane(source, self)
            logger.debug(
                "Aggregated %d tile records into %d lane records",
                len(source),
                len(self),
            )
        return self


def create_q_metrics_by_lane(
    source: Sequence[QMetric], destination: QByLaneMetricSet
) -> None:
    """Sum per-tile histograms into per-lane records.

    Records are keyed by (lane, cycle) and written in lane then cycle order.
    Bins attached to ``source`` replace those of ``destination``; when the
    source has none, the destination keeps its own.

    Args:
        source: Per-tile metric records
        destination: Lane metric set to fill (records cleared first)

    Raises:
        ValueError: If records sharing a lane and cycle differ in length
    """
    destination.clear_records()
    source_bins = list(getattr(source, "bins", []))
    if source_bins:
        destination.bins = source_bins

    sums: Dict[Tuple[int, int], np.ndarray] = {}
    for metric in source:
        key = (metric.lane, metric.cycle)
        if key not in sums:
            sums[key] = np.zeros(metric.size(), dtype=np.int64)
        metric.accumulate_into(sums[key])

    for (lane, cycle), counts in sorted(sums.items(), key=lambda item: item[0]):
        destination.add(
            QByLaneMetric(
                lane=lane,
                cycle=cycle,
                qscore_hist=tuple(int(c) for c in counts),
            )
        )


class RunMetrics:
    """Run info together with the Q-score metric sets for that run."""

    def __init__(
        self,
        run_info: Optional[RunInfo] = None,
        q_metrics: Optional[QMetricSet] = None,
        q_by_lane_metrics: Optional[QByLaneMetricSet] = None,
    ):
        self.run_info = run_info or RunInfo()
        self.q_metrics = q_metrics if q_metrics is not None else QMetricSet()
        self.q_by_lane_metrics = (
            q_by_lane_metrics if q_by_lane_metrics is not None else QByLaneMetricSet()
        )

    def is_empty(self) -> bool:
        return len(self.q_metrics) == 0 and len(self.q_by_lane_metrics) == 0
