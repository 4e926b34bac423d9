"""Q-score histogram plotting for sequencing run metrics."""

from .core.exceptions import IndexOutOfBoundsError, InvalidReadError, QScorePlotError
from .core.filter_options import FilterOptions, TileNaming
from .core.metrics import (
    QByLaneMetric,
    QByLaneMetricSet,
    QMetric,
    QMetricSet,
    QScoreBin,
    RunMetrics,
)
from .core.plot_data import BarPoint, PlotData, PlotSeries
from .core.qscore_histogram import plot_qscore_histogram
from .core.run_info import FlowcellLayout, ReadInfo, RunInfo

__all__ = [
    "BarPoint",
    "FilterOptions",
    "FlowcellLayout",
    "IndexOutOfBoundsError",
    "InvalidReadError",
    "PlotData",
    "PlotSeries",
    "QByLaneMetric",
    "QByLaneMetricSet",
    "QMetric",
    "QMetricSet",
    "QScoreBin",
    "QScorePlotError",
    "ReadInfo",
    "RunInfo",
    "RunMetrics",
    "TileNaming",
    "plot_qscore_histogram",
]
