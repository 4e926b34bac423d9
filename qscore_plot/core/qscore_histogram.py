#!/usr/bin/env python3
"""Q-score histogram plot.

Turns per-tile (or per-lane) Q-score metrics into bar chart data:

1. populate_distribution: sum the counts of every record passing the filter
2. scale_histogram: rescale to millions or billions for the y-axis label
3. plot_unbinned_histogram / plot_binned_histogram: one bar per non-zero bin
4. plot_qscore_histogram: run the steps above and fill in axes and title
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from qscore_plot.core.exceptions import IndexOutOfBoundsError
from qscore_plot.core.filter_options import FilterOptions
from qscore_plot.core.metrics import QScoreBin, RunMetrics
from qscore_plot.core.plot_data import (
    BarPoint,
    PlotData,
    PlotSeries,
    SeriesOption,
    SeriesType,
    auto_scale_y,
)
from qscore_plot.core.run_info import RunInfo

logger = logging.getLogger(__name__)

SERIES_TITLE = "Q Score"
X_AXIS_LABEL = "Q Score"

MILLION = 1e6
BILLION_THRESHOLD = 10000
THOUSAND = 1000.0

X_RANGE_PADDING = 1.1


def populate_distribution(
    metrics: Sequence,
    options: FilterOptions,
    first_cycle: int,
    last_cycle: int,
    histogram: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Sum the Q-score counts of all records that pass the filter.

    Args:
        metrics: Ordered metric records, all with the same vector length
        options: Filter applied to each record's lane/tile
        first_cycle: First cycle to keep (inclusive)
        last_cycle: Last cycle to keep (inclusive)
        histogram: Optional buffer to accumulate into

    Returns:
        The histogram. When ``metrics`` is empty the given buffer is returned
        as is (or an empty array if none was given).

    Raises:
        ValueError: If an accepted record differs in length from the first one
    """
    if len(metrics) == 0:
        return histogram if histogram is not None else np.zeros(0, dtype=np.float64)

    size = metrics[0].size()
    if histogram is None or histogram.shape != (size,):
        histogram = np.zeros(size, dtype=np.float64)

    for metric in metrics:
        if not options.valid_tile(metric):
            continue
        if metric.cycle < first_cycle or metric.cycle > last_cycle:
            continue
        metric.accumulate_into(histogram)
    return histogram


def scale_histogram(histogram: np.ndarray) -> str:
    """Scale the histogram in place and return the unit label.

    Counts are always divided by a million. If the largest scaled count is
    still 10000 or more, everything is divided by another thousand.

    Returns:
        "million" or "billion"
    """
    histogram /= MILLION
    max_height = float(histogram.max()) if histogram.size else 0.0
    if max_height < BILLION_THRESHOLD:
        return "million"
    histogram /= THOUSAND
    return "billion"


def get_first_filtered_cycle(run_info: RunInfo, options: FilterOptions) -> int:
    """First cycle of the requested read, or 1 when all reads are selected.

    Raises:
        InvalidReadError: If the read is not in the run info
    """
    if options.all_reads():
        return 1
    return run_info.read(options.read).first_cycle


def get_last_filtered_cycle(
    run_info: RunInfo, options: FilterOptions, max_cycle: int
) -> int:
    """Last cycle to keep given the read and cycle filters.

    Args:
        run_info: Run info with the read layout
        options: Filter options
        max_cycle: Largest cycle present in the metrics

    Raises:
        InvalidReadError: If the read is not in the run info
    """
    if options.all_reads():
        last_cycle = max_cycle
    else:
        last_cycle = run_info.read(options.read).last_cycle
    if not options.all_cycles():
        last_cycle = min(last_cycle, options.cycle)
    return last_cycle


def plot_unbinned_histogram(histogram: np.ndarray, series: PlotSeries) -> float:
    """One bar per non-zero Q-score, at x = Q-score.

    Args:
        histogram: Scaled histogram, slot i holds Q-score i + 1
        series: Series whose points are replaced

    Returns:
        Upper x bound (last bar's x + 1), 0 if no bars
    """
    series.points = [
        BarPoint(float(i + 1), float(count))
        for i, count in enumerate(histogram)
        if count != 0
    ]
    if not series.points:
        return 0.0
    return series.points[-1].x + 1


class BinResolution(ABC):
    """Maps each bin of a bin table onto a histogram slot."""

    def __init__(self, bins: Sequence[QScoreBin], histogram_size: int):
        self.bins = bins
        self.histogram_size = histogram_size

    @abstractmethod
    def __iter__(self) -> Iterator[Tuple[QScoreBin, int]]:
        """Yield (bin, histogram index) pairs in bin-table order."""


class CompressedBins(BinResolution):
    """Bin table and histogram line up one to one."""

    def __iter__(self) -> Iterator[Tuple[QScoreBin, int]]:
        for index, qbin in enumerate(self.bins):
            yield qbin, index


class UncompressedBins(BinResolution):
    """Histogram is indexed by Q-score; each bin's value selects the slot."""

    def __iter__(self) -> Iterator[Tuple[QScoreBin, int]]:
        for qbin in self.bins:
            index = qbin.value - 1
            if index < 0 or index >= self.histogram_size:
                raise IndexOutOfBoundsError(index, self.histogram_size)
            yield qbin, index


def select_bin_resolution(
    bins: Sequence[QScoreBin], histogram_size: int
) -> BinResolution:
    """Pick how bins map to histogram slots.

    A bin table as long as the histogram is compressed; anything else is
    resolved through each bin's Q-score value.
    """
    if len(bins) == histogram_size:
        return CompressedBins(bins, histogram_size)
    return UncompressedBins(bins, histogram_size)


def plot_binned_histogram(
    bins: Sequence[QScoreBin], histogram: np.ndarray, series: PlotSeries
) -> float:
    """One bar per non-zero bin, spanning the bin's Q-score range.

    Args:
        bins: Bin table
        histogram: Scaled histogram
        series: Series whose points are replaced

    Returns:
        Upper x bound (max of x + width), 0 if no bars

    Raises:
        IndexOutOfBoundsError: If a bin value falls outside the histogram
    """
    resolution = select_bin_resolution(bins, len(histogram))
    points = []
    max_x_value = 0.0
    for qbin, index in resolution:
        if histogram[index] == 0:
            continue
        point = BarPoint(float(qbin.lower), float(histogram[index]), float(qbin.width()))
        max_x_value = max(max_x_value, point.x + point.width)
        points.append(point)
    series.points = points
    return max_x_value


def _build_title(metrics: RunMetrics, options: FilterOptions) -> str:
    flowcell = metrics.run_info.flowcell
    title = flowcell.barcode
    if title != "":
        title += " "
    title += options.lane_description()
    if options.is_specific_read():
        title += " " + options.read_description()
    if flowcell.surface_count > 1 and options.is_specific_surface():
        title += " " + options.surface_description()
    return title


def plot_qscore_histogram(metrics: RunMetrics, options: FilterOptions) -> PlotData:
    """Plot a histogram of Q-scores.

    A specific surface is plotted from the per-tile metrics; otherwise the
    per-lane metrics are used, aggregating them from the tile metrics when
    they have not been computed yet.

    Args:
        metrics: Run metrics
        options: Filter options

    Returns:
        Plot data with a single bar series. When there are no metrics the
        series has no points and the plot has no title.

    Raises:
        InvalidReadError: If the filter names a read missing from the run info
        IndexOutOfBoundsError: If the bin table does not fit the histogram
    """
    data = PlotData()
    series = PlotSeries(SERIES_TITLE, "", SeriesType.BAR)
    series.add_option(SeriesOption.SHIFTED)
    data.assign([series])

    if options.is_specific_surface():
        source = metrics.q_metrics
        logger.debug("Using tile metrics for surface %s", options.surface)
    else:
        source = metrics.q_by_lane_metrics.get_or_compute(metrics.q_metrics)
        logger.debug("Using lane metrics")

    if len(source) == 0:
        logger.debug("No Q-score metrics to plot")
        return data

    first_cycle = get_first_filtered_cycle(metrics.run_info, options)
    last_cycle = get_last_filtered_cycle(
        metrics.run_info, options, source.max_cycle()
    )
    logger.debug("Cycle window [%d, %d]", first_cycle, last_cycle)

    histogram = populate_distribution(source, options, first_cycle, last_cycle)
    axis_scale = scale_histogram(histogram)

    if source.bins:
        max_x_value = plot_binned_histogram(source.bins, histogram, series)
    else:
        max_x_value = plot_unbinned_histogram(histogram, series)
    logger.debug("Plotted %d bars in %s", len(series), axis_scale)

    auto_scale_y(data, zero_min=False)
    data.set_xrange(1, max_x_value * X_RANGE_PADDING)

    data.set_xlabel(X_AXIS_LABEL)
    data.set_ylabel(f"Total ({axis_scale})")
    data.set_title(_build_title(metrics, options))
    return data
