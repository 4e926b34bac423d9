#!/usr/bin/env python3
"""Plot data containers.

These classes describe a chart without drawing it:
- BarPoint: one bar (x, height, width)
- PlotSeries: named, typed sequence of points with display options
- PlotData: a set of series plus axis ranges, labels and title

PlotData.to_dict() gives a JSON-friendly view for export.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class SeriesType(str, Enum):
    """Kinds of series a renderer knows how to draw."""

    BAR = "bar"


class SeriesOption(str, Enum):
    """Display options attached to a series."""

    SHIFTED = "Shifted"


@dataclass
class BarPoint:
    """A bar at ``x`` with height ``y``; width 0 means a unit-width bar."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0

    def min_value(self) -> float:
        return self.y

    def max_value(self) -> float:
        return self.y

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width}


class PlotSeries:
    """An ordered collection of points drawn as one series."""

    def __init__(
        self,
        title: str = "",
        color: str = "",
        series_type: SeriesType = SeriesType.BAR,
        points: Optional[List[BarPoint]] = None,
    ):
        self.title = title
        self.color = color
        self.series_type = series_type
        self.points: List[BarPoint] = list(points or [])
        self.options: List[str] = []

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[BarPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> BarPoint:
        return self.points[index]

    def add_option(self, option: str) -> None:
        self.options.append(str(option.value if isinstance(option, Enum) else option))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "color": self.color,
            "series_type": self.series_type.value,
            "options": list(self.options),
            "points": [p.to_dict() for p in self.points],
        }


@dataclass
class Axis:
    """Axis label and visible range."""

    label: str = ""
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "min": self.min_value, "max": self.max_value}


@dataclass
class PlotData:
    """Series and axis metadata for a single chart."""

    series: List[PlotSeries] = field(default_factory=list)
    x_axis: Axis = field(default_factory=Axis)
    y_axis: Axis = field(default_factory=Axis)
    title: str = ""

    def __len__(self) -> int:
        return len(self.series)

    def __iter__(self) -> Iterator[PlotSeries]:
        return iter(self.series)

    def __getitem__(self, index: int) -> PlotSeries:
        return self.series[index]

    def assign(self, series: List[PlotSeries]) -> None:
        self.series = list(series)

    def clear(self) -> None:
        self.series = []
        self.x_axis = Axis()
        self.y_axis = Axis()
        self.title = ""

    def set_xrange(self, min_value: float, max_value: float) -> None:
        self.x_axis.min_value = min_value
        self.x_axis.max_value = max_value

    def set_yrange(self, min_value: float, max_value: float) -> None:
        self.y_axis.min_value = min_value
        self.y_axis.max_value = max_value

    def set_xlabel(self, label: str) -> None:
        self.x_axis.label = label

    def set_ylabel(self, label: str) -> None:
        self.y_axis.label = label

    def set_title(self, title: str) -> None:
        self.title = title

    def point_count(self) -> int:
        return sum(len(s) for s in self.series)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "x_axis": self.x_axis.to_dict(),
            "y_axis": self.y_axis.to_dict(),
            "series": [s.to_dict() for s in self.series],
        }


def auto_scale_y(data: PlotData, zero_min: bool = True, scale_max: float = 1.1) -> None:
    """Fit the y-axis range to the points of every series.

    Args:
        data: Plot data to update
        zero_min: Pin the lower bound to 0 instead of the smallest value
        scale_max: Headroom factor applied to the largest value

    The range is left untouched when there are no points.
    """
    values = [(p.min_value(), p.max_value()) for s in data for p in s]
    if not values:
        return
    ymin = min(v[0] for v in values)
    ymax = max(v[1] for v in values)
    data.set_yrange(0.0 if zero_min else ymin, ymax * scale_max)
