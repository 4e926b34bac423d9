#!/usr/bin/env python3
"""Filter options for selecting Q-score metric records.

A FilterOptions value scopes plot input to a lane, surface, read and cycle.
Any field left as None selects everything along that dimension.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TileNaming(str, Enum):
    """Tile numbering conventions used by the instrument."""

    FOUR_DIGIT = "four_digit"
    FIVE_DIGIT = "five_digit"
    ABSOLUTE = "absolute"


VALID_TILE_NAMINGS = {naming.value for naming in TileNaming}


def tile_surface(tile: int, naming: TileNaming = TileNaming.FOUR_DIGIT) -> int:
    """Return the surface encoded in a tile number.

    Four digit tiles look like 1101 (surface 1, swath 1, tile 01), five digit
    tiles like 11101. Absolute numbering carries no surface, so every tile is
    reported on surface 1.
    """
    if naming == TileNaming.FOUR_DIGIT:
        return tile // 1000
    if naming == TileNaming.FIVE_DIGIT:
        return tile // 10000
    return 1


@dataclass(frozen=True)
class FilterOptions:
    """Selection criteria applied to metric records."""

    naming: TileNaming = TileNaming.FOUR_DIGIT
    lane: Optional[int] = None
    surface: Optional[int] = None
    read: Optional[int] = None
    cycle: Optional[int] = None

    def all_lanes(self) -> bool:
        return self.lane is None

    def all_surfaces(self) -> bool:
        return self.surface is None

    def all_reads(self) -> bool:
        return self.read is None

    def all_cycles(self) -> bool:
        return self.cycle is None

    def is_specific_surface(self) -> bool:
        return not self.all_surfaces()

    def is_specific_read(self) -> bool:
        return not self.all_reads()

    def valid_tile(self, metric) -> bool:
        """Test whether a metric record falls inside the lane/surface scope.

        Args:
            metric: Any record exposing ``lane`` and ``tile`` attributes

        Returns:
            True if the record should be kept
        """
        if not self.all_lanes() and metric.lane != self.lane:
            return False
        if self.is_specific_surface():
            return tile_surface(metric.tile, self.naming) == self.surface
        return True

    def lane_description(self) -> str:
        if self.all_lanes():
            return "All Lanes"
        return f"Lane {self.lane}"

    def read_description(self) -> str:
        if self.all_reads():
            return "All Reads"
        return f"Read {self.read}"

    def surface_description(self) -> str:
        if self.all_surfaces():
            return "All Surfaces"
        return f"Surface {self.surface}"
