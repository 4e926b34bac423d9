#!/usr/bin/env python3
"""Run metadata consumed by the plotting code.

Only the pieces the Q-score plot needs are modelled: the read layout (first
and last cycle of each read) and the flowcell identity and geometry.
"""

from dataclasses import dataclass, field
from typing import List

from qscore_plot.core.exceptions import InvalidReadError
from qscore_plot.core.filter_options import TileNaming


@dataclass(frozen=True)
class ReadInfo:
    """A read and the cycle window it spans (inclusive)."""

    number: int
    first_cycle: int
    last_cycle: int
    is_index: bool = False


@dataclass(frozen=True)
class FlowcellLayout:
    """Flowcell identity and tile geometry."""

    barcode: str = ""
    lane_count: int = 1
    surface_count: int = 1
    swath_count: int = 1
    tile_count: int = 1
    naming_method: TileNaming = TileNaming.FOUR_DIGIT


@dataclass
class RunInfo:
    """Read layout and flowcell for a sequencing run."""

    flowcell: FlowcellLayout = field(default_factory=FlowcellLayout)
    reads: List[ReadInfo] = field(default_factory=list)

    def read(self, number: int) -> ReadInfo:
        """Look up a read by its number.

        Raises:
            InvalidReadError: If no read carries that number
        """
        for read in self.reads:
            if read.number == number:
                return read
        raise InvalidReadError(number, [r.number for r in self.reads])
