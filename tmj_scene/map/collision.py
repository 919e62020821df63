"""
Occupancy grid and 1-D collision run merging

=============================================================================
WHY MERGE?
=============================================================================

A naive import gives every solid tile its own collision box. A 200-tile
floor becomes 200 static bodies, and the physics step tests all of them.
Merging neighbouring solid tiles into longer rectangles keeps the exact
same solid area with far fewer boxes.

=============================================================================
THE ALGORITHM (ONE AXIS ONLY)
=============================================================================

This is NOT full rectangle packing. Runs are merged along one scan axis:

BY_ROW: scan each row left-to-right, close a run at the first empty cell
(or the row end), emit an N x 1 rectangle.

    row 0:  . # # # . #        ->  [1..3] x 1,  [5] x 1
    row 1:  . # # # . #        ->  [1..3] x 1,  [5] x 1

BY_COLUMN: scan each column top-to-bottom, emit 1 x N rectangles.

    column 1:  #    column 5:  #
               #               #
               -> 1 x 2        -> 1 x 2

The same 2x3 block above becomes 2 rectangles per row with BY_ROW, or one
rectangle per column with BY_COLUMN. Rectangles never span two rows (or
two columns), so the result is an exact partition of the occupied cells:

- every solid cell is covered by exactly one rectangle
- no empty cell is covered

Pick BY_ROW for maps built from long horizontal platforms and BY_COLUMN
for vertical shafts and walls. The merger never chooses for you.

=============================================================================
COORDINATE CONVENTIONS
=============================================================================

Array indexing: cells[y, x], same as the map's row-major tile data.
Rectangles are returned in PIXELS, relative to the layer origin.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

import numpy as np


class ScanAxis(Enum):
    BY_ROW = "row"
    BY_COLUMN = "column"


@dataclass(frozen=True)
class CollisionRectangle:
    """Axis-aligned box in pixels. Owned by the compiled scene."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


class OccupancyGrid:
    """
    Boolean grid of solid cells for one tile layer.

    ==========================================================================
    USAGE EXAMPLE
    ==========================================================================

    ```python
    grid = OccupancyGrid(width=40, height=20)
    grid.mark(3, 7)
    rects = merge_runs(grid, ScanAxis.BY_ROW, 32, 32)
    ```

    ==========================================================================
    """

    def __init__(self, width: int, height: int):
        self.W = width
        self.D = height
        # Shape [rows, columns]; False = empty
        self.cells = np.zeros((height, width), dtype=bool)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence]) -> 'OccupancyGrid':
        """Build a grid from nested rows of truthy/falsy values."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        grid = cls(width, height)
        for y, row in enumerate(rows):
            for x, cell in enumerate(row):
                if cell:
                    grid.mark(x, y)
        return grid

    def mark(self, x: int, y: int, solid: bool = True):
        """Mark a cell. Out-of-bounds writes are ignored."""
        if self._in_bounds(x, y):
            self.cells[y, x] = solid

    def is_occupied(self, x: int, y: int) -> bool:
        if self._in_bounds(x, y):
            return bool(self.cells[y, x])
        return False

    def occupied_cells(self) -> List[Tuple[int, int]]:
        """(x, y) of every occupied cell, row-major."""
        ys, xs = np.nonzero(self.cells)
        return list(zip(xs.tolist(), ys.tolist()))

    def count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.W and 0 <= y < self.D

    def stats(self) -> dict:
        """
        Grid statistics (total/solid/empty cells, solid percentage).

        Handy to sanity-check a layer: 0% solid usually means the tileset
        never set the 'solid' property.
        """
        total = self.W * self.D
        solid = self.count()
        return {
            'total_tiles': total,
            'solid_tiles': solid,
            'empty_tiles': total - solid,
            'solid_percent': (solid / total * 100) if total > 0 else 0
        }


# =============================================================================
# RUN MERGING
# =============================================================================

def _runs(line: np.ndarray) -> Iterable[Tuple[int, int]]:
    """
    (start, length) of each run of True values in a 1-D array.

    Padding with False on both sides turns every run into a rising edge
    followed by a falling edge; np.diff finds both in one pass.
    """
    padded = np.concatenate(([False], line, [False])).astype(np.int8)
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    return zip(starts.tolist(), (ends - starts).tolist())


def merge_runs(grid: OccupancyGrid, axis: ScanAxis,
               tile_width: float, tile_height: float,
               origin: Tuple[float, float] = (0, 0)) -> List[CollisionRectangle]:
    """
    Merge occupied cells into rectangles along one scan axis.

    Parameters:
    -----------
    grid : OccupancyGrid
        Solid cells
    axis : ScanAxis
        BY_ROW emits N x 1 rectangles, BY_COLUMN emits 1 x N
    tile_width, tile_height : float
        Cell size in pixels
    origin : (float, float)
        Pixel offset added to every rectangle

    Returns:
    --------
    List[CollisionRectangle] : ordered by scan line, then run start
    """
    ox, oy = origin
    rects = []

    if axis is ScanAxis.BY_ROW:
        for y in range(grid.D):
            for start, length in _runs(grid.cells[y, :]):
                rects.append(CollisionRectangle(
                    ox + start * tile_width, oy + y * tile_height,
                    length * tile_width, tile_height
                ))
    elif axis is ScanAxis.BY_COLUMN:
        for x in range(grid.W):
            for start, length in _runs(grid.cells[:, x]):
                rects.append(CollisionRectangle(
                    ox + x * tile_width, oy + start * tile_height,
                    tile_width, length * tile_height
                ))
    else:
        raise ValueError(f"Unknown scan axis: {axis!r}")

    return rects


class CollisionRunMerger:
    """merge_runs() bound to an axis and a cell size."""

    def __init__(self, axis: ScanAxis, tile_width: float, tile_height: float):
        self.axis = axis
        self.tile_width = tile_width
        self.tile_height = tile_height

    def merge(self, grid: OccupancyGrid,
              origin: Tuple[float, float] = (0, 0)) -> List[CollisionRectangle]:
        return merge_runs(grid, self.axis, self.tile_width, self.tile_height, origin)


def covered_area(rects: Iterable[CollisionRectangle]) -> float:
    """Sum of rectangle areas in square pixels."""
    return sum(rect.area for rect in rects)
