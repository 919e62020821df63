r"""
Batched tile-layer drawing with per-cell circular culling

=============================================================================
ONE DRAW ROUTINE INSTEAD OF ONE ENTITY PER CELL
=============================================================================

A 200x100 layer compiled cell-by-cell becomes up to 20,000 entities, each
updated and drawn by the host every frame. With batching the layer becomes
ONE entity carrying a CustomDraw(plan). Each tick the host calls:

    plan.render(camera_state, draw_sprite)

and the plan walks its frame grid, skips cells far from the camera, and
hands the rest straight to the host's sprite primitive.

=============================================================================
THE CULL
=============================================================================

Coarse and cheap: a cell is drawn when its world position lies within the
camera's half-diagonal visible extent, plus one tile of margin:

            radius = hypot(view_w, view_h) / zoom / 2 + tile
           .-----------.
         /   +-------+   \        + = visible rectangle
        |    |   C   |    |       C = camera reference position
         \   +-------+   /
           '-----------'

Cells in the corners of the circle but outside the screen are still drawn;
that waste is accepted in exchange for one distance test per cell, done
for the whole grid at once with numpy.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, List, Tuple

import numpy as np

from ..camera import CameraState

# draw_sprite(sprite_name, frame, world_x, world_y)
DrawSprite = Callable[[str, int, float, float], None]

EMPTY_FRAME = -1


@dataclass(frozen=True)
class BatchedDrawPlan:
    """
    Frame grid of a whole tile layer plus what is needed to draw it.

    frames : np.ndarray
        int32 array [row, column]; EMPTY_FRAME where there is no tile
    sprite : str
        Name of the sliced tileset sprite registered with the host
    tile_width, tile_height : float
        Cell size in pixels
    origin : (float, float)
        World position of cell (0, 0)
    """
    frames: np.ndarray = field(compare=False)
    sprite: str
    tile_width: float
    tile_height: float
    origin: Tuple[float, float] = (0, 0)

    @classmethod
    def from_tile_indices(cls, data, width: int, height: int, sprite: str,
                          tile_width: float, tile_height: float,
                          origin: Tuple[float, float] = (0, 0)) -> 'BatchedDrawPlan':
        """
        Build a plan from row-major tile indices (0 = empty, v = frame v-1).
        """
        indices = np.asarray(data, dtype=np.int64).reshape(height, width)
        frames = (indices - 1).astype(np.int32)
        frames[indices == 0] = EMPTY_FRAME
        frames.setflags(write=False)
        return cls(frames, sprite, tile_width, tile_height, origin)

    @property
    def cell_count(self) -> int:
        return int(np.count_nonzero(self.frames != EMPTY_FRAME))

    def visible_cells(self, camera: CameraState) -> List[Tuple[float, float, int]]:
        """
        (world_x, world_y, frame) of every occupied cell that survives the cull.

        Row-major order, so later rows draw over earlier ones.
        """
        rows, cols = np.nonzero(self.frames != EMPTY_FRAME)
        if rows.size == 0:
            return []

        ox, oy = self.origin
        world_x = ox + cols * self.tile_width
        world_y = oy + rows * self.tile_height

        cx, cy = camera.position
        radius = camera.visible_radius(margin=max(self.tile_width, self.tile_height))
        # Compare squared distances; no sqrt per cell
        visible = (world_x - cx) ** 2 + (world_y - cy) ** 2 <= radius * radius

        frames = self.frames[rows[visible], cols[visible]]
        return list(zip(world_x[visible].tolist(), world_y[visible].tolist(),
                        frames.tolist()))

    def render(self, camera: CameraState, draw_sprite: DrawSprite) -> int:
        """
        Draw every surviving cell through the host primitive.

        Stateless: all camera information comes in with the call.

        Returns:
        --------
        int : Number of cells drawn this tick
        """
        drawn = 0
        for world_x, world_y, frame in self.visible_cells(camera):
            draw_sprite(self.sprite, frame, world_x, world_y)
            drawn += 1
        return drawn
