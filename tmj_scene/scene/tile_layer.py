"""
Tile layer compilation

=============================================================================
WHAT COMES OUT
=============================================================================

For each non-empty cell (tile index v != 0, frame = v - 1) the tile's
properties are resolved and turned into capabilities:

    solid = true     collision: per-cell Area + static Body, or a mark in
                     the occupancy grid when runs are merged
    tag = "a b"      Tags(("a", "b")) on the per-cell entity

Three options shape the output:

    per_cell_entities       one entity per cell with Position, SpriteFrame,
                            TileMarker and Offscreen
    collision_optimization  NONE: collision on each cell entity
                            BY_ROW / BY_COLUMN: merged rectangles, one
                            collision entity each (see map.collision)
    batched_draw            no per-cell visuals at all; one CustomDraw
                            entity draws the whole layer every tick

=============================================================================
BATCHING AND TAGS
=============================================================================

A batched cell has no entity of its own, so its tags have nowhere to go
and are dropped. Collision is unaffected: with NONE the solid cells still
get collision-only entities, otherwise the merged rectangles are emitted
as usual.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from tmj_manager import TileLayer, Tileset
from ..diagnostics import Diagnostics
from ..errors import StructuralError
from ..map.collision import (
    CollisionRectangle, OccupancyGrid, ScanAxis, merge_runs,
)
from ..map.properties import BoolValue, StringValue, TilePropertyResolver, split_tags
from .batched_draw import BatchedDrawPlan
from .descriptors import (
    Area, Body, CustomDraw, EntityDescriptor, Offscreen, Position, Rect,
    RootContainer, SpriteFrame, Tags, TileMarker,
)

logger = logging.getLogger(__name__)


class CollisionOptimization(Enum):
    NONE = "none"
    BY_ROW = "row"
    BY_COLUMN = "column"

    @property
    def axis(self) -> Optional[ScanAxis]:
        if self is CollisionOptimization.BY_ROW:
            return ScanAxis.BY_ROW
        if self is CollisionOptimization.BY_COLUMN:
            return ScanAxis.BY_COLUMN
        return None


@dataclass
class CompileOptions:
    """
    Tile layer compile settings.

    sprite is the name under which the host registered the sliced tileset
    image; frames in SpriteFrame / BatchedDrawPlan index into it.
    """
    per_cell_entities: bool = True
    collision_optimization: CollisionOptimization = CollisionOptimization.NONE
    batched_draw: bool = False
    sprite: str = "tiles"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompileOptions':
        """
        Options from plain config, e.g.
        {"batched_draw": true, "collision_optimization": "row"}
        """
        options = cls()
        if 'per_cell_entities' in data:
            options.per_cell_entities = bool(data['per_cell_entities'])
        if 'batched_draw' in data:
            options.batched_draw = bool(data['batched_draw'])
        if 'sprite' in data:
            options.sprite = str(data['sprite'])
        mode = data.get('collision_optimization')
        if mode is not None:
            if isinstance(mode, CollisionOptimization):
                options.collision_optimization = mode
            else:
                # ValueError for unknown modes
                options.collision_optimization = CollisionOptimization(str(mode).lower())
        return options


@dataclass
class CompiledTileLayer:
    root: RootContainer
    entities: List[EntityDescriptor] = field(default_factory=list)
    batched_plan: Optional[BatchedDrawPlan] = None
    collision_rects: List[CollisionRectangle] = field(default_factory=list)

    def descriptors(self) -> List[EntityDescriptor]:
        return list(self.entities)

    def collision_entities(self) -> List[EntityDescriptor]:
        return [e for e in self.entities if e.has(Area)]


class TileLayerCompiler:
    """
    Compiles one tile layer into entity descriptors.

    Parameters:
    -----------
    tile_width, tile_height : int
        Map cell size in pixels (map.tilewidth / map.tileheight)
    diagnostics : Diagnostics, optional
        Channel for property type mismatches
    """

    def __init__(self, tile_width: int, tile_height: int,
                 diagnostics: Optional[Diagnostics] = None):
        self.tile_width = tile_width
        self.tile_height = tile_height
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def compile(self, layer: Optional[TileLayer], tileset: Optional[Tileset],
                options: Optional[CompileOptions] = None,
                root: Optional[RootContainer] = None) -> CompiledTileLayer:
        """
        Compile `layer` against `tileset`.

        Raises:
        -------
        StructuralError : layer missing or not a tile layer, tileset missing,
                          or len(data) != width * height. Nothing is added
                          to `root` in that case.
        """
        if options is None:
            options = CompileOptions()
        self._validate(layer, tileset)

        if root is None:
            root = RootContainer(Position(layer.x, layer.y))

        resolver = TilePropertyResolver(self.diagnostics, layer_name=layer.name)
        merging = options.collision_optimization.axis is not None
        occupancy = OccupancyGrid(layer.width, layer.height) if merging else None
        draw_cells = options.per_cell_entities and not options.batched_draw

        entities: List[EntityDescriptor] = []

        # -----------------------------------------------------------------
        # CELL WALK (row-major, same order as layer.data)
        # -----------------------------------------------------------------
        for i, index in enumerate(layer.data):
            if index == 0:
                continue
            x = i % layer.width
            y = i // layer.width
            frame = index - 1

            props = resolver.resolve(tileset, frame, where=(x, y))
            solid = resolver.check(props, 'solid', BoolValue, False, where=(x, y))
            tag = resolver.check(props, 'tag', StringValue, "", where=(x, y))

            components = []
            if draw_cells:
                components.extend((
                    SpriteFrame(options.sprite, frame), TileMarker(), Offscreen(),
                ))

            if solid:
                if merging:
                    occupancy.mark(x, y)
                else:
                    components.extend(self._cell_collision())

            if not components:
                continue

            tokens = split_tags(tag) if tag else []
            if tokens and not options.batched_draw:
                components.append(Tags(tuple(tokens)))

            position = Position(x * self.tile_width, y * self.tile_height)
            entities.append(EntityDescriptor((position, *components)))

        # -----------------------------------------------------------------
        # BATCHED DRAW
        # -----------------------------------------------------------------
        plan = None
        if options.batched_draw:
            plan = BatchedDrawPlan.from_tile_indices(
                layer.data, layer.width, layer.height, options.sprite,
                self.tile_width, self.tile_height,
                origin=(root.position.x, root.position.y)
            )
            entities.append(EntityDescriptor((Position(0, 0), CustomDraw(plan))))

        # -----------------------------------------------------------------
        # MERGED COLLISION
        # -----------------------------------------------------------------
        rects: List[CollisionRectangle] = []
        if merging:
            rects = merge_runs(occupancy, options.collision_optimization.axis,
                               self.tile_width, self.tile_height)
            for rect in rects:
                entities.append(EntityDescriptor((
                    Position(rect.x, rect.y),
                    Area(shape=Rect(0, 0, rect.width, rect.height)),
                    Body(is_static=True),
                )))

        for entity in entities:
            root.add(entity)

        logger.info(
            "Compiled tile layer '%s': %d entities, %d merged rects, batched=%s",
            layer.name, len(entities), len(rects), plan is not None
        )
        return CompiledTileLayer(root, entities, plan, rects)

    def _cell_collision(self) -> Tuple[Area, Body]:
        return (
            Area(shape=Rect(0, 0, self.tile_width, self.tile_height)),
            Body(is_static=True),
        )

    @staticmethod
    def _validate(layer, tileset):
        if layer is None or not isinstance(layer, TileLayer):
            raise StructuralError("This layer is not type tile layer")
        if tileset is None:
            raise StructuralError("Tileset cannot be found")
        if layer.width * layer.height != len(layer.data):
            raise StructuralError(
                f"Layer data is incorrect: '{layer.name}' has {len(layer.data)} "
                f"cells, expected {layer.width}x{layer.height}"
            )
