"""Scene descriptors and layer compilers"""

from .descriptors import (
    Area, Body, CustomDraw, EntityDescriptor, Offscreen, Position, Rect,
    RootContainer, Sprite, SpriteFrame, Tags, TileMarker,
)
from .tile_layer import (
    CollisionOptimization, CompileOptions, CompiledTileLayer, TileLayerCompiler,
)
from .object_layer import CompiledObjectLayer, ObjectLayerCompiler
from .batched_draw import BatchedDrawPlan

__all__ = [
    "Area", "Body", "CustomDraw", "EntityDescriptor", "Position", "Rect",
    "RootContainer", "Sprite", "SpriteFrame", "Tags", "TileMarker", "Offscreen",
    "CollisionOptimization", "CompileOptions", "CompiledTileLayer",
    "TileLayerCompiler", "CompiledObjectLayer", "ObjectLayerCompiler",
    "BatchedDrawPlan",
]
