"""Map indexing, property resolution and collision merging"""

from .index import MapIndex, LayerKind, LayerSummary
from .properties import TilePropertyResolver, BoolValue, StringValue, NumberValue
from .collision import (
    CollisionRectangle, CollisionRunMerger, OccupancyGrid, ScanAxis, merge_runs,
)

__all__ = [
    "MapIndex", "LayerKind", "LayerSummary",
    "TilePropertyResolver", "BoolValue", "StringValue", "NumberValue",
    "CollisionRectangle", "CollisionRunMerger", "OccupancyGrid", "ScanAxis",
    "merge_runs",
]
