"""
TiledImporter - load a map, look up layers, compile them into a scene

=============================================================================
USAGE
=============================================================================

```python
importer = TiledImporter("tiled/tilemap.tmj", ["tiled/tileset.tsj"])
importer.load_map()
importer.load_tilesets()

tileset = importer.get_tileset_index("Terrain (32x32)")
level = importer.get_layer_index("level", LayerKind.TILE)
materials = importer.get_layer_index("materials")

options = CompileOptions(collision_optimization=CollisionOptimization.BY_ROW)
root = importer.add_tile_layer(level, tileset, options)
root = importer.add_object_layer(materials, root)

host.spawn(root)
```

Or everything at once, all tile layers sharing one tileset:

```python
root = importer.add_all_layers(options=options, tileset_index=0)
```

=============================================================================
LOAD ORDER
=============================================================================

load_map() must finish before load_tilesets() (embedded tilesets come
from the map), and both before any add_* call. Compilation itself never
touches the filesystem.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from tmj_manager import TiledMap, Tileset
from .diagnostics import Diagnostics
from .errors import TiledSceneError
from .map.index import LayerKind, LayerSummary, MapIndex
from .scene.descriptors import Position, RootContainer
from .scene.object_layer import ObjectLayerCompiler
from .scene.tile_layer import CompileOptions, TileLayerCompiler

logger = logging.getLogger(__name__)

MapSource = Union[str, Path, Dict[str, Any], TiledMap]
TilesetSource = Union[str, Path, Dict[str, Any], Tileset]


class TiledImporter:
    """
    Parameters:
    -----------
    map_source : path, parsed JSON dict, or TiledMap
        The map to import
    tileset_sources : list, optional
        Paths / JSON dicts / Tileset objects, in index order. None means
        "use the tilesets embedded in the map".
    diagnostics : Diagnostics, optional
        Shared channel for lookup misses, type mismatches, empty objects
    """

    layer_types = LayerKind

    def __init__(self, map_source: MapSource,
                 tileset_sources: Optional[Sequence[TilesetSource]] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.map_source = map_source
        self.tileset_sources = tileset_sources
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.map: Optional[TiledMap] = None
        self.tilesets: Optional[List[Tileset]] = None

    # =========================================================================
    # LOADING
    # =========================================================================

    def load_map(self) -> TiledMap:
        source = self.map_source
        if isinstance(source, TiledMap):
            self.map = source
        elif isinstance(source, dict):
            self.map = TiledMap.from_json(source)
        else:
            self.map = TiledMap.load(source)
        logger.info("Loaded map: %dx%d tiles, %d layers",
                    self.map.width, self.map.height, len(self.map.layers))
        return self.map

    def load_tilesets(self) -> List[Tileset]:
        if self.map is None:
            raise TiledSceneError("load_map() must be called before load_tilesets()")

        if self.tileset_sources is None:
            self.tilesets = self.map.tilesets
        else:
            self.tilesets = [self._load_tileset(source) for source in self.tileset_sources]
        logger.info("Tilesets: %s", ", ".join(t.name for t in self.tilesets) or "(none)")
        return self.tilesets

    def load(self) -> 'TiledImporter':
        """load_map() then load_tilesets()."""
        self.load_map()
        self.load_tilesets()
        return self

    @staticmethod
    def _load_tileset(source: TilesetSource) -> Tileset:
        if isinstance(source, Tileset):
            return source
        if isinstance(source, dict):
            return Tileset.from_json(source)
        return Tileset.load(source)

    @property
    def index(self) -> MapIndex:
        if self.map is None or self.tilesets is None:
            raise TiledSceneError("Map and tilesets must be loaded first")
        return MapIndex(self.map, self.tilesets, self.diagnostics)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_layers(self) -> List[LayerSummary]:
        return self.index.layer_summary()

    def get_layer_index(self, name: str, kind: Optional[LayerKind] = None) -> Optional[int]:
        return self.index.resolve_layer(name, kind)

    def get_tileset_names(self) -> List[str]:
        return self.index.tileset_names()

    def get_tileset_index(self, name: str) -> Optional[int]:
        return self.index.resolve_tileset(name)

    # =========================================================================
    # COMPILATION
    # =========================================================================

    def add_tile_layer(self, layer_index: Optional[int], tileset_index: Optional[int] = None,
                       options: Optional[CompileOptions] = None,
                       root: Optional[RootContainer] = None) -> RootContainer:
        """
        Compile a tile layer into `root` (a new container when None).

        tileset_index None means tileset 0. Raises StructuralError for a
        bad layer index, a non-tile layer, or a missing tileset.
        """
        index = self.index
        tileset = index.tileset(tileset_index or 0)
        compiler = TileLayerCompiler(self.map.tilewidth, self.map.tileheight, self.diagnostics)
        return compiler.compile(index.layer(layer_index), tileset, options, root).root

    def add_object_layer(self, layer_index: Optional[int],
                         root: Optional[RootContainer] = None) -> RootContainer:
        compiler = ObjectLayerCompiler(self.diagnostics)
        return compiler.compile(self.index.layer(layer_index), root).root

    def add_all_layers(self, root: Optional[RootContainer] = None,
                       options: Optional[CompileOptions] = None,
                       tileset_index: Optional[int] = None) -> RootContainer:
        """
        Compile every recognized layer, in map order, into one container.

        All tile layers use the same tileset and sprite.
        """
        if root is None:
            root = RootContainer(Position(0, 0))
        for entry in self.get_layers():
            if entry.kind is LayerKind.OBJECT:
                self.add_object_layer(entry.index, root)
            elif entry.kind is LayerKind.TILE:
                self.add_tile_layer(entry.index, tileset_index, options, root)
        return root
