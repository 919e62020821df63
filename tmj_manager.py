#!/usr/bin/env python3

"""
Module for reading Tiled JSON maps (.tmj) and tilesets (.tsj)

=============================================================================
WHAT IS TMJ?
=============================================================================

TMJ is the JSON export format of the Tiled Map Editor. It carries the same
information as the XML (TMX) format, but as plain JSON objects:

    {
        "tilewidth": 32, "tileheight": 32, "width": 40, "height": 20,
        "layers": [
            {"name": "level", "type": "tilelayer", "x": 0, "y": 0,
             "width": 40, "height": 20, "data": [0, 0, 12, 13, ...]},
            {"name": "materials", "type": "objectgroup",
             "objects": [{"id": 1, "x": 64, "y": 96, "width": 32,
                          "height": 32, "properties": [...]}]}
        ],
        "tilesets": [{"firstgid": 1, "source": "terrain.tsj"}]
    }

A TSJ file is a standalone tileset:

    {
        "name": "Terrain (32x32)",
        "tilewidth": 32, "tileheight": 32, "columns": 19, "tilecount": 247,
        "tiles": [
            {"id": 5, "properties": [
                {"name": "solid", "type": "bool", "value": true},
                {"name": "tag", "type": "string", "value": "ground grass"}
            ]}
        ]
    }

=============================================================================
TILE INDICES
=============================================================================

Layer data holds one integer per cell in row-major order:

    0      = empty cell (no tile)
    v > 0  = tile frame v - 1 of the referenced tileset

The top three bits of each value are flip flags (horizontal, vertical,
diagonal). They are cleared on load; flipped tiles draw unflipped.

Tiled writes global IDs (firstgid-based). Maps that use a single tileset
with firstgid=1 make the global ID and "frame + 1" the same number, which
is what the scene compiler relies on.

=============================================================================
LAYER ORDER
=============================================================================

Layers are kept in the exact order and count they appear in the file,
including kinds we do not compile (image layers, groups). Code that
resolves a layer by name returns positions in THIS list, so nothing may be
dropped while parsing.

=============================================================================
"""

import json
import logging
from typing import Optional, List, Dict, Any, Union
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


# Tiled stores flip/rotation flags in the high bits of each global tile ID
FLIP_FLAGS_MASK = 0xE0000000


class MapFormatError(ValueError):
    """Raised when a JSON document does not look like a Tiled map/tileset."""


# =============================================================================
# PROPERTY CLASS
# =============================================================================

@dataclass
class Property:
    """
    Custom property attached to a tile, object, layer or map.

    Unlike TMX, the JSON format already stores values with their JSON type
    (true/false, numbers, strings), so no string conversion happens here.
    The declared type is kept verbatim: checking that value and declared
    type agree is the job of the property resolver, which reports a
    mismatch instead of failing the whole load.

    JSON format:
        {"name": "solid", "type": "bool", "value": true}
        {"name": "tag", "type": "string", "value": "ground grass"}
    """
    name: str                    # Property name (key)
    type: str = "string"         # Declared type, as written by Tiled
    value: Any = None            # Raw JSON value

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Property':
        """Parse a property from its JSON object."""
        return cls(
            name=data.get('name', ''),
            type=data.get('type', 'string'),
            value=data.get('value')
        )


def _parse_properties(data: Dict[str, Any]) -> List[Property]:
    # Declared order matters: capability checks walk properties in order
    return [Property.from_json(p) for p in data.get('properties') or []]


# =============================================================================
# TILE CLASS
# =============================================================================

@dataclass
class Tile:
    """
    Metadata for one tile of a tileset.

    Only tiles with properties (or animations, images...) are listed in the
    tileset file. A tile without an entry simply has no properties.

    The 'id' is LOCAL to the tileset (0-based), the same number as the
    sprite frame in the sliced tileset image.
    """
    id: int                                          # Local tile ID
    type: str = ""                                   # Tile class
    properties: List[Property] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Tile':
        return cls(
            id=int(data.get('id', 0)),
            type=data.get('type', data.get('class', '')),
            properties=_parse_properties(data)
        )


# =============================================================================
# TILESET CLASS
# =============================================================================

@dataclass
class Tileset:
    """
    Tileset - a named collection of tile definitions.

    ==========================================================================
    EMBEDDED vs EXTERNAL TILESETS
    ==========================================================================

    EMBEDDED: the full tileset object sits inside the map's "tilesets" list.

    EXTERNAL (TSJ): the map only holds {"firstgid": 1, "source": "x.tsj"}
        and the definition lives in a separate file. TiledMap.load()
        resolves these relative to the map file.

    ==========================================================================
    IDENTITY
    ==========================================================================

    Tilesets are referenced by their POSITION in the tileset list, not by
    content. Two tilesets may even share a name; lookups by name return
    the earliest one.

    ==========================================================================
    """
    name: str                                        # Tileset name
    firstgid: int = 1                                # First global ID
    tilewidth: int = 0                               # Tile width in pixels
    tileheight: int = 0                              # Tile height in pixels
    tilecount: int = 0                               # Total number of tiles
    columns: int = 0                                 # Tiles per image row
    spacing: int = 0                                 # Pixels between tiles
    margin: int = 0                                  # Pixels around edge
    image: Optional[str] = None                      # Spritesheet image path
    tiles: Dict[int, Tile] = field(default_factory=dict)
    source: Optional[str] = None                     # TSJ path (if external)

    @classmethod
    def from_json(cls, data: Dict[str, Any], firstgid: int = 1) -> 'Tileset':
        """
        Parse a tileset from its JSON object.

        Parameters:
        -----------
        data : dict
            Embedded tileset entry or the root object of a .tsj file
        firstgid : int
            First global ID (the map decides this, not the tileset file)
        """
        if not isinstance(data, dict):
            raise MapFormatError("Tileset must be a JSON object")

        tileset = cls(
            name=data.get('name', ''),
            firstgid=int(data.get('firstgid', firstgid)),
            tilewidth=int(data.get('tilewidth', 0)),
            tileheight=int(data.get('tileheight', 0)),
            tilecount=int(data.get('tilecount', 0)),
            columns=int(data.get('columns', 0)),
            spacing=int(data.get('spacing', 0)),
            margin=int(data.get('margin', 0)),
            image=data.get('image'),
            source=data.get('source')
        )

        tiles = data.get('tiles') or []
        if not isinstance(tiles, list):
            raise MapFormatError(f"Tileset '{tileset.name}': 'tiles' must be a list")
        for tile_data in tiles:
            tile = Tile.from_json(tile_data)
            tileset.tiles[tile.id] = tile

        return tileset

    @classmethod
    def load(cls, filepath: Union[str, Path], firstgid: int = 1) -> 'Tileset':
        """
        Load a standalone .tsj file from disk.

        Raises:
        -------
        FileNotFoundError : If the file doesn't exist
        json.JSONDecodeError : If the JSON is malformed
        """
        filepath = Path(filepath)
        with filepath.open('r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_json(data, firstgid)

    def get_tile(self, local_id: int) -> Optional[Tile]:
        """Tile definition for a local id, or None when it has no entry."""
        return self.tiles.get(local_id)


# =============================================================================
# TILE LAYER CLASS
# =============================================================================

@dataclass
class TileLayer:
    """
    Tile layer - a grid of tile indices.

    'data' is kept exactly as read, even when its length does not match
    width * height. The compiler rejects such a layer; loading it must
    still succeed so that the rest of the map can be indexed.
    """
    name: str                                        # Layer name
    width: int                                       # Width in cells
    height: int                                      # Height in cells
    id: int = 0                                      # Unique layer ID
    x: float = 0                                     # Origin X (pixels)
    y: float = 0                                     # Origin Y (pixels)
    offsetx: float = 0                               # Render offset X
    offsety: float = 0                               # Render offset Y
    visible: bool = True                             # Is layer rendered?
    opacity: float = 1.0                             # Transparency
    properties: List[Property] = field(default_factory=list)
    data: List[int] = field(default_factory=list)

    type = 'tilelayer'

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'TileLayer':
        tiles = data.get('data') or []
        if isinstance(tiles, str):
            # base64 data needs the editor's "CSV" export option
            raise MapFormatError(
                f"Layer '{data.get('name', '')}': encoded layer data is not supported, "
                "export with CSV layer format"
            )
        return cls(
            name=data.get('name', ''),
            width=int(data.get('width', 0)),
            height=int(data.get('height', 0)),
            id=int(data.get('id', 0)),
            x=data.get('x', 0),
            y=data.get('y', 0),
            offsetx=data.get('offsetx', 0),
            offsety=data.get('offsety', 0),
            visible=bool(data.get('visible', True)),
            opacity=float(data.get('opacity', 1.0)),
            properties=_parse_properties(data),
            data=[int(v) & ~FLIP_FLAGS_MASK for v in tiles]
        )

    def get_tile_index(self, x: int, y: int) -> int:
        """
        Tile index at cell (x, y), row-major. Out of bounds = 0 (empty).
        """
        if 0 <= x < self.width and 0 <= y < self.height:
            index = y * self.width + x
            if index < len(self.data):
                return self.data[index]
        return 0


# =============================================================================
# MAP OBJECT CLASS
# =============================================================================

@dataclass
class MapObject:
    """
    Object in an object layer.

    'properties' is None when the JSON object has no "properties" key at
    all, and an empty list when the key exists but is empty. Both mean
    "nothing to attach" for the scene compiler.
    """
    id: int                                          # Unique object ID
    name: str = ""                                   # Object name
    type: str = ""                                   # Object class
    x: float = 0                                     # X position (pixels)
    y: float = 0                                     # Y position (pixels)
    width: float = 0                                 # Width (0 for points)
    height: float = 0                                # Height (0 for points)
    rotation: float = 0                              # Rotation in degrees
    gid: Optional[int] = None                        # Tile objects only
    visible: bool = True
    properties: Optional[List[Property]] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'MapObject':
        obj = cls(
            id=int(data.get('id', 0)),
            name=data.get('name', ''),
            type=data.get('type', data.get('class', '')),
            x=data.get('x', 0),
            y=data.get('y', 0),
            width=data.get('width', 0),
            height=data.get('height', 0),
            rotation=data.get('rotation', 0),
            gid=data.get('gid'),
            visible=bool(data.get('visible', True))
        )
        if 'properties' in data:
            obj.properties = _parse_properties(data)
        return obj


# =============================================================================
# OBJECT GROUP CLASS
# =============================================================================

@dataclass
class ObjectGroup:
    """
    Object layer - an ordered list of free-form objects.
    """
    name: str                                        # Layer name
    id: int = 0
    x: float = 0
    y: float = 0
    visible: bool = True
    opacity: float = 1.0
    properties: List[Property] = field(default_factory=list)
    objects: List[MapObject] = field(default_factory=list)

    type = 'objectgroup'

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ObjectGroup':
        return cls(
            name=data.get('name', ''),
            id=int(data.get('id', 0)),
            x=data.get('x', 0),
            y=data.get('y', 0),
            visible=bool(data.get('visible', True)),
            opacity=float(data.get('opacity', 1.0)),
            properties=_parse_properties(data),
            objects=[MapObject.from_json(o) for o in data.get('objects') or []]
        )


# =============================================================================
# OTHER LAYERS
# =============================================================================

@dataclass
class OtherLayer:
    """
    Any layer kind the compiler does not handle (imagelayer, group, ...).

    Kept only so that layer positions match the file.
    """
    name: str
    type: str
    raw: Dict[str, Any] = field(default_factory=dict)


Layer = Union[TileLayer, ObjectGroup, OtherLayer]


def parse_layer(data: Dict[str, Any]) -> Layer:
    """Build the right layer class from a JSON layer object."""
    if not isinstance(data, dict):
        raise MapFormatError("Layer entries must be JSON objects")
    layer_type = data.get('type')
    if layer_type == 'tilelayer':
        return TileLayer.from_json(data)
    if layer_type == 'objectgroup':
        return ObjectGroup.from_json(data)
    return OtherLayer(name=data.get('name', ''), type=str(layer_type), raw=data)


# =============================================================================
# MAP CLASS
# =============================================================================

@dataclass
class TiledMap:
    """
    Complete Tiled map - the root object of a .tmj file.

    ==========================================================================
    USAGE
    ==========================================================================

    Loading:
        tiled_map = TiledMap.load("level1.tmj")
        print(f"Map size: {tiled_map.width}x{tiled_map.height}")

    From already-parsed JSON (e.g. fetched over the network):
        tiled_map = TiledMap.from_json(payload)

    ==========================================================================
    """
    width: int = 0                                   # Map width in tiles
    height: int = 0                                  # Map height in tiles
    tilewidth: int = 0                               # Tile width in pixels
    tileheight: int = 0                              # Tile height in pixels
    orientation: str = "orthogonal"
    infinite: bool = False
    properties: List[Property] = field(default_factory=list)
    tilesets: List[Tileset] = field(default_factory=list)
    layers: List[Layer] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any],
                  base_path: Optional[Path] = None) -> 'TiledMap':
        """
        Parse a map from its JSON object.

        Parameters:
        -----------
        data : dict
            Root object of a .tmj document
        base_path : Path, optional
            Directory used to resolve external tilesets. When None,
            external tileset references are kept as placeholders.
        """
        if not isinstance(data, dict):
            raise MapFormatError("Map must be a JSON object")
        if not isinstance(data.get('layers'), list):
            raise MapFormatError("Map has no 'layers' list")

        tiled_map = cls(
            width=int(data.get('width', 0)),
            height=int(data.get('height', 0)),
            tilewidth=int(data.get('tilewidth', 0)),
            tileheight=int(data.get('tileheight', 0)),
            orientation=data.get('orientation', 'orthogonal'),
            infinite=bool(data.get('infinite', False)),
            properties=_parse_properties(data)
        )

        # -----------------------------------------------------------------
        # TILESETS
        # -----------------------------------------------------------------
        for entry in data.get('tilesets') or []:
            firstgid = int(entry.get('firstgid', 1))
            source = entry.get('source')
            if source:
                tileset = tiled_map._load_external_tileset(source, firstgid, base_path)
            else:
                tileset = Tileset.from_json(entry, firstgid)
            tiled_map.tilesets.append(tileset)

        # -----------------------------------------------------------------
        # LAYERS (every entry, in file order)
        # -----------------------------------------------------------------
        for layer_data in data['layers']:
            tiled_map.layers.append(parse_layer(layer_data))

        return tiled_map

    def _load_external_tileset(self, source: str, firstgid: int,
                               base_path: Optional[Path]) -> Tileset:
        placeholder = Tileset(
            name=Path(source).stem,
            firstgid=firstgid,
            tilewidth=self.tilewidth,
            tileheight=self.tileheight,
            source=source
        )
        if base_path is None:
            return placeholder
        try:
            tileset = Tileset.load(base_path / source, firstgid)
        except FileNotFoundError:
            logger.warning("External tileset not found: %s", base_path / source)
            return placeholder
        tileset.source = source
        return tileset

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'TiledMap':
        """
        Load a .tmj file from disk, resolving external tilesets.

        Raises:
        -------
        FileNotFoundError : If the map file doesn't exist
        json.JSONDecodeError : If the JSON is malformed
        MapFormatError : If the JSON is not a Tiled map
        """
        filepath = Path(filepath)
        with filepath.open('r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_json(data, base_path=filepath.parent)
