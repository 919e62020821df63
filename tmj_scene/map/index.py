"""
Layer and tileset lookup tables for a loaded map

=============================================================================
POSITIONAL INDICES
=============================================================================

Every index handed out here is a position in the ORIGINAL sequence:
map.layers for layers, the tileset list for tilesets. The layer summary
skips layers the compiler cannot use (no name, unknown kind), but it does
not renumber the survivors:

    map.layers               layer_summary()
    ----------               ---------------
    0  "bg"     tilelayer    LayerSummary(0, "bg", TILE)
    1  ""       tilelayer    (skipped: no name)
    2  "sky"    imagelayer   (skipped: unknown kind)
    3  "level"  tilelayer    LayerSummary(3, "level", TILE)

resolve_layer("level") returns 3, which is valid against map.layers.
Returning 1 (its position in the summary) would hand the compiler the
wrong layer.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from tmj_manager import TiledMap, TileLayer, ObjectGroup, Tileset, Layer
from ..diagnostics import Diagnostics, DiagnosticKind


class LayerKind(Enum):
    TILE = 1
    OBJECT = 2


@dataclass(frozen=True)
class LayerSummary:
    index: int          # Position in map.layers
    name: str
    kind: LayerKind


def kind_of(layer: Layer) -> Optional[LayerKind]:
    """Recognized kind of a parsed layer, or None for anything else."""
    if isinstance(layer, TileLayer):
        return LayerKind.TILE
    if isinstance(layer, ObjectGroup):
        return LayerKind.OBJECT
    return None


class MapIndex:
    """
    Name/kind lookups over a map's layers and tilesets.

    Nothing is cached: the summary is rebuilt on every call so that edits to
    map.layers or the tileset list between calls are always seen.

    Parameters:
    -----------
    tiled_map : TiledMap
        The loaded map
    tilesets : list of Tileset, optional
        External tilesets. None means "use the tilesets embedded in the map".
    diagnostics : Diagnostics, optional
        Channel for LOOKUP_MISS reports
    """

    def __init__(self, tiled_map: TiledMap, tilesets: Optional[List[Tileset]] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.map = tiled_map
        self._tilesets = tilesets
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    @property
    def tilesets(self) -> List[Tileset]:
        if self._tilesets is None:
            return self.map.tilesets
        return self._tilesets

    # =========================================================================
    # LAYERS
    # =========================================================================

    def layer_summary(self) -> List[LayerSummary]:
        summary = []
        for index, layer in enumerate(self.map.layers):
            if not layer.name:
                continue
            kind = kind_of(layer)
            if kind is None:
                continue
            summary.append(LayerSummary(index, layer.name, kind))
        return summary

    def resolve_layer(self, name: str, kind: Optional[LayerKind] = None) -> Optional[int]:
        """
        Position of the first layer named `name` (and of kind `kind`).

        Returns None and reports LOOKUP_MISS when nothing matches. Callers
        must check for None: compilers treat a bad index as a structural
        error, not as "nothing to do".
        """
        for entry in self.layer_summary():
            if entry.name == name and (kind is None or entry.kind is kind):
                return entry.index

        wanted = f" of kind {kind.name}" if kind is not None else ""
        self.diagnostics.report(
            DiagnosticKind.LOOKUP_MISS,
            f"No layer named '{name}'{wanted} was found"
        )
        return None

    def layer(self, index: Optional[int]) -> Optional[Layer]:
        """Layer at a positional index, or None when out of range."""
        if index is None or not 0 <= index < len(self.map.layers):
            return None
        return self.map.layers[index]

    # =========================================================================
    # TILESETS
    # =========================================================================

    def tileset_names(self) -> List[str]:
        return [tileset.name for tileset in self.tilesets]

    def resolve_tileset(self, name: str) -> Optional[int]:
        """
        Position of the first tileset named `name`.

        Duplicate names resolve to the EARLIEST entry; maps may rely on
        ordering to override tilesets.
        """
        for index, tileset_name in enumerate(self.tileset_names()):
            if tileset_name == name:
                return index

        self.diagnostics.report(
            DiagnosticKind.LOOKUP_MISS,
            f"No tileset named '{name}' was found"
        )
        return None

    def tileset(self, index: Optional[int]) -> Optional[Tileset]:
        tilesets = self.tilesets
        if index is None or not 0 <= index < len(tilesets):
            return None
        return tilesets[index]
