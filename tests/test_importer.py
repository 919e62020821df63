"""Tests for the TiledImporter facade."""

import json

import pytest

from tmj_scene.diagnostics import DiagnosticKind, Diagnostics
from tmj_scene.errors import StructuralError, TiledSceneError
from tmj_scene.importer import TiledImporter
from tmj_scene.map.index import LayerKind
from tmj_scene.scene.descriptors import CustomDraw, Sprite, SpriteFrame
from tmj_scene.scene.tile_layer import CollisionOptimization, CompileOptions

from conftest import TERRAIN_JSON, map_json


@pytest.fixture
def map_files(tmp_path):
    data = map_json()
    data["tilesets"] = [{"firstgid": 1, "source": "terrain.tsj"}]
    (tmp_path / "terrain.tsj").write_text(json.dumps(TERRAIN_JSON))
    (tmp_path / "tilemap.tmj").write_text(json.dumps(data))
    return tmp_path


def test_long_form_import(map_files):
    importer = TiledImporter(map_files / "tilemap.tmj", [map_files / "terrain.tsj"])
    importer.load_map()
    importer.load_tilesets()

    tileset = importer.get_tileset_index("Terrain (32x32)")
    level = importer.get_layer_index("level", TiledImporter.layer_types.TILE)
    materials = importer.get_layer_index("materials")
    root = importer.add_tile_layer(level, tileset)
    root = importer.add_object_layer(materials, root)

    assert (tileset, level, materials) == (0, 1, 2)
    assert len(root) == 6
    assert sum(1 for e in root if e.has(Sprite)) == 1


def test_embedded_tilesets_when_none_given():
    importer = TiledImporter(map_json()).load()

    assert importer.get_tileset_names() == ["Terrain (32x32)"]
    assert [s.kind for s in importer.get_layers()] == [
        LayerKind.TILE, LayerKind.TILE, LayerKind.OBJECT,
    ]


def test_tilesets_require_loaded_map():
    importer = TiledImporter(map_json())

    with pytest.raises(TiledSceneError):
        importer.load_tilesets()


def test_add_all_layers_shares_one_root():
    diagnostics = Diagnostics()
    importer = TiledImporter(map_json(), diagnostics=diagnostics).load()
    options = CompileOptions(batched_draw=True,
                             collision_optimization=CollisionOptimization.BY_ROW)

    root = importer.add_all_layers(options=options, tileset_index=0)

    assert sum(1 for e in root if e.has(CustomDraw)) == 2
    assert not any(e.has(SpriteFrame) for e in root)
    assert len(diagnostics.of_kind(DiagnosticKind.EMPTY_OBJECT)) == 1


def test_lookup_miss_must_be_checked():
    diagnostics = Diagnostics()
    importer = TiledImporter(map_json(), diagnostics=diagnostics).load()

    missing = importer.get_layer_index("missing")

    assert missing is None
    assert diagnostics.of_kind(DiagnosticKind.LOOKUP_MISS)
    with pytest.raises(StructuralError):
        importer.add_tile_layer(missing)


def test_wrong_kind_index_is_structural():
    importer = TiledImporter(map_json()).load()

    with pytest.raises(StructuralError):
        importer.add_tile_layer(2)
    with pytest.raises(StructuralError):
        importer.add_object_layer(0)


def test_strict_diagnostics_raise():
    importer = TiledImporter(map_json(), diagnostics=Diagnostics(strict=True)).load()

    with pytest.raises(TiledSceneError):
        importer.get_tileset_index("nope")
