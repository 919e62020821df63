"""Tests for tile layer compilation."""

import pytest

from tmj_manager import ObjectGroup
from tmj_scene.diagnostics import DiagnosticKind, Diagnostics
from tmj_scene.errors import StructuralError
from tmj_scene.scene.descriptors import (
    Area, Body, CustomDraw, Offscreen, Position, Rect, RootContainer, SpriteFrame, Tags,
    TileMarker,
)
from tmj_scene.scene.tile_layer import CollisionOptimization, CompileOptions, TileLayerCompiler

from conftest import GRASS, SOLID, make_layer


def level(tiled_map):
    return tiled_map.layers[1]


def collision_area(entities):
    return sum(e.get(Area).shape.width * e.get(Area).shape.height
               for e in entities if e.has(Area))


def test_per_cell_compile(tiled_map, terrain):
    compiled = TileLayerCompiler(32, 32).compile(level(tiled_map), terrain)

    entities = compiled.entities
    assert len(entities) == 5
    decor, *floor = entities
    assert decor.components == (
        Position(32, 32), SpriteFrame("tiles", 2), TileMarker(), Offscreen(), Tags(("decor",)),
    )
    assert floor[0].components == (
        Position(0, 64), SpriteFrame("tiles", 0), TileMarker(), Offscreen(),
        Area(shape=Rect(0, 0, 32, 32)), Body(is_static=True), Tags(("ground", "grass")),
    )
    assert [e.get(Position) for e in floor] == [Position(x * 32, 64) for x in range(4)]
    assert all(e.get(Body) == Body(is_static=True) for e in floor)
    assert floor[0].tags == ("ground", "grass")
    assert floor[3].tags == ()
    assert compiled.root.children == entities
    assert compiled.batched_plan is None


def test_row_merge_replaces_per_cell_collision(tiled_map, terrain):
    options = CompileOptions(collision_optimization=CollisionOptimization.BY_ROW)

    compiled = TileLayerCompiler(32, 32).compile(level(tiled_map), terrain, options)

    colliders = compiled.collision_entities()
    assert len(colliders) == 1
    assert colliders[0].components == (
        Position(0, 64), Area(shape=Rect(0, 0, 128, 32)), Body(is_static=True),
    )
    # Visual entities keep their tags but lose per-cell collision
    visuals = [e for e in compiled.entities if e.has(SpriteFrame)]
    assert len(visuals) == 5
    assert not any(e.has(Area) for e in visuals)


def test_column_merge(terrain):
    layer = make_layer([
        [SOLID, 0],
        [SOLID, SOLID],
    ])
    options = CompileOptions(collision_optimization=CollisionOptimization.BY_COLUMN)

    compiled = TileLayerCompiler(10, 10).compile(layer, terrain, options)

    assert [(r.x, r.y, r.width, r.height) for r in compiled.collision_rects] == [
        (0, 0, 10, 20), (10, 10, 10, 10),
    ]


@pytest.mark.parametrize("mode", [CollisionOptimization.BY_ROW, CollisionOptimization.BY_COLUMN])
def test_merged_collision_area_matches_per_cell(terrain, mode):
    layer = make_layer([
        [SOLID, SOLID, 0, GRASS],
        [0, SOLID, SOLID, GRASS],
        [GRASS, GRASS, 0, 0],
    ])
    compiler = TileLayerCompiler(32, 16)

    per_cell = compiler.compile(layer, terrain)
    merged = compiler.compile(layer, terrain, CompileOptions(collision_optimization=mode))

    occupied = 8
    assert collision_area(per_cell.entities) == occupied * 32 * 16
    assert collision_area(merged.entities) == occupied * 32 * 16


def test_batched_draw_suppresses_visuals_and_tags(tiled_map, terrain):
    options = CompileOptions(batched_draw=True, sprite="terrain")

    compiled = TileLayerCompiler(32, 32).compile(level(tiled_map), terrain, options)

    assert not any(e.has(SpriteFrame) for e in compiled.entities)
    assert not any(e.has(Tags) for e in compiled.entities)
    draws = [e for e in compiled.entities if e.has(CustomDraw)]
    assert len(draws) == 1
    assert draws[0].get(CustomDraw).plan is compiled.batched_plan
    assert compiled.batched_plan.sprite == "terrain"
    assert compiled.batched_plan.cell_count == 5
    # Per-cell collision still emitted as collision-only entities
    assert len(compiled.collision_entities()) == 4


def test_batched_draw_with_merging(tiled_map, terrain):
    options = CompileOptions(batched_draw=True,
                             collision_optimization=CollisionOptimization.BY_ROW)

    compiled = TileLayerCompiler(32, 32).compile(level(tiled_map), terrain, options)

    assert len(compiled.entities) == 2
    assert len(compiled.collision_rects) == 1


def test_collision_only_compile(tiled_map, terrain):
    options = CompileOptions(per_cell_entities=False)

    compiled = TileLayerCompiler(32, 32).compile(level(tiled_map), terrain, options)

    assert len(compiled.entities) == 4
    assert all(e.has(Area) and not e.has(SpriteFrame) for e in compiled.entities)


def test_data_length_mismatch_is_structural(terrain):
    layer = make_layer([[1, 1], [1, 1]])
    layer.data.append(1)
    root = RootContainer(Position(0, 0))

    with pytest.raises(StructuralError):
        TileLayerCompiler(32, 32).compile(layer, terrain, root=root)
    assert len(root) == 0


def test_missing_layer_or_tileset_is_structural(terrain):
    compiler = TileLayerCompiler(32, 32)

    with pytest.raises(StructuralError):
        compiler.compile(None, terrain)
    with pytest.raises(StructuralError):
        compiler.compile(ObjectGroup(name="materials"), terrain)
    with pytest.raises(StructuralError):
        compiler.compile(make_layer([[1]]), None)


def test_type_mismatch_does_not_stop_the_layer(terrain):
    diagnostics = Diagnostics()
    layer = make_layer([[5, SOLID]])

    compiled = TileLayerCompiler(32, 32, diagnostics).compile(layer, terrain)

    assert len(compiled.entities) == 2
    assert not compiled.entities[0].has(Area)
    assert compiled.entities[1].has(Area)
    assert len(diagnostics.of_kind(DiagnosticKind.PROPERTY_TYPE_MISMATCH)) == 1


def test_shared_root_keeps_existing_children(tiled_map, terrain):
    root = RootContainer(Position(0, 0))
    compiler = TileLayerCompiler(32, 32)

    compiler.compile(level(tiled_map), terrain, root=root)
    compiled = compiler.compile(level(tiled_map), terrain, root=root)

    assert compiled.root is root
    assert len(root) == 10


def test_options_from_dict():
    options = CompileOptions.from_dict({"collision_optimization": "Row", "batched_draw": 1})

    assert options.collision_optimization is CollisionOptimization.BY_ROW
    assert options.batched_draw is True
    assert options.per_cell_entities is True
    with pytest.raises(ValueError):
        CompileOptions.from_dict({"collision_optimization": "diagonal"})
