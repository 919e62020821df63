"""Tests for the pygame reference host."""

import pygame
import pytest

from tmj_scene.camera import Camera
from tmj_scene.hosts.pygame_host import PygameScene, SpriteSheet
from tmj_scene.importer import TiledImporter
from tmj_scene.scene.tile_layer import CollisionOptimization, CompileOptions

from conftest import map_json


@pytest.fixture
def sheet():
    # 4 columns x 2 rows of 32px tiles, frame n filled with red = n * 30
    surface = pygame.Surface((128, 64))
    for n in range(8):
        surface.fill((n * 30, 0, 0), pygame.Rect((n % 4) * 32, (n // 4) * 32, 32, 32))
    return SpriteSheet(surface, 32, 32)


def test_sprite_sheet_slices_frames(sheet):
    frame = sheet.frame(5)

    assert frame.get_size() == (32, 32)
    assert tuple(frame.get_at((0, 0)))[:3] == (150, 0, 0)
    assert sheet.frame(5) is frame


def test_sprite_sheet_infers_columns_with_margin_and_spacing():
    surface = pygame.Surface((2 + 3 * 16 + 2 * 1 + 2, 20))

    assert SpriteSheet(surface, 16, 16, margin=2, spacing=1).columns == 3


def scene_for(options, sheet):
    importer = TiledImporter(map_json()).load()
    root = importer.add_all_layers(options=options)
    scene = PygameScene({"tiles": sheet, "bomb": pygame.Surface((32, 32))})
    scene.spawn(root)
    return scene


def test_spawn_builds_colliders_and_tags(sheet):
    scene = scene_for(CompileOptions(collision_optimization=CollisionOptimization.BY_ROW), sheet)

    assert pygame.Rect(0, 64, 128, 32) in scene.colliders()
    assert pygame.Rect(64, 32, 32, 32) in scene.colliders()
    assert len(scene.get("grass")) == 3
    [bomb] = scene.get("enemy")
    assert bomb.is_static is False


def test_draw_per_cell_and_batched_match(sheet):
    screen = pygame.Surface((128, 96))
    camera = Camera(128, 96)

    per_cell = scene_for(CompileOptions(), sheet).draw(screen, camera)
    batched = scene_for(CompileOptions(batched_draw=True), sheet).draw(screen, camera)

    # 12 bg + 5 level cells + 1 object sprite
    assert per_cell == 18
    assert batched == 18


def test_offscreen_tiles_are_not_blitted(sheet):
    screen = pygame.Surface((128, 96))
    camera = Camera(128, 96)
    camera.look_at(5000, 5000)

    # Only the object sprite has no Offscreen component
    assert scene_for(CompileOptions(), sheet).draw(screen, camera) == 1
