import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pytest

from tmj_manager import TiledMap, TileLayer, Tileset


# Local ids: 0 solid+tagged, 1 solid=false, 2 tagged only, 3 solid declared
# as string, 4 bool with a string value, 5 solid only
TERRAIN_JSON = {
    "name": "Terrain (32x32)",
    "tilewidth": 32,
    "tileheight": 32,
    "columns": 4,
    "tilecount": 8,
    "tiles": [
        {"id": 0, "properties": [
            {"name": "solid", "type": "bool", "value": True},
            {"name": "tag", "type": "string", "value": "ground grass"},
        ]},
        {"id": 1, "properties": [
            {"name": "solid", "type": "bool", "value": False},
        ]},
        {"id": 2, "properties": [
            {"name": "tag", "type": "string", "value": "decor"},
        ]},
        {"id": 3, "properties": [
            {"name": "solid", "type": "string", "value": "true"},
        ]},
        {"id": 4, "properties": [
            {"name": "solid", "type": "bool", "value": "yes"},
        ]},
        {"id": 5, "properties": [
            {"name": "solid", "type": "bool", "value": True},
        ]},
    ],
}

SOLID = 6       # tile index of local id 5
GRASS = 1       # tile index of local id 0


def map_json():
    return {
        "width": 4,
        "height": 3,
        "tilewidth": 32,
        "tileheight": 32,
        "layers": [
            {"name": "bg", "type": "tilelayer", "x": 0, "y": 0, "width": 4, "height": 3,
             "data": [3] * 12},
            {"name": "level", "type": "tilelayer", "x": 0, "y": 0, "width": 4, "height": 3,
             "data": [0, 0, 0, 0,
                      0, 3, 0, 0,
                      1, 1, 1, 6]},
            {"name": "materials", "type": "objectgroup", "x": 0, "y": 0, "objects": [
                {"id": 1, "x": 64, "y": 32, "width": 32, "height": 32, "properties": [
                    {"name": "sprite", "type": "string", "value": "bomb"},
                    {"name": "area", "type": "bool", "value": True},
                    {"name": "body", "type": "bool", "value": True},
                    {"name": "tags", "type": "string", "value": "enemy bomb"},
                ]},
                {"id": 2, "x": 0, "y": 0, "width": 16, "height": 16},
            ]},
        ],
        "tilesets": [dict(TERRAIN_JSON, firstgid=1)],
    }


@pytest.fixture
def terrain():
    return Tileset.from_json(TERRAIN_JSON)


@pytest.fixture
def tiled_map():
    return TiledMap.from_json(map_json())


def make_layer(rows, name="level"):
    height = len(rows)
    width = len(rows[0]) if rows else 0
    data = [index for row in rows for index in row]
    return TileLayer(name=name, width=width, height=height, data=data)
