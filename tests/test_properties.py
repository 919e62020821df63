"""Tests for typed property resolution and sentinel absence."""

import pytest

from tmj_manager import Property
from tmj_scene.diagnostics import DiagnosticKind, Diagnostics
from tmj_scene.errors import PropertyTypeMismatch
from tmj_scene.map.properties import (
    BoolValue, NumberValue, StringValue, TilePropertyResolver, resolve_property, split_tags,
)


@pytest.mark.parametrize("prop, expected", [
    (Property("solid", "bool", True), BoolValue(True)),
    (Property("tag", "string", "a b"), StringValue("a b")),
    (Property("hp", "int", 3), NumberValue(3)),
    (Property("speed", "float", 1.5), NumberValue(1.5)),
    (Property("tint", "color", "#ff00ff00"), StringValue("#ff00ff00")),
])
def test_resolve_property(prop, expected):
    assert resolve_property(prop) == expected


@pytest.mark.parametrize("prop", [
    Property("solid", "bool", "true"),
    Property("hp", "int", True),
    Property("hp", "int", 2.5),
    Property("tag", "string", 7),
    Property("x", "mystery", 1),
])
def test_resolve_property_mismatch(prop):
    with pytest.raises(PropertyTypeMismatch):
        resolve_property(prop)


def test_solid_false_is_same_as_missing(terrain):
    diagnostics = Diagnostics()
    resolver = TilePropertyResolver(diagnostics)

    solid_false = resolver.resolve(terrain, 1)
    no_solid = resolver.resolve(terrain, 2)

    assert resolver.check(solid_false, "solid", BoolValue, False) is None
    assert resolver.check(no_solid, "solid", BoolValue, False) is None
    assert len(diagnostics) == 0


def test_undefined_tile_has_no_properties(terrain):
    resolver = TilePropertyResolver()

    assert resolver.resolve(terrain, 7) == {}


def test_mismatched_property_is_skipped_and_reported(terrain):
    diagnostics = Diagnostics()
    resolver = TilePropertyResolver(diagnostics, layer_name="level")

    props = resolver.resolve(terrain, 4, where=(2, 1))

    assert props == {}
    [diagnostic] = diagnostics.of_kind(DiagnosticKind.PROPERTY_TYPE_MISMATCH)
    assert diagnostic.layer == "level"
    assert diagnostic.cell == (2, 1)


def test_check_reports_wrongly_declared_capability(terrain):
    diagnostics = Diagnostics()
    resolver = TilePropertyResolver(diagnostics)
    props = resolver.resolve(terrain, 3)

    assert resolver.check(props, "solid", BoolValue, False) is None
    assert len(diagnostics.of_kind(DiagnosticKind.PROPERTY_TYPE_MISMATCH)) == 1


def test_other_properties_survive_a_mismatch():
    resolver = TilePropertyResolver()

    props = resolver.resolve_list([
        Property("solid", "bool", "no"),
        Property("tag", "string", "spikes"),
    ])

    assert props == {"tag": StringValue("spikes")}


def test_empty_string_is_absent():
    resolver = TilePropertyResolver()
    props = {"tag": StringValue("")}

    assert resolver.check(props, "tag", StringValue, "") is None


def test_split_tags_on_any_whitespace():
    assert split_tags(" ground\tgrass  wet ") == ["ground", "grass", "wet"]
