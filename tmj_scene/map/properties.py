"""
Typed tile/object property resolution

=============================================================================
PROPERTY VALUES
=============================================================================

Tiled stores each custom property as {name, type, value}, with the type
as a string. Here every property is turned ONCE into a closed variant:

    BoolValue(value: bool)       declared "bool"
    StringValue(value: str)      declared "string" (also color/file/class)
    NumberValue(value: float)    declared "int" or "float"

A stored value whose JSON type disagrees with the declared type raises
PropertyTypeMismatch. The resolver reports it and skips that property;
the other properties of the same tile still apply.

=============================================================================
SENTINEL ABSENCE
=============================================================================

A capability test carries an "absent" sentinel. A property whose value
equals the sentinel counts as NOT SET:

    check(props, "solid", BoolValue, absent=False)

    solid = true    -> True
    solid = false   -> None   (same as no "solid" property at all)
    (no property)   -> None

So a tile cannot say "explicitly not solid"; false and missing are the
same thing.

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from tmj_manager import Property, Tileset
from ..diagnostics import Diagnostics, DiagnosticKind
from ..errors import PropertyTypeMismatch


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class NumberValue:
    value: Union[int, float]


PropertyValue = Union[BoolValue, StringValue, NumberValue]

_KIND_NAMES = {BoolValue: "bool", StringValue: "string", NumberValue: "number"}

# Declared types that are strings under a different name in the editor
_STRING_LIKE = ('string', 'color', 'file', 'class', 'object')


def resolve_property(prop: Property) -> PropertyValue:
    """
    Convert a raw property into its typed variant.

    Raises:
    -------
    PropertyTypeMismatch : If value and declared type disagree
    """
    declared = prop.type or 'string'
    value = prop.value

    if declared == 'bool':
        if isinstance(value, bool):
            return BoolValue(value)
    elif declared in ('int', 'float'):
        # bool is an int subclass in Python; JSON true is not a number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if declared == 'int' and isinstance(value, float) and not value.is_integer():
                raise PropertyTypeMismatch(prop.name, declared, value)
            return NumberValue(value)
    elif declared in _STRING_LIKE:
        if isinstance(value, str):
            return StringValue(value)
        if declared == 'object' and isinstance(value, int) and not isinstance(value, bool):
            # object references are ids
            return NumberValue(value)

    raise PropertyTypeMismatch(prop.name, declared, value)


class TilePropertyResolver:
    """
    Resolves tile (and object) properties into typed values.

    One resolver lives for one compile call; its per-tile cache is keyed by
    tileset identity, so edits made to a tileset between compile calls are
    picked up by the next call.
    """

    def __init__(self, diagnostics: Optional[Diagnostics] = None,
                 layer_name: Optional[str] = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.layer_name = layer_name
        self._cache: Dict[Tuple[int, int], Dict[str, PropertyValue]] = {}

    def resolve_list(self, properties: Optional[List[Property]],
                     where: Optional[tuple] = None) -> Dict[str, PropertyValue]:
        """
        Resolve a property list, reporting and skipping mismatches.

        When two properties share a name the first one wins.
        """
        resolved: Dict[str, PropertyValue] = {}
        for prop in properties or []:
            try:
                value = resolve_property(prop)
            except PropertyTypeMismatch as e:
                self.diagnostics.report(
                    DiagnosticKind.PROPERTY_TYPE_MISMATCH, str(e),
                    layer=self.layer_name, cell=where
                )
                continue
            resolved.setdefault(prop.name, value)
        return resolved

    def resolve(self, tileset: Tileset, local_id: int,
                where: Optional[tuple] = None) -> Dict[str, PropertyValue]:
        """
        Typed properties of tile `local_id` in `tileset`.

        A tile without a definition has no properties. Mismatches are
        reported the first time a tile is resolved only.
        """
        key = (id(tileset), local_id)
        if key not in self._cache:
            tile = tileset.get_tile(local_id)
            self._cache[key] = self.resolve_list(tile.properties if tile else None, where)
        return self._cache[key]

    def check(self, props: Dict[str, PropertyValue], name: str,
              kind: Type, absent: Any, where: Optional[tuple] = None) -> Optional[Any]:
        """
        Capability test with sentinel absence.

        Returns the raw value when `name` is present, of variant `kind`,
        and not equal to `absent`; otherwise None. A property of the right
        name declared as another type (e.g. "solid" declared as a string)
        is reported as PROPERTY_TYPE_MISMATCH and grants nothing.
        """
        value = props.get(name)
        if value is None:
            return None
        if not isinstance(value, kind):
            self.diagnostics.report(
                DiagnosticKind.PROPERTY_TYPE_MISMATCH,
                f"Incorrect data type for property '{name}': expected "
                f"{_KIND_NAMES[kind]}, declared as {_KIND_NAMES[type(value)]}",
                layer=self.layer_name, cell=where
            )
            return None
        if value.value == absent:
            return None
        return value.value


def split_tags(value: str) -> List[str]:
    """Whitespace-separated tag tokens, empty tokens dropped."""
    return value.split()
