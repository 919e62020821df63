"""Exception taxonomy for map-to-scene compilation."""

from tmj_manager import MapFormatError


class TiledSceneError(Exception):
    """Base error for the scene compiler."""


class StructuralError(TiledSceneError):
    """
    Raised when a compile call cannot proceed at all.

    Missing or mis-typed layer, missing tileset, or a tile grid whose
    data length does not match width * height. The current compile call
    is aborted and produces no descriptors.
    """


class PropertyTypeMismatch(TiledSceneError):
    """
    Raised when a property's stored value disagrees with its declared type.

    Compilers catch this and turn it into a diagnostic; the offending
    property is skipped and the rest of the cell/object still compiles.
    """

    def __init__(self, name: str, declared: str, value):
        self.name = name
        self.declared = declared
        self.value = value
        super().__init__(
            f"Incorrect data type for property '{name}': declared {declared}, "
            f"got {type(value).__name__}"
        )


class DiagnosticError(TiledSceneError):
    """Raised for a reported diagnostic when the channel is strict."""

    def __init__(self, diagnostic):
        self.diagnostic = diagnostic
        super().__init__(str(diagnostic))


__all__ = [
    "TiledSceneError",
    "StructuralError",
    "PropertyTypeMismatch",
    "DiagnosticError",
    "MapFormatError",
]
