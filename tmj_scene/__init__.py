"""
TMJ Scene - compile Tiled JSON maps into 2D scene descriptors

Requisitos:
    pip install numpy pygame
"""

from .camera import Camera, CameraState
from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .errors import StructuralError, PropertyTypeMismatch, TiledSceneError
from .importer import TiledImporter
from .map import MapIndex, LayerKind, TilePropertyResolver, ScanAxis, merge_runs
from .scene import (
    BatchedDrawPlan, CollisionOptimization, CompileOptions, ObjectLayerCompiler,
    RootContainer, TileLayerCompiler,
)

__version__ = "1.0.0"
__all__ = [
    "Camera",
    "CameraState",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "StructuralError",
    "PropertyTypeMismatch",
    "TiledSceneError",
    "TiledImporter",
    "MapIndex",
    "LayerKind",
    "TilePropertyResolver",
    "ScanAxis",
    "merge_runs",
    "BatchedDrawPlan",
    "CollisionOptimization",
    "CompileOptions",
    "ObjectLayerCompiler",
    "RootContainer",
    "TileLayerCompiler",
]
