"""
Camera state consumed by per-frame culling

=============================================================================
WORLD vs SCREEN
=============================================================================

The camera is a mathematical transform between two coordinate systems:

1. WORLD COORDINATES: where tiles and objects actually are (pixels)
2. SCREEN COORDINATES: where they appear in the viewport

    screen_x = (world_x - camera_x) * zoom

Camera (x, y) is the TOP-LEFT corner of the visible area. Culling code
works from the CENTER instead (the "reference position"), which
CameraState carries.

=============================================================================
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CameraState:
    """
    Snapshot of the host camera for one render tick.

    position : (float, float)
        Camera reference position (center of the view) in world pixels
    viewport : (float, float)
        Viewport size in screen pixels
    zoom : float
        World-to-screen scale (2.0 = everything twice as large)
    """
    position: Tuple[float, float]
    viewport: Tuple[float, float]
    zoom: float = 1.0

    def visible_radius(self, margin: float = 0.0) -> float:
        """
        Half-diagonal of the visible world area, plus a margin.

        A circle of this radius around `position` contains the whole
        visible rectangle; anything outside it is certainly off screen.
        """
        width, height = self.viewport
        return math.hypot(width, height) / self.zoom / 2 + margin


class Camera:
    """
    2D camera with pan and zoom.

    ```python
    camera = Camera(width=640, height=360)
    camera.look_at(player.x, player.y)
    plan.render(camera.state(), draw_sprite)
    ```
    """

    # Zoom limits: 0.1 = see 10x more area, 5.0 = see 1/5 of normal area
    MIN_ZOOM = 0.1
    MAX_ZOOM = 5.0

    def __init__(self, width: int, height: int):
        # Top-left corner of the visible area, world coordinates
        self.x = 0.0
        self.y = 0.0
        self.zoom = 1.0
        # Viewport size in screen pixels
        self.width = width
        self.height = height

    def move(self, dx: float, dy: float):
        """Move by a delta in SCREEN pixels (same feel at any zoom)."""
        self.x += dx / self.zoom
        self.y += dy / self.zoom

    def set_zoom(self, zoom: float):
        """Set zoom, clamped to [MIN_ZOOM, MAX_ZOOM], keeping the center fixed."""
        center_x, center_y = self.center
        self.zoom = max(self.MIN_ZOOM, min(self.MAX_ZOOM, zoom))
        self.look_at(center_x, center_y)

    def look_at(self, world_x: float, world_y: float):
        """Center the view on a world position."""
        self.x = world_x - self.width / (2 * self.zoom)
        self.y = world_y - self.height / (2 * self.zoom)

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / (2 * self.zoom),
                self.y + self.height / (2 * self.zoom))

    def world_to_screen(self, world_x: float, world_y: float) -> Tuple[float, float]:
        return (world_x - self.x) * self.zoom, (world_y - self.y) * self.zoom

    def state(self) -> CameraState:
        return CameraState(self.center, (self.width, self.height), self.zoom)
