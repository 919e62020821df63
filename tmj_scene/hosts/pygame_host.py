"""
Reference host: turn compiled descriptors into pygame objects

The compiler only describes a scene. This module is a small host that
materializes those descriptors with pygame:

    Position + SpriteFrame   -> frame surface from a SpriteSheet
    Position + Sprite        -> a registered surface
    Area                     -> pygame.Rect collider (world pixels)
    Body                     -> static / dynamic flag
    Tags                     -> set of strings
    Offscreen                -> not blitted while outside the surface
    CustomDraw               -> plan.render() every frame, blitting frames

Usage:

```python
sheet = SpriteSheet.load("assets/terrain.png", 32, 32)
scene = PygameScene({"tiles": sheet, "bomb": pygame.image.load("bomb.png")})
scene.spawn(root)

while running:
    scene.draw(screen, camera)
    if any(player.rect.colliderect(r) for r in scene.colliders()):
        ...
```
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

import pygame

from tmj_manager import Tileset
from ..camera import Camera
from ..scene.descriptors import (
    Area, Body, CustomDraw, EntityDescriptor, Offscreen, Position, RootContainer,
    Sprite, SpriteFrame, Tags,
)


class SpriteSheet:
    """
    A tileset image sliced into equally sized frames.

    Frame n sits at column n % columns, row n // columns, honouring the
    margin around the image and the spacing between tiles.
    """

    def __init__(self, surface: pygame.Surface, tile_width: int, tile_height: int,
                 columns: int = 0, margin: int = 0, spacing: int = 0):
        self.surface = surface
        self.tile_width = tile_width
        self.tile_height = tile_height
        self.margin = margin
        self.spacing = spacing
        if columns <= 0:
            usable = surface.get_width() - 2 * margin + spacing
            columns = max(1, usable // (tile_width + spacing))
        self.columns = columns
        self._cache: Dict[int, pygame.Surface] = {}

    @classmethod
    def load(cls, path: Union[str, Path], tile_width: int, tile_height: int,
             columns: int = 0, margin: int = 0, spacing: int = 0) -> 'SpriteSheet':
        surface = pygame.image.load(str(path))
        return cls(surface, tile_width, tile_height, columns, margin, spacing)

    @classmethod
    def for_tileset(cls, surface: pygame.Surface, tileset: Tileset) -> 'SpriteSheet':
        return cls(surface, tileset.tilewidth, tileset.tileheight,
                   tileset.columns, tileset.margin, tileset.spacing)

    def frame(self, index: int) -> pygame.Surface:
        if index not in self._cache:
            col = index % self.columns
            row = index // self.columns
            src = pygame.Rect(
                self.margin + col * (self.tile_width + self.spacing),
                self.margin + row * (self.tile_height + self.spacing),
                self.tile_width, self.tile_height
            )
            tile = pygame.Surface((self.tile_width, self.tile_height), pygame.SRCALPHA)
            tile.blit(self.surface, (0, 0), src)
            self._cache[index] = tile
        return self._cache[index]


@dataclass
class SceneObject:
    x: float
    y: float
    image: Optional[pygame.Surface] = None
    rect: Optional[pygame.Rect] = None
    is_static: Optional[bool] = None        # None = no physics body
    tags: Set[str] = field(default_factory=set)
    hide_offscreen: bool = False
    plan: Optional[object] = None


class PygameScene:
    """
    Scene built from RootContainers.

    Parameters:
    -----------
    sprites : dict
        name -> SpriteSheet (for SpriteFrame) or pygame.Surface (for Sprite)
    """

    def __init__(self, sprites: Dict[str, Union[SpriteSheet, pygame.Surface]]):
        self.sprites = sprites
        self.objects: List[SceneObject] = []

    def spawn(self, root: RootContainer) -> List[SceneObject]:
        spawned = [self._materialize(entity, root.position) for entity in root]
        self.objects.extend(spawned)
        return spawned

    def _materialize(self, entity: EntityDescriptor, origin: Position) -> SceneObject:
        pos = entity.get(Position) or Position(0, 0)
        obj = SceneObject(origin.x + pos.x, origin.y + pos.y)

        frame = entity.get(SpriteFrame)
        if frame is not None:
            obj.image = self.sprites[frame.sprite].frame(frame.frame)
        sprite = entity.get(Sprite)
        if sprite is not None:
            obj.image = self.sprites[sprite.name]

        area = entity.get(Area)
        if area is not None:
            if area.shape is not None:
                obj.rect = pygame.Rect(obj.x + area.shape.x, obj.y + area.shape.y,
                                       area.shape.width, area.shape.height)
            elif obj.image is not None:
                obj.rect = obj.image.get_rect(topleft=(obj.x, obj.y))
            else:
                obj.rect = pygame.Rect(obj.x, obj.y, 0, 0)

        body = entity.get(Body)
        if body is not None:
            obj.is_static = body.is_static

        tags = entity.get(Tags)
        if tags is not None:
            obj.tags = set(tags.names)

        offscreen = entity.get(Offscreen)
        if offscreen is not None:
            obj.hide_offscreen = offscreen.hide

        draw = entity.get(CustomDraw)
        if draw is not None:
            obj.plan = draw.plan
        return obj

    def colliders(self) -> List[pygame.Rect]:
        return [obj.rect for obj in self.objects if obj.rect is not None]

    def get(self, tag: str) -> List[SceneObject]:
        return [obj for obj in self.objects if tag in obj.tags]

    # =========================================================================
    # RENDERING
    # =========================================================================

    def draw(self, surface: pygame.Surface, camera: Camera) -> int:
        """
        Draw every visible object and run batched plans.

        Returns:
        --------
        int : Number of blits issued
        """
        blits = 0
        state = camera.state()

        def draw_sprite(name: str, frame: int, world_x: float, world_y: float):
            self._blit(surface, camera, self.sprites[name].frame(frame), world_x, world_y)

        for obj in self.objects:
            if obj.plan is not None:
                blits += obj.plan.render(state, draw_sprite)
            elif obj.image is not None:
                if obj.hide_offscreen and not self._on_screen(surface, camera, obj):
                    continue
                self._blit(surface, camera, obj.image, obj.x, obj.y)
                blits += 1
        return blits

    @staticmethod
    def _on_screen(surface: pygame.Surface, camera: Camera, obj: SceneObject) -> bool:
        left, top = camera.world_to_screen(obj.x, obj.y)
        right, bottom = camera.world_to_screen(obj.x + obj.image.get_width(),
                                               obj.y + obj.image.get_height())
        return surface.get_rect().colliderect(pygame.Rect(left, top, right - left, bottom - top))

    @staticmethod
    def _blit(surface: pygame.Surface, camera: Camera, image: pygame.Surface,
              world_x: float, world_y: float):
        screen_x, screen_y = camera.world_to_screen(world_x, world_y)
        if camera.zoom != 1.0:
            # +1 avoids hairline gaps between scaled tiles
            size = (round(image.get_width() * camera.zoom) + 1,
                    round(image.get_height() * camera.zoom) + 1)
            image = pygame.transform.scale(image, size)
        surface.blit(image, (round(screen_x), round(screen_y)))
