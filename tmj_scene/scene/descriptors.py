"""
Declarative scene descriptors handed to the host engine

=============================================================================
CAPABILITY LISTS
=============================================================================

The compiler does not create game objects. It describes them as a list of
capabilities that the host's entity system turns into real components:

    Position(x, y)                  where the entity sits (pixels)
    SpriteFrame(sprite, frame)      one frame of a sliced tileset image
    Sprite(name)                    a whole registered sprite
    Area(shape, collision_group)    collision area (shape=None: sprite bounds)
    Body(is_static)                 physics body (static for tiles)
    Tags(names)                     free-form string tags
    TileMarker()                    marks an entity as a map tile
    Offscreen(hide)                 host may skip drawing it while out of view
    CustomDraw(plan)                per-frame draw routine (batched tiles)

Example: a solid, tagged tile with per-cell collision

    EntityDescriptor((
        Position(64, 32),
        SpriteFrame("tiles", 11),
        TileMarker(),
        Offscreen(),
        Area(shape=Rect(0, 0, 32, 32)),
        Body(is_static=True),
        Tags(("ground", "grass")),
    ))

Every descriptor is an immutable value with no back-reference to the map,
so compiled output can be kept after the map is discarded.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple, Type, TypeVar


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class SpriteFrame:
    sprite: str
    frame: int


@dataclass(frozen=True)
class Sprite:
    name: str


@dataclass(frozen=True)
class Area:
    shape: Optional[Rect] = None
    collision_group: Optional[str] = None


@dataclass(frozen=True)
class Body:
    is_static: bool = False


@dataclass(frozen=True)
class Tags:
    names: Tuple[str, ...]


@dataclass(frozen=True)
class TileMarker:
    pass


@dataclass(frozen=True)
class Offscreen:
    hide: bool = True


@dataclass(frozen=True)
class CustomDraw:
    plan: Any           # Object with render(camera, draw_sprite)


C = TypeVar('C')


@dataclass(frozen=True)
class EntityDescriptor:
    """One child entity: an ordered tuple of capabilities."""
    components: Tuple[Any, ...]

    def get(self, kind: Type[C]) -> Optional[C]:
        for component in self.components:
            if isinstance(component, kind):
                return component
        return None

    def has(self, kind: Type) -> bool:
        return self.get(kind) is not None

    @property
    def tags(self) -> Tuple[str, ...]:
        tags = self.get(Tags)
        return tags.names if tags else ()


@dataclass
class RootContainer:
    """
    Container the compiled entities attach to.

    One per compiled layer, unless the caller passes an existing container
    to share between layers (add_all_layers does this).
    """
    position: Position
    children: List[EntityDescriptor] = field(default_factory=list)

    def add(self, entity: EntityDescriptor) -> EntityDescriptor:
        self.children.append(entity)
        return entity

    def __iter__(self) -> Iterator[EntityDescriptor]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)
