"""
Object layer compilation

Each object with custom properties becomes one entity:

    (always)          Position(x, y)
    sprite: string    Sprite(name)
    area: bool        Area(shape=Rect(0, 0, width, height))
    body: bool        Body()              (dynamic)
    tags: string      Tags(...)           (whitespace-split)

false and "" count as absent, same as for tile properties. An object with
no properties at all is reported (EMPTY_OBJECT) and skipped: without
properties there is nothing to attach.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from tmj_manager import MapObject, ObjectGroup
from ..diagnostics import Diagnostics, DiagnosticKind
from ..errors import StructuralError
from ..map.properties import BoolValue, StringValue, TilePropertyResolver, split_tags
from .descriptors import (
    Area, Body, EntityDescriptor, Position, Rect, RootContainer, Sprite, Tags,
)

logger = logging.getLogger(__name__)


@dataclass
class CompiledObjectLayer:
    root: RootContainer
    entities: List[EntityDescriptor] = field(default_factory=list)

    def descriptors(self) -> List[EntityDescriptor]:
        return list(self.entities)


class ObjectLayerCompiler:

    def __init__(self, diagnostics: Optional[Diagnostics] = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def compile(self, layer: Optional[ObjectGroup],
                root: Optional[RootContainer] = None) -> CompiledObjectLayer:
        """
        Compile every object of `layer`.

        Raises:
        -------
        StructuralError : layer missing or not an object layer
        """
        if layer is None or not isinstance(layer, ObjectGroup):
            raise StructuralError("This layer is not type object layer")

        if root is None:
            root = RootContainer(Position(layer.x, layer.y))

        resolver = TilePropertyResolver(self.diagnostics, layer_name=layer.name)
        entities = []
        for obj in layer.objects:
            entity = self._compile_object(obj, resolver, layer.name)
            if entity is not None:
                entities.append(entity)
                root.add(entity)

        logger.info("Compiled object layer '%s': %d of %d objects",
                    layer.name, len(entities), len(layer.objects))
        return CompiledObjectLayer(root, entities)

    def _compile_object(self, obj: MapObject, resolver: TilePropertyResolver,
                        layer_name: str) -> Optional[EntityDescriptor]:
        if not obj.properties:
            self.diagnostics.report(
                DiagnosticKind.EMPTY_OBJECT,
                "Cannot produce an object without custom properties",
                layer=layer_name, cell=(obj.id,)
            )
            return None

        where = (obj.id,)
        props = resolver.resolve_list(obj.properties, where)
        components = [Position(obj.x, obj.y)]

        sprite = resolver.check(props, 'sprite', StringValue, "", where)
        if sprite:
            components.append(Sprite(sprite))
        if resolver.check(props, 'area', BoolValue, False, where):
            components.append(Area(shape=Rect(0, 0, obj.width, obj.height)))
        if resolver.check(props, 'body', BoolValue, False, where):
            components.append(Body())
        tags = resolver.check(props, 'tags', StringValue, "", where)
        tokens = split_tags(tags) if tags else []
        if tokens:
            components.append(Tags(tuple(tokens)))

        return EntityDescriptor(tuple(components))
