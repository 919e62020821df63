"""
Non-fatal diagnostic channel

=============================================================================
DIAGNOSTICS vs EXCEPTIONS
=============================================================================

Only structural problems abort a compile call (StructuralError). Everything
else is REPORTED and compilation carries on with the next property, cell,
object or layer:

    LOOKUP_MISS             name/kind did not resolve to a layer or tileset
    PROPERTY_TYPE_MISMATCH  declared property type disagrees with its value
    EMPTY_OBJECT            object layer entry without custom properties

Every report is logged at WARNING and kept in the collector, so callers
(and tests) can inspect exactly what was skipped.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from .errors import DiagnosticError

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    LOOKUP_MISS = "lookup-miss"
    PROPERTY_TYPE_MISMATCH = "property-type-mismatch"
    EMPTY_OBJECT = "empty-object"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    layer: Optional[str] = None        # Layer name, when one is involved
    cell: Optional[tuple] = None       # (x, y) cell or object id

    def __str__(self) -> str:
        where = ""
        if self.layer is not None:
            where = f" [layer '{self.layer}'"
            if self.cell is not None:
                where += f" at {self.cell}"
            where += "]"
        return f"{self.kind.value}: {self.message}{where}"


class Diagnostics:
    """
    Collector for diagnostics reported during indexing and compilation.

    Parameters:
    -----------
    strict : bool
        When True, report() raises DiagnosticError instead of continuing.
        Useful for build pipelines that must refuse imperfect maps.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self._items: List[Diagnostic] = []

    def report(self, kind: DiagnosticKind, message: str,
               layer: Optional[str] = None, cell: Optional[tuple] = None) -> Diagnostic:
        diagnostic = Diagnostic(kind, message, layer, cell)
        self._items.append(diagnostic)
        logger.warning("%s", diagnostic)
        if self.strict:
            raise DiagnosticError(diagnostic)
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self._items if d.kind is kind]

    def clear(self):
        self._items.clear()

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
