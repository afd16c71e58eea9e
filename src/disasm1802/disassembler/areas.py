"""
Memory Areas
============

The definition file splits the image into CODE and DATA areas. The
disassembler walks addresses in ascending order, so areas are consulted
through a cursor that only ever moves forward.

Bytes not covered by any area are treated as DATA: dumping unknown
bytes is harmless, decoding them as instructions is not.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence


class AreaKind(Enum):
    """How bytes in an area are rendered."""
    CODE = "CODE"
    DATA = "DATA"


@dataclass(frozen=True)
class MemoryArea:
    """
    A contiguous address range of one kind.

    Attributes:
        kind: CODE or DATA
        start: First address of the area
        end: First address past the area (exclusive)
    """
    kind: AreaKind
    start: int
    end: int

    def contains(self, address: int) -> bool:
        return self.start <= address < self.end

    def __str__(self) -> str:
        return f"{self.kind.value} ${self.start:04X}-${self.end:04X}"


def sort_areas(areas: Iterable[MemoryArea]) -> List[MemoryArea]:
    """Order areas by start address; areas with equal starts keep their order."""
    return sorted(areas, key=lambda area: area.start)


class AreaStep(NamedTuple):
    """
    Result of moving the cursor to a new address.

    Attributes:
        kind: Kind of the byte at the address
        changed: True if the covering area differs from the previous
            address (a pending data run must be flushed first)
    """
    kind: AreaKind
    changed: bool


_NOT_STARTED = -2
_OUTSIDE = -1


class AreaCursor:
    """
    Forward-only cursor over an ordered list of areas.

    Call advance() with non-decreasing addresses. The cursor skips any
    area that ends at or before the address and reports the kind of the
    area that now covers it.

    Example:
        cursor = AreaCursor(areas)
        for addr in range(start, end):
            kind, changed = cursor.advance(addr)
    """

    def __init__(self, areas: Sequence[MemoryArea]):
        self._areas = list(areas)
        self.reset()

    def reset(self) -> None:
        """Rewind to the first area for a new pass."""
        self._index = 0
        self._current = _NOT_STARTED

    @property
    def area(self) -> Optional[MemoryArea]:
        """The area covering the last address, or None outside all areas."""
        if self._current < 0:
            return None
        return self._areas[self._current]

    def advance(self, address: int) -> AreaStep:
        """
        Move the cursor to an address.

        Args:
            address: Current address; never lower than the previous call

        Returns:
            AreaStep with the byte kind and the area-change flag
        """
        while self._index < len(self._areas) and self._areas[self._index].end <= address:
            self._index += 1

        covering = _OUTSIDE
        kind = AreaKind.DATA
        if self._index < len(self._areas) and self._areas[self._index].contains(address):
            covering = self._index
            kind = self._areas[self._index].kind

        changed = self._current != _NOT_STARTED and covering != self._current
        self._current = covering
        return AreaStep(kind, changed)
