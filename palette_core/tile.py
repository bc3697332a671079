from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Tuple

Color = str

PALETTE: Tuple[Color, ...] = (
    'red', 'orange', 'yellow', 'green',
    'mint', 'cyan', 'blue', 'indigo',
    'purple', 'pink',
)

# Color carried by the filler tile; never equal to a palette entry.
BLOCKED_COLOR: Color = 'clear'


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Tile:
    """A single face-down square. Flags change by replacing the record."""
    color: Color
    is_revealed: bool = False
    is_matched: bool = False
    is_blocked: bool = False
    id: str = field(default_factory=_new_id, compare=False)

    def revealed(self) -> 'Tile':
        return replace(self, is_revealed=True)

    def hidden(self) -> 'Tile':
        return replace(self, is_revealed=False)

    def matched(self) -> 'Tile':
        return replace(self, is_revealed=True, is_matched=True)

    @property
    def is_resolved(self) -> bool:
        """Matched or blocked: nothing left to do with this tile."""
        return self.is_matched or self.is_blocked


def blocked_tile() -> Tile:
    return Tile(color=BLOCKED_COLOR, is_blocked=True)
