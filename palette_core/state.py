from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .levels import Level
from .tile import Tile


class Phase(str, Enum):
    IDLE = 'idle'
    AWAITING_FIRST_PICK = 'awaiting_first_pick'
    AWAITING_SECOND_PICK = 'awaiting_second_pick'
    RESOLVING = 'resolving'
    FINISHED = 'finished'


class Outcome(str, Enum):
    CLEARED = 'cleared'
    TIME_UP = 'time_up'


class TapOutcome(str, Enum):
    IGNORED = 'ignored'
    BLOCKED = 'blocked'
    FIRST_PICK = 'first_pick'
    MATCH = 'match'
    MISMATCH = 'mismatch'


@dataclass
class Session:
    """Mutable per-play-through counters, owned by MatchEngine."""
    generation: int
    score: int = 0
    moves: int = 0
    selection: List[int] = field(default_factory=list)
    is_resolving: bool = False
    is_finished: bool = False
    outcome: Optional[Outcome] = None


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of a session handed to front ends."""
    level: Optional[Level]
    tiles: Tuple[Tile, ...]
    score: int
    moves: int
    selection: Tuple[int, ...]
    phase: Phase
    time_remaining: Optional[int]
    is_finished: bool
    outcome: Optional[Outcome]

    @property
    def won(self) -> bool:
        return self.outcome is Outcome.CLEARED

    def summary(self) -> str:
        if self.outcome is Outcome.CLEARED:
            head = 'You win!'
        elif self.outcome is Outcome.TIME_UP:
            head = "Time's up!"
        else:
            head = 'Game in progress.'
        return f'{head}\nFinal score: {self.score}\nTotal moves: {self.moves}'
