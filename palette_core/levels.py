from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union


class LevelId(str, Enum):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'


GRID_SIZES: Dict[LevelId, int] = {
    LevelId.EASY: 3,
    LevelId.MEDIUM: 5,
    LevelId.HARD: 7,
}

# Seconds allowed per level when playing against the clock.
TIME_LIMITS: Dict[LevelId, int] = {
    LevelId.EASY: 30,
    LevelId.MEDIUM: 90,
    LevelId.HARD: 180,
}


@dataclass(frozen=True)
class Level:
    """Grid dimension and optional countdown for one preset."""
    identifier: LevelId
    grid_size: int
    time_limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.grid_size <= 0:
            raise ValueError('grid_size must be positive')
        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError('time_limit must be positive when set')

    @property
    def total_tiles(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def pair_count(self) -> int:
        return self.total_tiles // 2

    @property
    def has_blocked_tile(self) -> bool:
        return self.total_tiles % 2 != 0

    @property
    def timed(self) -> bool:
        return self.time_limit is not None


def parse_level_id(value: Union[str, LevelId]) -> LevelId:
    """Accepts 'easy', 'Easy', 'EASY' or a LevelId."""
    if isinstance(value, LevelId):
        return value
    text = str(value).strip().lower()
    for lid in LevelId:
        if lid.value.lower() == text:
            return lid
    raise ValueError(f'unknown level: {value!r}')


def get_level(identifier: Union[str, LevelId], timed: bool = False) -> Level:
    lid = parse_level_id(identifier)
    return Level(
        identifier=lid,
        grid_size=GRID_SIZES[lid],
        time_limit=TIME_LIMITS[lid] if timed else None,
    )


def all_levels(timed: bool = False) -> List[Level]:
    return [get_level(lid, timed=timed) for lid in LevelId]
