from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Callable, Optional, TypeVar

T = TypeVar('T')


def debug_enabled() -> bool:
    return os.getenv('PALETTE_DEBUG', '0').lower() in ('1', 'true', 'yes', 'on')


def _env(name: str, cast: Callable[[str], T], default: T) -> T:
    raw: Optional[str] = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ValueError(f'{name}={raw!r} is not a valid value') from e


@dataclass(frozen=True)
class Rules:
    """Scoring and timing constants for a session. Delays are in seconds."""
    match_reward: int = 10
    mismatch_penalty: int = 2
    revert_delay: float = 0.7
    completion_delay: float = 0.5
    tick_interval: float = 1.0

    def __post_init__(self) -> None:
        if self.match_reward < 0 or self.mismatch_penalty < 0:
            raise ValueError('match_reward and mismatch_penalty must not be negative')
        if self.revert_delay < 0 or self.completion_delay < 0:
            raise ValueError('delays must not be negative')
        if self.tick_interval <= 0:
            raise ValueError('tick_interval must be positive')

    @classmethod
    def from_env(cls) -> 'Rules':
        """Reads overrides from PALETTE_* environment variables."""
        base = cls()
        return cls(
            match_reward=_env('PALETTE_MATCH_REWARD', int, base.match_reward),
            mismatch_penalty=_env('PALETTE_MISMATCH_PENALTY', int, base.mismatch_penalty),
            revert_delay=_env('PALETTE_REVERT_DELAY', float, base.revert_delay),
            completion_delay=_env('PALETTE_COMPLETION_DELAY', float, base.completion_delay),
            tick_interval=_env('PALETTE_TICK_INTERVAL', float, base.tick_interval),
        )

    def without_penalty(self) -> 'Rules':
        return replace(self, mismatch_penalty=0)
