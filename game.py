from __future__ import annotations

# Facade module that re-exports Pixel Palette core functionality.
# The Flask app, the tools and the tests import from here.
# Single-responsibility modules live under palette_core/*.

from palette_core.tile import Tile, Color, PALETTE, BLOCKED_COLOR, blocked_tile
from palette_core.levels import (
    Level,
    LevelId,
    GRID_SIZES,
    TIME_LIMITS,
    get_level,
    parse_level_id,
    all_levels,
)
from palette_core.deal import deal_tiles
from palette_core.board import (
    Coord,
    index,
    grid_size_of,
    is_complete,
    pretty,
)
from palette_core.config import Rules, debug_enabled
from palette_core.scheduler import ManualClock, ScheduledTask, TaskScheduler
from palette_core.timer import CountdownTimer
from palette_core.notifier import CompletionNotifier
from palette_core.state import GameSnapshot, Outcome, Phase, Session, TapOutcome
from palette_core.engine import MatchEngine
from palette_core.cli import parse_tap

__all__ = [
    'Tile', 'Color', 'PALETTE', 'BLOCKED_COLOR', 'blocked_tile',
    'Level', 'LevelId', 'GRID_SIZES', 'TIME_LIMITS', 'get_level', 'parse_level_id', 'all_levels',
    'deal_tiles',
    'Coord', 'index', 'grid_size_of', 'is_complete', 'pretty',
    'Rules', 'debug_enabled',
    'ManualClock', 'ScheduledTask', 'TaskScheduler',
    'CountdownTimer', 'CompletionNotifier',
    'GameSnapshot', 'Outcome', 'Phase', 'Session', 'TapOutcome',
    'MatchEngine', 'parse_tap',
    'new_engine', 'main',
]


def new_engine(clock=None, rules: Rules | None = None, seed: int | None = None) -> MatchEngine:
    """Builds an engine on its own scheduler. `clock` defaults to time.monotonic."""
    return MatchEngine(TaskScheduler(clock), rules=rules, seed=seed)


def main() -> None:
    # CLI driver delegated to palette_core.cli
    from palette_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
