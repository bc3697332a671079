from __future__ import annotations

import argparse
import logging
import time
from typing import Optional

from .board import grid_size_of, index, pretty
from .config import Rules, debug_enabled
from .engine import MatchEngine
from .levels import LevelId, get_level
from .scheduler import TaskScheduler
from .state import TapOutcome

# Time source for the game scheduler; tests swap it for a ManualClock.
clock = time.monotonic


def parse_tap(text: str, size: int) -> Optional[int]:
    """Parses 'r,c', 'r c' or a flat index into a tile index. None if unparsable."""
    text = text.strip()
    if not text:
        return None
    sep = ',' if ',' in text else ' '
    parts = [t for t in text.split(sep) if t != '']
    try:
        if len(parts) == 1:
            return int(parts[0])
        if len(parts) == 2:
            r, c = int(parts[0]), int(parts[1])
            if not (0 <= r < size and 0 <= c < size):
                return -1
            return index(r, c, size)
    except ValueError:
        return None
    return None


def _status_line(engine: MatchEngine) -> str:
    parts = [f'Score: {engine.score}', f'Moves: {engine.moves}']
    if engine.time_remaining is not None:
        parts.append(f'Time: {engine.time_remaining}s')
    return '   '.join(parts)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description='Pixel Palette: match the colours and avoid the block!')
    parser.add_argument('--level', choices=[lid.value.lower() for lid in LevelId], default='easy', help='Grid preset')
    parser.add_argument('--timed', action='store_true', help='Play against the clock')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the deal')
    parser.add_argument('--no-penalty', action='store_true', help='Do not deduct points for a mismatch')
    parser.add_argument('--peek', action='store_true', help='Show every colour (debugging)')
    args = parser.parse_args(argv)

    if debug_enabled():
        logging.basicConfig(level=logging.DEBUG)

    rules = Rules.from_env()
    if args.no_penalty:
        rules = rules.without_penalty()
    scheduler = TaskScheduler(lambda: clock())
    engine = MatchEngine(scheduler, rules=rules, seed=args.seed)
    level = get_level(args.level, timed=args.timed)

    advanced = []
    engine.on_finished(lambda: advanced.append(True))
    engine.setup_game(level)
    print(f'{level.identifier.value}: {level.grid_size}x{level.grid_size}')
    if level.has_blocked_tile:
        print('One tile is blocked and has no partner.')

    while True:
        scheduler.run_due()
        print()
        print(pretty(engine.tiles, peek=args.peek))
        print(_status_line(engine))
        if engine.is_finished:
            # Let the finished signal go out before printing the summary.
            time.sleep(rules.completion_delay)
            scheduler.run_due()
            print()
            print(engine.snapshot().summary())
            if advanced and level.timed:
                print('On to the animal matching game!')
            break

        text = input('Tap r,c (n = new board, q = quit): ').strip().lower()
        if text in ('q', 'quit'):
            break
        if text in ('n', 'new', 'r', 'restart'):
            engine.restart()
            continue
        scheduler.run_due()
        if engine.is_finished:
            # Time ran out while waiting for input; the tap no longer counts.
            continue
        size = grid_size_of(engine.tiles)
        idx = parse_tap(text, size)
        if idx is None or not 0 <= idx < len(engine.tiles):
            print('Could not parse. Try again.')
            continue
        outcome = engine.tile_tapped(idx)
        if outcome is TapOutcome.BLOCKED:
            print('Blocked tile!')
        elif outcome is TapOutcome.MATCH:
            print('Match!')
        elif outcome is TapOutcome.MISMATCH:
            print(pretty(engine.tiles, peek=args.peek))
            print('No match.')
            time.sleep(rules.revert_delay)
        elif outcome is TapOutcome.IGNORED:
            print('That tile cannot be picked right now.')
