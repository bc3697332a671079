from __future__ import annotations

import argparse
import os
import random
import sys
import time
from typing import Dict, List, Optional, Tuple

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from game import ManualClock, MatchEngine, Rules, TapOutcome, TaskScheduler, get_level  # type: ignore


def play_one(level_name: str, timed: bool, seed: int, memory: float, rules: Rules) -> Tuple[int, int, str]:
    """
    Plays one game with a simulated player on a manual clock.

    `memory` is the chance the player recalls a colour it has already seen;
    1.0 is a perfect memoriser, 0.0 picks blindly.
    """
    clock = ManualClock()
    scheduler = TaskScheduler(clock)
    engine = MatchEngine(scheduler, rules=rules, seed=seed)
    rng = random.Random(seed)
    engine.setup_game(get_level(level_name, timed=timed))
    seen: Dict[int, str] = {}
    # Think time per tap, in seconds.
    think = 0.4

    def hidden() -> List[int]:
        return [i for i, t in enumerate(engine.tiles) if not t.is_revealed and not t.is_matched]

    def recall(color: str, exclude: int) -> Optional[int]:
        for i, c in seen.items():
            if i != exclude and c == color and i in hidden() and rng.random() < memory:
                return i
        return None

    while not engine.is_finished:
        candidates = hidden()
        if not candidates:
            clock.advance(think)
            scheduler.run_due()
            continue
        first = rng.choice(candidates)
        outcome = engine.tile_tapped(first)
        seen[first] = engine.tiles[first].color
        clock.advance(think)
        scheduler.run_due()
        if outcome is TapOutcome.BLOCKED or engine.is_finished:
            continue
        second = recall(engine.tiles[first].color, first)
        if second is None:
            rest = [i for i in hidden() if i != first]
            if not rest:
                continue
            second = rng.choice(rest)
        engine.tile_tapped(second)
        seen[second] = engine.tiles[second].color
        clock.advance(max(think, rules.revert_delay))
        scheduler.run_due()

    clock.advance(rules.completion_delay)
    scheduler.run_due()
    snap = engine.snapshot()
    return snap.score, snap.moves, snap.outcome.value if snap.outcome else 'unfinished'


def process(args: argparse.Namespace) -> None:
    rules = Rules.from_env()
    if args.no_penalty:
        rules = rules.without_penalty()
    start_time = time.time()
    scores: List[int] = []
    moves: List[int] = []
    outcomes: Dict[str, int] = {}
    for i in range(int(args.games)):
        score, mv, outcome = play_one(args.level, args.timed, args.seed + i, float(args.memory), rules)
        scores.append(score)
        moves.append(mv)
        outcomes[outcome] = outcomes.get(outcome, 0) + 1
    n = len(scores)
    if n == 0:
        print('no games played')
        return
    print(f'games={n} level={args.level} timed={args.timed} memory={args.memory}')
    print(f'score: min={min(scores)} avg={sum(scores) / n:.1f} max={max(scores)}')
    print(f'moves: min={min(moves)} avg={sum(moves) / n:.1f} max={max(moves)}')
    print('outcomes: ' + ', '.join(f'{k}={v}' for k, v in sorted(outcomes.items())))
    print(f'elapsed {time.time() - start_time:.2f}s')


def main() -> None:
    ap = argparse.ArgumentParser(description='Simulate Pixel Palette games to compare level difficulty')
    ap.add_argument('--level', default='easy', help='easy, medium or hard')
    ap.add_argument('--timed', action='store_true', help='Use the per-level countdown')
    ap.add_argument('--games', type=int, default=100, help='Number of games to play')
    ap.add_argument('--seed', type=int, default=0, help='First RNG seed')
    ap.add_argument('--memory', type=float, default=0.8, help='Chance of recalling a seen colour (0..1)')
    ap.add_argument('--no-penalty', action='store_true', help='Do not deduct points for a mismatch')
    process(ap.parse_args())


if __name__ == '__main__':
    main()
