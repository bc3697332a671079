from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional

from .board import is_complete
from .config import Rules
from .deal import deal_tiles
from .levels import Level
from .notifier import CompletionNotifier
from .scheduler import TaskScheduler
from .state import GameSnapshot, Outcome, Phase, Session, TapOutcome
from .timer import CountdownTimer
from .tile import Tile

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    The match-game state machine.

    Owns the tiles and the current Session. Every delayed effect (mismatch
    revert, countdown tick, finished signal) goes through `scheduler` tagged
    with the session generation, so restarting or leaving cancels them as a
    group. Callbacks also re-check the generation before touching anything.
    """

    def __init__(
        self,
        scheduler: TaskScheduler,
        rules: Optional[Rules] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.scheduler = scheduler
        self.rules = rules or Rules()
        self._rng = rng or random.Random(seed)
        self._generation = 0
        self.level: Optional[Level] = None
        self.tiles: List[Tile] = []
        self.session: Optional[Session] = None
        self.timer = CountdownTimer(scheduler, on_expire=self._time_expired, interval=self.rules.tick_interval)
        self.notifier = CompletionNotifier(scheduler, delay=self.rules.completion_delay)

    # ----- lifecycle -----

    def setup_game(self, level: Level) -> None:
        """Deals a fresh board for `level` and starts a new session. Used for first load and restart."""
        self._end_session()
        self._generation += 1
        gen = self._generation
        self.level = level
        self.tiles = deal_tiles(level, rng=self._rng)
        self.session = Session(generation=gen)
        self.notifier.arm(gen)
        if level.time_limit is not None:
            self.timer.start(level.time_limit, tag=gen)
        logger.debug('session %d: %s, %d tiles, time limit %s', gen, level.identifier.value, len(self.tiles), level.time_limit)

    def restart(self) -> None:
        if self.level is None:
            raise RuntimeError('no level to restart')
        self.setup_game(self.level)

    def teardown(self) -> None:
        """Leaves the level: nothing scheduled for the session may run afterwards."""
        self._end_session()
        self.level = None
        self.tiles = []
        self.session = None

    def on_finished(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Registers a zero-argument listener for the delayed finished signal."""
        return self.notifier.subscribe(listener)

    def _end_session(self) -> None:
        self.timer.reset()
        self.notifier.disarm()
        if self.session is not None:
            self.scheduler.cancel_tag(self.session.generation)

    # ----- queries -----

    @property
    def phase(self) -> Phase:
        s = self.session
        if s is None:
            return Phase.IDLE
        if s.is_finished:
            return Phase.FINISHED
        if s.is_resolving:
            return Phase.RESOLVING
        if s.selection:
            return Phase.AWAITING_SECOND_PICK
        return Phase.AWAITING_FIRST_PICK

    @property
    def score(self) -> int:
        return self.session.score if self.session else 0

    @property
    def moves(self) -> int:
        return self.session.moves if self.session else 0

    @property
    def is_finished(self) -> bool:
        return bool(self.session and self.session.is_finished)

    @property
    def time_remaining(self) -> Optional[int]:
        return self.timer.remaining

    def snapshot(self) -> GameSnapshot:
        s = self.session
        return GameSnapshot(
            level=self.level,
            tiles=tuple(self.tiles),
            score=self.score,
            moves=self.moves,
            selection=tuple(s.selection) if s else (),
            phase=self.phase,
            time_remaining=self.time_remaining,
            is_finished=self.is_finished,
            outcome=s.outcome if s else None,
        )

    # ----- input -----

    def tile_tapped(self, index: int) -> TapOutcome:
        """Handles a tap on tile `index`. Taps that cannot apply right now are ignored."""
        if not 0 <= index < len(self.tiles):
            raise IndexError(f'tile index {index} out of range for {len(self.tiles)} tiles')
        s = self.session
        if s is None:
            raise RuntimeError('no game in progress')
        if s.is_resolving or s.is_finished:
            return TapOutcome.IGNORED
        tile = self.tiles[index]
        if tile.is_matched or tile.is_revealed:
            return TapOutcome.IGNORED

        self.tiles[index] = tile.revealed()
        if tile.is_blocked:
            return TapOutcome.BLOCKED

        s.selection.append(index)
        if len(s.selection) < 2:
            return TapOutcome.FIRST_PICK

        s.is_resolving = True
        s.moves += 1
        return self._resolve(s.selection[0], s.selection[1])

    # ----- turn resolution -----

    def _resolve(self, a: int, b: int) -> TapOutcome:
        s = self.session
        if s is None:
            return TapOutcome.IGNORED
        if self.tiles[a].color == self.tiles[b].color:
            self.tiles[a] = self.tiles[a].matched()
            self.tiles[b] = self.tiles[b].matched()
            s.score += self.rules.match_reward
            logger.debug('session %d: match %d/%d, score %d', s.generation, a, b, s.score)
            self._finish_turn()
            return TapOutcome.MATCH

        s.score -= self.rules.mismatch_penalty
        logger.debug('session %d: mismatch %d/%d, score %d', s.generation, a, b, s.score)
        gen = s.generation
        self.scheduler.call_later(self.rules.revert_delay, lambda: self._revert(gen, a, b), tag=gen)
        return TapOutcome.MISMATCH

    def _revert(self, gen: int, a: int, b: int) -> None:
        s = self.session
        if s is None or s.generation != gen or s.is_finished:
            return
        self.tiles[a] = self.tiles[a].hidden()
        self.tiles[b] = self.tiles[b].hidden()
        self._finish_turn()

    def _finish_turn(self) -> None:
        s = self.session
        if s is None:
            return
        s.selection.clear()
        s.is_resolving = False
        if is_complete(self.tiles):
            self._end_game(Outcome.CLEARED)

    # ----- game end -----

    def _time_expired(self) -> None:
        self._end_game(Outcome.TIME_UP)

    def _end_game(self, outcome: Outcome) -> None:
        s = self.session
        if s is None or s.is_finished:
            return
        s.is_finished = True
        s.outcome = outcome
        self.timer.stop()
        logger.debug('session %d finished (%s): score %d, moves %d', s.generation, outcome.value, s.score, s.moves)
        self.notifier.trigger()
