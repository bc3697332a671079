from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from game import (
    GameSnapshot,
    Level,
    MatchEngine,
    Rules,
    TaskScheduler,
    Tile,
    all_levels,
    debug_enabled,
    get_level,
)

logger = logging.getLogger(__name__)

NEXT_STAGE = "animal-matching"

RULES = Rules.from_env()

# Time source for every session scheduler; tests swap it for a ManualClock.
clock = time.monotonic

# Sessions idle for longer than this many seconds are dropped when a new one is created.
SESSION_TTL = float(os.getenv("PALETTE_SESSION_TTL", "3600"))

app = Flask(__name__)


def _now() -> float:
    return clock()


@dataclass
class PlaySession:
    engine: MatchEngine
    scheduler: TaskScheduler
    advanced: bool = False
    touched: float = field(default_factory=_now)

    def advance(self) -> None:
        # Hand-off to the next mini-game; it has no state of its own yet.
        self.advanced = True


SESSIONS: Dict[str, PlaySession] = {}
_LOCK = threading.Lock()


# ---------- JSON helpers ----------

def _level_to_json(level: Optional[Level]) -> Optional[Dict[str, Any]]:
    if level is None:
        return None
    return {
        "id": level.identifier.value,
        "gridSize": int(level.grid_size),
        "timeLimit": level.time_limit,
    }


def _tile_to_json(t: Tile) -> Dict[str, Any]:
    # Colour stays hidden until the tile is face up.
    face_up = t.is_revealed or t.is_matched
    return {
        "id": t.id,
        "color": t.color if face_up else None,
        "revealed": bool(t.is_revealed),
        "matched": bool(t.is_matched),
        "blocked": bool(t.is_blocked) if face_up else False,
    }


def state_to_json(snap: GameSnapshot, play: Optional[PlaySession] = None) -> Dict[str, Any]:
    return {
        "level": _level_to_json(snap.level),
        "tiles": [_tile_to_json(t) for t in snap.tiles],
        "score": int(snap.score),
        "moves": int(snap.moves),
        "selection": list(snap.selection),
        "phase": snap.phase.value,
        "timeRemaining": snap.time_remaining,
        "finished": bool(snap.is_finished),
        "outcome": snap.outcome.value if snap.outcome else None,
        "signalled": bool(play.engine.notifier.fired) if play else False,
        "nextStage": NEXT_STAGE if (play and play.advanced) else None,
    }


# ---------- session plumbing ----------

def _create_session(level: Level, seed: Optional[int], penalty: bool) -> Tuple[str, PlaySession]:
    _evict_stale()
    rules = RULES if penalty else RULES.without_penalty()
    scheduler = TaskScheduler(_now)
    engine = MatchEngine(scheduler, rules=rules, seed=seed)
    play = PlaySession(engine=engine, scheduler=scheduler)
    if level.timed:
        engine.on_finished(play.advance)
    engine.setup_game(level)
    sid = uuid.uuid4().hex
    SESSIONS[sid] = play
    logger.debug("created session %s (%s, timed=%s)", sid, level.identifier.value, level.timed)
    return sid, play


def _lookup(body: Dict[str, Any]) -> Tuple[Optional[str], Optional[PlaySession]]:
    sid = body.get("session")
    if not isinstance(sid, str):
        return None, None
    play = SESSIONS.get(sid)
    if play is not None:
        play.touched = _now()
        play.scheduler.run_due()
    return sid, play


def _discard(sid: str) -> None:
    play = SESSIONS.pop(sid, None)
    if play is not None:
        play.engine.teardown()
        logger.debug("discarded session %s", sid)


def _evict_stale() -> None:
    now = _now()
    for sid, play in list(SESSIONS.items()):
        if now - play.touched > SESSION_TTL:
            _discard(sid)


def _reply(sid: str, play: PlaySession, payload: Dict[str, Any]) -> Any:
    payload["state"] = state_to_json(play.engine.snapshot(), play)
    # Once the finished signal has gone out, this response carries the final state.
    if play.engine.notifier.fired:
        _discard(sid)
    return jsonify(payload)


def _missing(sid: Optional[str]) -> Any:
    if sid is None:
        return jsonify({"ok": False, "error": "session required"}), 400
    return jsonify({"ok": False, "error": "unknown session"}), 404


# ---------- routes ----------

@app.get("/")
def index() -> Any:
    return jsonify({
        "ok": True,
        "name": "Pixel Palette",
        "tagline": "Match the colours and avoid the block!",
        "levels": [_level_to_json(lv) for lv in all_levels()],
    })


@app.get("/api/levels")
def api_levels() -> Any:
    return jsonify({
        "ok": True,
        "levels": [_level_to_json(lv) for lv in all_levels()],
        "timedLevels": [_level_to_json(lv) for lv in all_levels(timed=True)],
    })


@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        level = get_level(str(body.get("level", "easy")), timed=bool(body.get("timed", False)))
        seed = body.get("seed", None)
        seed = int(seed) if seed is not None else None
    except (TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    penalty = bool(body.get("penalty", True))
    with _LOCK:
        sid, play = _create_session(level, seed, penalty)
        return jsonify({"ok": True, "session": sid, "state": state_to_json(play.engine.snapshot(), play)})


@app.post("/api/tap")
def api_tap() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    with _LOCK:
        sid, play = _lookup(body)
        if play is None:
            return _missing(sid)
        raw = body.get("index")
        if isinstance(raw, bool) or not isinstance(raw, int):
            return jsonify({"ok": False, "error": "integer index required"}), 400
        try:
            outcome = play.engine.tile_tapped(raw)
        except IndexError as e:
            return jsonify({"ok": False, "error": str(e)}), 400
        return _reply(sid, play, {"ok": True, "outcome": outcome.value})


@app.post("/api/state")
def api_state() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    with _LOCK:
        sid, play = _lookup(body)
        if play is None:
            return _missing(sid)
        return _reply(sid, play, {"ok": True})


@app.post("/api/restart")
def api_restart() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    with _LOCK:
        sid, play = _lookup(body)
        if play is None:
            return _missing(sid)
        play.engine.restart()
        play.advanced = False
        return jsonify({"ok": True, "state": state_to_json(play.engine.snapshot(), play)})


@app.post("/api/leave")
def api_leave() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    with _LOCK:
        sid, play = _lookup(body)
        if play is None:
            return _missing(sid)
        _discard(sid)
        return jsonify({"ok": True})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    debug = debug_enabled() or os.getenv("FLASK_DEBUG", "0").lower() in ("1", "true", "yes", "on")
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    port = int(os.getenv("PORT", "5000"))
    app.run(host="127.0.0.1", port=port, debug=debug)
