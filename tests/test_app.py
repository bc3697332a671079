import json
import unittest
from collections import defaultdict

from app import app as flask_app  # noqa: E402
import app as app_mod             # noqa: E402
from game import ManualClock      # noqa: E402


class TestFlaskAPI(unittest.TestCase):
    def setUp(self):
        # Drive every session scheduler from a manual clock so no test sleeps
        self._orig_clock = app_mod.clock
        self.clock = ManualClock(1000.0)
        app_mod.clock = self.clock
        app_mod.SESSIONS.clear()
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod.clock = self._orig_clock
        app_mod.SESSIONS.clear()

    def _post(self, path, payload):
        return self.client.post(path, data=json.dumps(payload), content_type="application/json")

    def _new(self, **payload):
        r = self._post("/api/new", payload)
        self.assertEqual(r.status_code, 200)
        d = r.get_json()
        self.assertTrue(d["ok"])
        return d["session"], d["state"]

    def _pairs(self, sid):
        # Colours are hidden in the JSON, so peek at the engine directly
        tiles = app_mod.SESSIONS[sid].engine.tiles
        groups = defaultdict(list)
        for i, t in enumerate(tiles):
            if not t.is_blocked:
                groups[t.color].append(i)
        out = []
        for idxs in groups.values():
            for k in range(0, len(idxs), 2):
                out.append((idxs[k], idxs[k + 1]))
        return out

    def test_given_index_and_levels_when_requested_then_three_presets(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 200)
        d = r.get_json()
        self.assertEqual([lv["id"] for lv in d["levels"]], ["Easy", "Medium", "Hard"])

        r2 = self.client.get("/api/levels")
        d2 = r2.get_json()
        self.assertTrue(d2["ok"])
        self.assertEqual([lv["gridSize"] for lv in d2["levels"]], [3, 5, 7])
        self.assertTrue(all(lv["timeLimit"] for lv in d2["timedLevels"]))

    def test_given_new_game_when_posted_then_face_down_board_without_colours(self):
        sid, state = self._new(level="medium", seed=3)
        self.assertEqual(len(state["tiles"]), 25)
        self.assertEqual(state["score"], 0)
        self.assertEqual(state["moves"], 0)
        self.assertEqual(state["phase"], "awaiting_first_pick")
        self.assertIsNone(state["timeRemaining"])
        self.assertTrue(all(t["color"] is None for t in state["tiles"]))

    def test_given_bad_level_when_new_then_400(self):
        r = self._post("/api/new", {"level": "nightmare"})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.get_json()["ok"])

    def test_given_pair_when_tapped_then_match_reported(self):
        sid, _ = self._new(level="easy", seed=1)
        a, b = self._pairs(sid)[0]
        r1 = self._post("/api/tap", {"session": sid, "index": a})
        self.assertEqual(r1.get_json()["outcome"], "first_pick")
        self.assertIsNotNone(r1.get_json()["state"]["tiles"][a]["color"])
        r2 = self._post("/api/tap", {"session": sid, "index": b})
        d2 = r2.get_json()
        self.assertEqual(d2["outcome"], "match")
        self.assertEqual(d2["state"]["score"], 10)
        self.assertEqual(d2["state"]["moves"], 1)
        self.assertTrue(d2["state"]["tiles"][a]["matched"])

    def test_given_mismatch_when_clock_passes_delay_then_state_shows_tiles_hidden(self):
        sid, _ = self._new(level="easy", seed=1)
        pairs = self._pairs(sid)
        a, b = pairs[0][0], pairs[1][0]
        self._post("/api/tap", {"session": sid, "index": a})
        d = self._post("/api/tap", {"session": sid, "index": b}).get_json()
        self.assertEqual(d["outcome"], "mismatch")
        self.assertEqual(d["state"]["phase"], "resolving")
        self.assertEqual(d["state"]["score"], -2)

        self.clock.advance(1.0)
        d2 = self._post("/api/state", {"session": sid}).get_json()
        self.assertEqual(d2["state"]["phase"], "awaiting_first_pick")
        self.assertFalse(d2["state"]["tiles"][a]["revealed"])
        self.assertFalse(d2["state"]["tiles"][b]["revealed"])

    def test_given_penalty_disabled_when_mismatch_then_score_stays_zero(self):
        sid, _ = self._new(level="easy", seed=1, penalty=False)
        pairs = self._pairs(sid)
        self._post("/api/tap", {"session": sid, "index": pairs[0][0]})
        d = self._post("/api/tap", {"session": sid, "index": pairs[1][0]}).get_json()
        self.assertEqual(d["state"]["score"], 0)

    def test_given_bad_tap_when_posted_then_400_or_404(self):
        sid, _ = self._new(level="easy", seed=1)
        r = self._post("/api/tap", {"session": sid, "index": 99})
        self.assertEqual(r.status_code, 400)
        r2 = self._post("/api/tap", {"session": sid, "index": "zero"})
        self.assertEqual(r2.status_code, 400)
        r3 = self._post("/api/tap", {"session": "nope", "index": 0})
        self.assertEqual(r3.status_code, 404)
        r4 = self._post("/api/state", {})
        self.assertEqual(r4.status_code, 400)

    def test_given_timed_game_when_clock_runs_out_then_finished_and_next_stage(self):
        sid, state = self._new(level="easy", timed=True, seed=2)
        self.assertEqual(state["timeRemaining"], 30)
        self.clock.advance(10.0)
        d = self._post("/api/state", {"session": sid}).get_json()
        self.assertEqual(d["state"]["timeRemaining"], 20)
        self.assertFalse(d["state"]["finished"])

        self.clock.advance(20.0)
        d2 = self._post("/api/state", {"session": sid}).get_json()
        self.assertTrue(d2["state"]["finished"])
        self.assertEqual(d2["state"]["outcome"], "time_up")
        self.assertEqual(d2["state"]["timeRemaining"], 0)
        self.assertIsNone(d2["state"]["nextStage"])

        self.clock.advance(0.5)
        d3 = self._post("/api/state", {"session": sid}).get_json()
        self.assertTrue(d3["state"]["signalled"])
        self.assertEqual(d3["state"]["nextStage"], "animal-matching")

    def test_given_cleared_untimed_board_when_signalled_then_no_next_stage(self):
        sid, _ = self._new(level="easy", seed=4)
        for a, b in self._pairs(sid):
            self._post("/api/tap", {"session": sid, "index": a})
            self._post("/api/tap", {"session": sid, "index": b})
        self.clock.advance(0.5)
        d = self._post("/api/state", {"session": sid}).get_json()["state"]
        self.assertEqual(d["outcome"], "cleared")
        self.assertTrue(d["signalled"])
        self.assertIsNone(d["nextStage"])
        self.assertEqual(d["score"], 40)
        self.assertEqual(d["moves"], 4)

    def test_given_session_when_restarted_then_counters_reset(self):
        sid, _ = self._new(level="easy", timed=True, seed=5)
        a, b = self._pairs(sid)[0]
        self._post("/api/tap", {"session": sid, "index": a})
        self._post("/api/tap", {"session": sid, "index": b})
        self.clock.advance(3.0)
        d = self._post("/api/restart", {"session": sid}).get_json()
        self.assertTrue(d["ok"])
        self.assertEqual(d["state"]["score"], 0)
        self.assertEqual(d["state"]["moves"], 0)
        self.assertEqual(d["state"]["timeRemaining"], 30)

    def test_given_many_timed_sessions_when_all_finish_then_evicted_after_final_state(self):
        sids = [self._new(level="easy", timed=True, seed=i)[0] for i in range(20)]
        self.assertEqual(len(app_mod.SESSIONS), 20)
        self.clock.advance(40.0)
        for sid in sids:
            d = self._post("/api/state", {"session": sid}).get_json()
            self.assertTrue(d["ok"])
            self.assertTrue(d["state"]["finished"])
            self.assertEqual(d["state"]["nextStage"], "animal-matching")
        self.assertEqual(len(app_mod.SESSIONS), 0)
        r = self._post("/api/state", {"session": sids[0]})
        self.assertEqual(r.status_code, 404)

    def test_given_last_match_when_signal_pending_then_session_kept_until_reported(self):
        sid, _ = self._new(level="easy", seed=4)
        for a, b in self._pairs(sid):
            self._post("/api/tap", {"session": sid, "index": a})
            d = self._post("/api/tap", {"session": sid, "index": b}).get_json()
        self.assertEqual(d["outcome"], "match")
        self.assertTrue(d["state"]["finished"])
        self.assertFalse(d["state"]["signalled"])
        self.assertIn(sid, app_mod.SESSIONS)
        self.clock.advance(0.5)
        d2 = self._post("/api/tap", {"session": sid, "index": 0}).get_json()
        self.assertEqual(d2["outcome"], "ignored")
        self.assertTrue(d2["state"]["signalled"])
        self.assertNotIn(sid, app_mod.SESSIONS)

    def test_given_idle_session_when_new_one_created_after_ttl_then_idle_one_dropped(self):
        old_sid, _ = self._new(level="medium", timed=True, seed=1)
        old_play = app_mod.SESSIONS[old_sid]
        self.clock.advance(app_mod.SESSION_TTL - 1)
        kept_sid, _ = self._new(level="easy", seed=2)
        self.assertIn(old_sid, app_mod.SESSIONS)
        self.clock.advance(2.0)
        self._new(level="easy", seed=3)
        self.assertNotIn(old_sid, app_mod.SESSIONS)
        self.assertIn(kept_sid, app_mod.SESSIONS)
        self.assertEqual(old_play.scheduler.pending(), 0)

    def test_given_session_when_left_then_forgotten_and_nothing_scheduled(self):
        sid, _ = self._new(level="hard", timed=True, seed=6)
        play = app_mod.SESSIONS[sid]
        r = self._post("/api/leave", {"session": sid})
        self.assertTrue(r.get_json()["ok"])
        self.assertNotIn(sid, app_mod.SESSIONS)
        self.assertEqual(play.scheduler.pending(), 0)
        r2 = self._post("/api/state", {"session": sid})
        self.assertEqual(r2.status_code, 404)


if __name__ == "__main__":
    unittest.main(verbosity=2)
