"""Tests for web.py — message dispatch, snapshots and the HTTP endpoints."""
import json
import threading

import pytest

from dice import ScriptedRoller
from event_codec import loads_log, ruleset_from_dict
from game import JoinGame, PlayerMessage, Roll, RollResult, StartGame, ToggleHold
from game_coordinator import GameCoordinator, Replica
from rulesets import mini_rules
import web

# ── Helpers ──────────────────────────────────────────────────────────────────


@pytest.fixture
def coordinator():
    """A configured two-player mini game, waiting for Ann's first roll."""
    coord = web.configure(GameCoordinator(mini_rules(), dice_roller=ScriptedRoller([[6, 6, 6, 2, 2]])))
    coord.submit(0, JoinGame("Ann"))
    coord.submit(1, JoinGame("Bob"))
    coord.submit(0, StartGame())
    yield coord
    web.app.config["COORDINATOR"] = None


@pytest.fixture
def client(coordinator):
    web.app.config["TESTING"] = True
    return web.app.test_client()


def _send(coordinator, message, default_player=None):
    raw = message if isinstance(message, str) else json.dumps(message)
    return web._handle_message(coordinator, raw, default_player)


# ── _handle_message ──────────────────────────────────────────────────────────

class TestHandleMessage:
    """Decoding and submitting client commands."""

    def test_accepted_command(self, coordinator):
        reply = _send(coordinator, {"player": 0, "command": {"type": "Roll"}})
        assert reply == {"type": "ok"}
        assert coordinator.event_log[-2:] == [PlayerMessage(0, Roll()), RollResult((6, 6, 6, 2, 2))]

    def test_default_player_from_connection(self, coordinator):
        reply = _send(coordinator, {"command": {"type": "Roll"}}, default_player=0)
        assert reply == {"type": "ok"}

    def test_explicit_player_wins_over_default(self, coordinator):
        reply = _send(coordinator, {"player": 1, "command": {"type": "Roll"}}, default_player=0)
        assert reply["error"] == "not_your_turn"

    def test_invalid_action_reports_kind(self, coordinator):
        reply = _send(coordinator, {"player": 0, "command": {"type": "Place", "row": 0}})
        assert reply["type"] == "error"
        assert reply["error"] == "wrong_state"
        assert reply["message"]

    def test_rejection_changes_nothing(self, coordinator):
        before = coordinator.event_log
        _send(coordinator, {"player": 1, "command": {"type": "Roll"}})
        assert coordinator.event_log == before

    def test_out_of_bounds_hold(self, coordinator):
        _send(coordinator, {"player": 0, "command": {"type": "Roll"}})
        reply = _send(coordinator, {"player": 0, "command": {"type": "ToggleHold", "die": 9}})
        assert reply["error"] == "out_of_bounds"

    def test_not_selectable_bonus(self, coordinator):
        _send(coordinator, {"player": 0, "command": {"type": "Roll"}})
        reply = _send(coordinator, {"player": 0, "command": {"type": "Place", "row": 1}})
        assert reply["error"] == "not_selectable"

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2]",
        '{"command": {"type": "Roll"}}',
        '{"player": "0", "command": {"type": "Roll"}}',
        '{"player": true, "command": {"type": "Roll"}}',
        '{"player": 0}',
        '{"player": 0, "command": {"type": "Cheat"}}',
    ])
    def test_bad_messages(self, coordinator, raw):
        reply = _send(coordinator, raw)
        assert reply["type"] == "error"
        assert reply["error"] == "bad_message"


# ── Messages ─────────────────────────────────────────────────────────────────

class TestMessages:
    """Wire messages built for clients."""

    def test_sync_message_rebuilds_game(self, coordinator):
        coordinator.submit(0, Roll())
        message = json.loads(json.dumps(web.sync_message(coordinator.ruleset, coordinator.event_log)))
        assert message["type"] == "sync"
        replica = Replica(ruleset_from_dict(message["ruleset"]))
        replica.sync(loads_log(json.dumps(message["events"])))
        assert replica.game == coordinator.game

    def test_events_message(self):
        message = web.events_message([PlayerMessage(0, Roll()), RollResult((1, 2, 3, 4, 5))])
        assert message == {"type": "events", "events": [
            {"type": "PlayerMessage", "player": 0, "command": {"type": "Roll"}},
            {"type": "RollResult", "values": [1, 2, 3, 4, 5]},
        ]}

    def test_snapshot(self, coordinator):
        coordinator.submit(0, Roll())
        snap = web.game_snapshot(coordinator.game)
        assert snap["state"] == "reroll"
        assert snap["round"] == 1
        assert snap["rounds"] == 3
        assert snap["roll"] == [6, 6, 6, 2, 2]
        assert snap["rows"] == ["Sixes", "Bonus", "Full House", "Small Straight"]
        assert [p["name"] for p in snap["players"]] == ["Ann", "Bob"]
        assert snap["scoreboard"] == [[0, "Bob"], [0, "Ann"]]


# ── HTTP endpoints ───────────────────────────────────────────────────────────

class TestEndpoints:

    def test_index_returns_snapshot(self, client, coordinator):
        response = client.get("/")
        assert response.status_code == 200
        assert response.get_json() == web.game_snapshot(coordinator.game)

    def test_events_endpoint(self, client, coordinator):
        response = client.get("/events")
        data = response.get_json()
        assert ruleset_from_dict(data["ruleset"]) == mini_rules()
        assert loads_log(json.dumps(data["events"])) == coordinator.event_log

    def test_get_coordinator_uses_configured(self, coordinator):
        assert web.get_coordinator() is coordinator


# ── WebSocket handler ────────────────────────────────────────────────────────

class FakeSocket:
    """Scripted client: hands out queued messages and records what is sent."""

    def __init__(self, incoming, on_send=None):
        self.incoming = list(incoming)
        self.on_send = on_send
        self.sent = []
        self.active = 0
        self.max_active = 0
        self._count_lock = threading.Lock()

    def receive(self):
        return self.incoming.pop(0) if self.incoming else None

    def send(self, data):
        with self._count_lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            message = json.loads(data)
            self.sent.append(message)
            if self.on_send is not None:
                self.on_send(message)
        finally:
            with self._count_lock:
                self.active -= 1


class TestWebSocketHandler:

    def _run(self, ws):
        handler = web.app.view_functions["websocket"].__wrapped__
        with web.app.test_request_context("/ws?player=0"):
            handler(ws)

    def test_sync_then_events_then_reply(self, coordinator):
        ws = FakeSocket([json.dumps({"command": {"type": "Roll"}})])
        self._run(ws)
        assert [m["type"] for m in ws.sent] == ["sync", "events", "ok"]
        assert ws.sent[1]["events"][1] == {"type": "RollResult", "values": [6, 6, 6, 2, 2]}

    def test_listener_removed_on_disconnect(self, coordinator):
        ws = FakeSocket([])
        self._run(ws)
        coordinator.submit(0, Roll())
        assert [m["type"] for m in ws.sent] == ["sync"]

    def test_broadcast_never_overlaps_reply(self, coordinator):
        """A batch committed by another connection waits for the reply to finish."""
        others = []

        def on_send(message):
            if message["type"] == "ok":
                other = threading.Thread(target=coordinator.submit, args=(0, ToggleHold(0)))
                other.start()
                other.join(timeout=0.3)
                others.append(other)

        ws = FakeSocket([json.dumps({"command": {"type": "Roll"}})], on_send=on_send)
        self._run(ws)
        for other in others:
            other.join()
        assert ws.max_active == 1
        assert [m["type"] for m in ws.sent] == ["sync", "events", "ok", "events"]
