#!/usr/bin/env python3
"""
Jatsi Web — Flask + WebSocket leader relay.

The server owns the authoritative game. Each WebSocket connection is a
player or a spectating replica: on connect it receives the ruleset and the
full event log, and from then on every committed batch of events. Clients
send commands; rejected commands get an error reply and change nothing.
"""
import json
import logging
import sys
import threading

from flask import Flask, jsonify, request
from flask_sock import Sock

from dice import DiceRoller
from errors import InvalidAction
from event_codec import (
    MessageFormatError, command_from_dict, event_to_dict, ruleset_to_dict,
)
from game_coordinator import GameCoordinator
from rulesets import PRESETS, get_ruleset
from settings import DEFAULTS, load_settings, log_level, with_overrides

logger = logging.getLogger(__name__)

app = Flask(__name__)
sock = Sock(app)


def configure(coordinator):
    """Install the coordinator the relay serves."""
    app.config["COORDINATOR"] = coordinator
    return coordinator


def get_coordinator():
    """The configured coordinator, created on the default ruleset if missing."""
    coordinator = app.config.get("COORDINATOR")
    if coordinator is None:
        coordinator = configure(GameCoordinator(get_ruleset(DEFAULTS["ruleset"])))
    return coordinator


def game_snapshot(game):
    """Read-only view of a game for clients that don't replay the log."""
    return {
        "state": game.state.value,
        "round": game.round,
        "rounds": game.ruleset.rounds(),
        "player_in_turn": game.player_in_turn,
        "times_rolled": game.times_rolled,
        "rolls": game.ruleset.rolls,
        "roll": list(game.roll),
        "keep": list(game.keep),
        "rows": game.ruleset.row_names(),
        "players": [
            {"name": p.name, "score_sheet": list(p.score_sheet), "total": p.total}
            for p in game.players
        ],
        "scoreboard": [[total, name] for total, name in game.scoreboard()],
    }


def sync_message(ruleset, event_log):
    """Everything a new replica needs to rebuild the game."""
    return {
        "type": "sync",
        "ruleset": ruleset_to_dict(ruleset),
        "events": [event_to_dict(e) for e in event_log],
    }


def events_message(batch):
    return {"type": "events", "events": [event_to_dict(e) for e in batch]}


def _error(kind, message):
    return {"type": "error", "error": kind, "message": message}


@app.route("/")
def index():
    """Current game state as JSON."""
    return jsonify(game_snapshot(get_coordinator().game))


@app.route("/events")
def events():
    """Ruleset and full event log, for bootstrapping replicas over HTTP."""
    coordinator = get_coordinator()
    message = sync_message(coordinator.ruleset, coordinator.event_log)
    return jsonify({"ruleset": message["ruleset"], "events": message["events"]})


@sock.route("/ws")
def websocket(ws):
    """WebSocket handler — one player or replica per connection."""
    default_player = request.args.get("player", type=int)
    coordinator = get_coordinator()
    connected = True
    # Batches arrive on other connections' threads; one writer at a time
    send_lock = threading.Lock()

    def send(message):
        with send_lock:
            ws.send(json.dumps(message))

    def forward(batch):
        """Push a committed batch to this client."""
        nonlocal connected
        if not connected:
            return
        try:
            send(events_message(batch))
        except Exception:
            logger.warning("Send to client failed, dropping it", exc_info=True)
            connected = False

    def send_sync(event_log):
        send(sync_message(coordinator.ruleset, event_log))

    coordinator.subscribe(forward, on_history=send_sync)
    try:
        while connected:
            data = ws.receive()
            if data is None:
                break
            send(_handle_message(coordinator, data, default_player))
    except Exception:
        logger.error("WebSocket receive error", exc_info=True)
    finally:
        connected = False
        coordinator.unsubscribe(forward)


def _handle_message(coordinator, data, default_player=None):
    """Decode one client message and submit its command.

    Returns:
        Reply dict for the sender: {"type": "ok"} or an error.
    """
    try:
        message = json.loads(data)
    except json.JSONDecodeError:
        logger.warning("Invalid JSON from client: %s", data)
        return _error("bad_message", "message is not valid JSON")
    if not isinstance(message, dict):
        return _error("bad_message", "message must be an object")

    player = message.get("player", default_player)
    if not isinstance(player, int) or isinstance(player, bool):
        return _error("bad_message", "no player index given")

    try:
        command = command_from_dict(message.get("command"))
    except MessageFormatError as exc:
        logger.warning("Bad command from player %s: %s", player, exc)
        return _error("bad_message", str(exc))

    try:
        coordinator.submit(player, command)
    except InvalidAction as exc:
        return _error(exc.kind, str(exc))
    return {"type": "ok"}


def main(argv=None):
    """Entry point for the web relay."""
    import argparse
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Jatsi Web Relay")
    parser.add_argument("--host", help=f"Host to bind (default: {settings['host']})")
    parser.add_argument("--port", type=int, help=f"Port (default: {settings['port']})")
    parser.add_argument("--ruleset", choices=sorted(PRESETS),
                        help=f"Ruleset preset (default: {settings['ruleset']})")
    parser.add_argument("--seed", type=int, help="Seed the dice for a reproducible game")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args(argv)

    settings = with_overrides(settings, host=args.host, port=args.port, ruleset=args.ruleset)
    logging.basicConfig(level=logging.DEBUG if args.debug else log_level(settings))

    try:
        ruleset = get_ruleset(settings["ruleset"])
    except KeyError as exc:
        print(f"Error: {exc.args[0]}")
        sys.exit(1)
    configure(GameCoordinator(ruleset, dice_roller=DiceRoller(args.seed)))

    print(f"Starting Jatsi relay ({settings['ruleset']} rules) at http://{settings['host']}:{settings['port']}")
    app.run(host=settings["host"], port=settings["port"], debug=args.debug)


if __name__ == "__main__":
    main()
