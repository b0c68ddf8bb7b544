"""JSON wire format for commands, events, event logs and rulesets.

Every message is a dict with a "type" key naming the variant plus that
variant's fields, e.g. {"type": "Place", "row": 3}. The event log is the
only serialized form of a game: replicas rebuild state by decoding it and
committing each event.
"""
from __future__ import annotations

import json

from game import (
    GameFinished, JoinGame, Place, PlayerMessage, PlayerTurn, Roll, RollResult,
    StartGame, ToggleHold,
)
from rules import (
    Bonus, Chance, FullHouse, JokerRule, Numbers, Ruleset, SetOf, Straight, TwoPairs, Yahtzee,
)


class MessageFormatError(ValueError):
    """Raised when a payload does not describe a known message."""


_COMMANDS = {
    "JoinGame": (JoinGame, ("name",)),
    "StartGame": (StartGame, ()),
    "ToggleHold": (ToggleHold, ("die",)),
    "Roll": (Roll, ()),
    "Place": (Place, ("row",)),
}

_SCORINGS = {
    "Numbers": (Numbers, ("face",)),
    "Bonus": (Bonus, ("threshold", "value")),
    "SetOf": (SetOf, ("count",)),
    "Straight": (Straight, ("min_length", "value")),
    "TwoPairs": (TwoPairs, ()),
    "FullHouse": (FullHouse, ("value",)),
    "Yahtzee": (Yahtzee, ("value",)),
    "Chance": (Chance, ()),
}

_FIELD_TYPES = {"name": str}


def _to_dict(obj, fields):
    data = {"type": type(obj).__name__}
    for name in fields:
        data[name] = getattr(obj, name)
    return data


def _from_dict(data, registry, what):
    if not isinstance(data, dict):
        raise MessageFormatError(f"{what} must be an object, got {type(data).__name__}")
    type_name = data.get("type")
    if type_name not in registry:
        raise MessageFormatError(f"unknown {what} type {type_name!r}")
    cls, fields = registry[type_name]
    kwargs = {}
    for name in fields:
        if name not in data:
            raise MessageFormatError(f"{type_name} is missing {name!r}")
        value = data[name]
        expected = _FIELD_TYPES.get(name, int)
        # bool is an int subclass, but never a valid index or count
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MessageFormatError(f"{type_name}.{name} must be {expected.__name__}, got {value!r}")
        kwargs[name] = value
    return cls(**kwargs)


# ── Commands ─────────────────────────────────────────────────────────────────

def command_to_dict(command):
    cls_name = type(command).__name__
    if cls_name not in _COMMANDS:
        raise MessageFormatError(f"not a command: {command!r}")
    return _to_dict(command, _COMMANDS[cls_name][1])


def command_from_dict(data):
    return _from_dict(data, _COMMANDS, "command")


# ── Events ───────────────────────────────────────────────────────────────────

def event_to_dict(event):
    """Encode an event as a JSON-safe dict."""
    if isinstance(event, PlayerMessage):
        return {"type": "PlayerMessage", "player": event.player,
                "command": command_to_dict(event.command)}
    elif isinstance(event, PlayerTurn):
        return {"type": "PlayerTurn", "player": event.player}
    elif isinstance(event, RollResult):
        return {"type": "RollResult", "values": list(event.values)}
    elif isinstance(event, GameFinished):
        return {"type": "GameFinished"}
    raise MessageFormatError(f"not an event: {event!r}")


def _int_field(data, name, type_name):
    value = data.get(name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise MessageFormatError(f"{type_name}.{name} must be int, got {value!r}")
    return value


def event_from_dict(data):
    """Decode an event dict produced by event_to_dict()."""
    if not isinstance(data, dict):
        raise MessageFormatError(f"event must be an object, got {type(data).__name__}")
    type_name = data.get("type")
    if type_name == "PlayerMessage":
        return PlayerMessage(_int_field(data, "player", type_name),
                             command_from_dict(data.get("command")))
    elif type_name == "PlayerTurn":
        return PlayerTurn(_int_field(data, "player", type_name))
    elif type_name == "RollResult":
        values = data.get("values")
        if not isinstance(values, list) or not all(
                isinstance(v, int) and not isinstance(v, bool) for v in values):
            raise MessageFormatError(f"RollResult.values must be a list of ints, got {values!r}")
        return RollResult(tuple(values))
    elif type_name == "GameFinished":
        return GameFinished()
    raise MessageFormatError(f"unknown event type {type_name!r}")


def dumps_log(events):
    """Serialize an event log to a JSON string."""
    return json.dumps([event_to_dict(e) for e in events])


def loads_log(text):
    """Parse a JSON event log. Raises MessageFormatError on bad input."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MessageFormatError(f"event log is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise MessageFormatError("event log must be a list")
    return [event_from_dict(item) for item in data]


# ── Rulesets ─────────────────────────────────────────────────────────────────

def ruleset_to_dict(ruleset):
    return {
        "dice": list(ruleset.dice),
        "scorings": [_to_dict(s, _SCORINGS[type(s).__name__][1]) for s in ruleset.scorings],
        "rolls": ruleset.rolls,
        "joker_rule": ruleset.joker_rule.value,
    }


def ruleset_from_dict(data):
    """Decode a ruleset dict. Invalid configurations raise MessageFormatError."""
    if not isinstance(data, dict):
        raise MessageFormatError("ruleset must be an object")
    try:
        return Ruleset(
            dice=tuple(data["dice"]),
            scorings=tuple(_from_dict(s, _SCORINGS, "scoring") for s in data["scorings"]),
            rolls=data.get("rolls", 3),
            joker_rule=JokerRule(data.get("joker_rule", JokerRule.NONE.value)),
        )
    except (KeyError, TypeError) as exc:
        raise MessageFormatError(f"malformed ruleset: {exc}") from exc
    except MessageFormatError:
        raise
    except ValueError as exc:
        raise MessageFormatError(f"invalid ruleset: {exc}") from exc
