"""
GameCoordinator — leader-side owner of the authoritative game.

The core Game does no locking. The coordinator processes one command at a
time: prepare, commit every resulting event, then hand the batch to every
subscriber (websocket clients, local replicas, front ends) before the next
command is accepted. Replicas rebuild the same state by committing exactly
those batches.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

from errors import InvalidAction
from game import Command, Event, Game, State
from rules import Ruleset

logger = logging.getLogger(__name__)

Listener = Callable[[list[Event]], None]


class GameCoordinator:
    """Serializes player commands against one authoritative Game.

    Front ends read coordinator.game for display and call submit() in
    response to player input.
    """

    def __init__(self, ruleset: Ruleset, dice_roller=None) -> None:
        """Initialize the coordinator.

        Args:
            ruleset: Rules for the game.
            dice_roller: Optional roll source (DiceRoller or ScriptedRoller).
                         None uses a fresh unseeded DiceRoller.
        """
        self.game = Game(ruleset, dice_roller=dice_roller)
        # Reentrant so listeners may read the coordinator while being notified
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    # ── Properties ────────────────────────────────────────────────────────

    @property
    def ruleset(self) -> Ruleset:
        return self.game.ruleset

    @property
    def event_log(self) -> list[Event]:
        """Copy of every event committed so far."""
        with self._lock:
            return list(self.game.message_history)

    @property
    def game_over(self) -> bool:
        return self.game.state == State.END

    # ── Subscribers ───────────────────────────────────────────────────────

    def subscribe(self, listener: Listener,
                  on_history: Callable[[list[Event]], None] | None = None) -> None:
        """Call listener with every committed batch from now on.

        on_history, if given, first receives the event log so far. Both happen
        under the lock, so no batch is missed or seen twice in between.
        """
        with self._lock:
            if on_history is not None:
                on_history(list(self.game.message_history))
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    # ── Actions ───────────────────────────────────────────────────────────

    def submit(self, player_index: int, command: Command) -> list[Event]:
        """Prepare and commit a command, then notify subscribers.

        Returns:
            The committed events.

        Raises:
            InvalidAction: the command was rejected; nothing was committed.
        """
        with self._lock:
            try:
                events = self.game.prepare(player_index, command)
            except InvalidAction as exc:
                logger.warning("Rejected %r from player %d: %s", command, player_index, exc)
                raise
            for event in events:
                self.game.commit(event)
            logger.info("Player %d: %r -> %d event(s)", player_index, command, len(events))
            # Notify under the lock so every subscriber sees batches in commit order
            for listener in list(self._listeners):
                try:
                    listener(events)
                except Exception:
                    # The batch is committed; the remaining listeners still need it
                    logger.error("Listener %r failed on %d event(s)", listener, len(events),
                                 exc_info=True)
        return events

    def can_submit(self, player_index: int, command: Command) -> bool:
        """Whether submit() would accept the command right now."""
        with self._lock:
            return self.game.is_legal(player_index, command)

    def reset(self, dice_roller=None) -> None:
        """Start over with an empty game on the same ruleset."""
        with self._lock:
            roller = dice_roller if dice_roller is not None else self.game.dice_roller
            self.game = Game(self.game.ruleset, dice_roller=roller)

    def replica(self) -> Replica:
        """A replica already caught up with the current event log."""
        replica = Replica(self.ruleset)
        replica.sync(self.event_log)
        return replica


class Replica:
    """Follower copy of a game, built only from the leader's events."""

    def __init__(self, ruleset: Ruleset) -> None:
        self.game = Game(ruleset)

    def apply(self, events: Sequence[Event]) -> None:
        """Commit a batch of events in order."""
        for event in events:
            self.game.commit(event)

    def sync(self, event_log: Sequence[Event]) -> int:
        """Commit the part of a full event log not seen yet.

        Returns:
            Number of events applied.
        """
        seen = len(self.game.message_history)
        if list(event_log[:seen]) != self.game.message_history:
            raise ValueError("event log diverges from this replica's history")
        missing = list(event_log[seen:])
        self.apply(missing)
        return len(missing)

    __call__ = apply
