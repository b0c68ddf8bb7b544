"""
Jatsi Game - the turn-based state machine

One authoritative instance (the leader) turns player commands into events
with prepare(); every instance, the leader included, changes state only by
feeding those events to commit(). Replaying a game's message_history into a
fresh Game with the same ruleset therefore reproduces the game exactly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Union

from dice import DiceRoller, ScriptedRoller
from errors import InvalidAction, NotYourTurn, OutOfBounds, WrongState
from rules import Ruleset, empty_score_sheet, sheet_total, update_score_sheet

logger = logging.getLogger(__name__)


class State(Enum):
    """Machine states of a game"""
    START = "start"
    FIRST_ROLL = "first_roll"
    REROLL = "reroll"
    PLACE = "place"
    END = "end"


# ── Commands (player intent) ─────────────────────────────────────────────────

@dataclass(frozen=True)
class JoinGame:
    name: str


@dataclass(frozen=True)
class StartGame:
    pass


@dataclass(frozen=True)
class ToggleHold:
    die: int


@dataclass(frozen=True)
class Roll:
    pass


@dataclass(frozen=True)
class Place:
    row: int


Command = Union[JoinGame, StartGame, ToggleHold, Roll, Place]


# ── Events (what the leader decided) ─────────────────────────────────────────

@dataclass(frozen=True)
class PlayerMessage:
    """Echo of an accepted command; always the first event of a batch."""
    player: int
    command: Command


@dataclass(frozen=True)
class PlayerTurn:
    player: int


@dataclass(frozen=True)
class RollResult:
    values: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class GameFinished:
    pass


Event = Union[PlayerMessage, PlayerTurn, RollResult, GameFinished]


@dataclass
class Player:
    name: str
    score_sheet: list[int | None]

    @property
    def total(self) -> int:
        return sheet_total(self.score_sheet)


@dataclass
class Game:
    """The game aggregate.

    dice_roller is the roll source consulted by prepare(); it is not game
    state and is ignored when games are compared.
    """
    ruleset: Ruleset
    message_history: list[Event] = field(default_factory=list)
    players: list[Player] = field(default_factory=list)
    state: State = State.START
    round: int = 0
    player_in_turn: int = 0
    times_rolled: int = 0
    roll: list[int] = field(default_factory=list)
    keep: list[bool] = field(default_factory=list)
    dice_roller: DiceRoller | ScriptedRoller | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        num_dice = len(self.ruleset.dice)
        if not self.roll:
            self.roll = [1] * num_dice
        if not self.keep:
            self.keep = [False] * num_dice
        if self.dice_roller is None:
            self.dice_roller = DiceRoller()

    @classmethod
    def replay(cls, ruleset: Ruleset, events: Sequence[Event],
               dice_roller: DiceRoller | ScriptedRoller | None = None) -> Game:
        """Rebuild a game by committing a recorded event log from the start."""
        game = cls(ruleset, dice_roller=dice_roller)
        for event in events:
            game.commit(event)
        return game

    # ── Read-only views ──────────────────────────────────────────────────

    @property
    def current_player(self) -> Player | None:
        """Player whose turn it is, or None before anyone has joined."""
        if self.player_in_turn < len(self.players):
            return self.players[self.player_in_turn]
        return None

    @property
    def is_finished(self) -> bool:
        return self.state == State.END

    def scoreboard(self) -> list[tuple[int, str]]:
        """(total, name) for every player, highest total first."""
        return sorted(((player.total, player.name) for player in self.players), reverse=True)

    def potential_scores(self) -> list[int | None]:
        """
        Points each row would gain from the current roll

        Returns:
            One entry per row: the points the current player would gain by
            placing there, or None if the row can't take the roll. All None
            when there is nothing to place.
        """
        player = self.current_player
        if player is None or self.state not in (State.REROLL, State.PLACE):
            return [None] * len(self.ruleset.scorings)

        potentials: list[int | None] = []
        for row, existing in enumerate(player.score_sheet):
            try:
                new_sheet = update_score_sheet(player.score_sheet, self.ruleset.scorings, row, self.roll)
            except InvalidAction:
                potentials.append(None)
                continue
            potentials.append(new_sheet[row] - (existing or 0))
        return potentials

    def is_legal(self, from_player: int, command: Command) -> bool:
        """Whether prepare() would accept the command right now."""
        try:
            self.validate(from_player, command)
        except InvalidAction:
            return False
        return True

    # ── Leader side ──────────────────────────────────────────────────────

    def validate(self, from_player: int, command: Command) -> None:
        """
        Check a command against the turn order and the current state

        Does not consult the dice roller, so rolls are only drawn for
        commands that are actually prepared.

        Raises:
            NotYourTurn: from_player is not in turn (joining during START is exempt)
            WrongState: the command is not legal in the current state
            OutOfBounds: the die or row index does not exist
            AlreadyOccupied, NotSelectable: the placement would be rejected
        """
        joining = self.state == State.START and isinstance(command, JoinGame)
        if from_player != self.player_in_turn and not joining:
            raise NotYourTurn()

        if isinstance(command, JoinGame):
            if self.state != State.START:
                raise WrongState("players can only join before the game starts")

        elif isinstance(command, StartGame):
            if self.state != State.START:
                raise WrongState("the game has already started")
            if not self.players:
                raise WrongState("cannot start a game without players")

        elif isinstance(command, ToggleHold):
            if self.state != State.REROLL:
                raise WrongState("dice can only be held between rolls")
            if not 0 <= command.die < len(self.ruleset.dice):
                raise OutOfBounds(f"die {command.die} does not exist")

        elif isinstance(command, Roll):
            if self.state not in (State.FIRST_ROLL, State.REROLL):
                raise WrongState("cannot roll now")

        elif isinstance(command, Place):
            if self.state not in (State.REROLL, State.PLACE):
                raise WrongState("nothing to place yet")
            # Dry run so a batch is never produced that commit would reject
            update_score_sheet(
                self.players[self.player_in_turn].score_sheet,
                self.ruleset.scorings, command.row, self.roll,
            )

        else:
            raise TypeError(f"not a command: {command!r}")

    def prepare(self, from_player: int, command: Command) -> list[Event]:
        """
        Validate a command and produce the events the game responds with

        No state is changed, so this is safe to call speculatively, though a
        Roll draws from the dice roller. Only the authoritative game's
        RollResult values are final; commit() each returned event to
        actually carry out the command.

        Args:
            from_player: Index of the player sending the command
            command: The command

        Returns:
            Ordered events, starting with the PlayerMessage echo

        Raises:
            InvalidAction: see validate()
        """
        self.validate(from_player, command)
        events: list[Event] = [PlayerMessage(from_player, command)]

        if isinstance(command, StartGame):
            events.append(PlayerTurn(self.player_in_turn))

        elif isinstance(command, Roll):
            if self.state == State.FIRST_ROLL:
                values = self.dice_roller.roll(self.ruleset.dice)
            else:
                values = self.dice_roller.roll_keeping(self.ruleset.dice, self.roll, self.keep)
            events.append(RollResult(tuple(values)))

        elif isinstance(command, Place):
            next_player = self.player_in_turn + 1
            if next_player < len(self.players):
                events.append(PlayerTurn(next_player))
            elif self.round + 1 <= self.ruleset.rounds():
                events.append(PlayerTurn(0))
            else:
                events.append(GameFinished())

        return events

    # ── Every instance ───────────────────────────────────────────────────

    def commit(self, event: Event) -> None:
        """
        Apply one event to the game state and append it to message_history

        This is the only method that mutates a game. Errors are raised
        before anything changes.

        Raises:
            OutOfBounds: the event refers to a die, player or row that doesn't exist
            AlreadyOccupied, NotSelectable: a placement the score sheet rejects
        """
        num_dice = len(self.ruleset.dice)

        if isinstance(event, PlayerMessage):
            command = event.command
            if isinstance(command, JoinGame):
                self.players.append(Player(command.name, empty_score_sheet(self.ruleset)))
            elif isinstance(command, StartGame):
                pass  # the following PlayerTurn starts the first turn
            elif isinstance(command, ToggleHold):
                if not 0 <= command.die < num_dice:
                    raise OutOfBounds(f"die {command.die} does not exist")
                self.keep[command.die] = not self.keep[command.die]
            elif isinstance(command, Roll):
                self.times_rolled += 1
            elif isinstance(command, Place):
                if self.player_in_turn >= len(self.players):
                    raise OutOfBounds(f"player {self.player_in_turn} does not exist")
                player = self.players[self.player_in_turn]
                player.score_sheet = update_score_sheet(
                    player.score_sheet, self.ruleset.scorings, command.row, self.roll,
                )
            else:
                raise TypeError(f"not a command: {command!r}")

        elif isinstance(event, PlayerTurn):
            if not 0 <= event.player < len(self.players):
                raise OutOfBounds(f"player {event.player} does not exist")
            self.times_rolled = 0
            self.keep = [False] * num_dice
            self.roll = [1] * num_dice
            self.player_in_turn = event.player
            self.state = State.FIRST_ROLL
            if self.player_in_turn == 0:
                self.round += 1

        elif isinstance(event, RollResult):
            if len(event.values) != num_dice:
                raise OutOfBounds(f"roll of {len(event.values)} dice, expected {num_dice}")
            self.roll = list(event.values)
            self.state = State.REROLL if self.times_rolled < self.ruleset.rolls else State.PLACE

        elif isinstance(event, GameFinished):
            self.state = State.END

        else:
            raise TypeError(f"not an event: {event!r}")

        self.message_history.append(event)
        logger.debug("committed %r (state=%s round=%d player=%d)",
                     event, self.state.value, self.round, self.player_in_turn)
