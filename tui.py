#!/usr/bin/env python3
"""
Jatsi TUI — hot-seat terminal frontend using Textual.

All players share one keyboard. The app is a thin client of a
GameCoordinator: it renders the game's read-only fields and submits
commands for whoever is in turn.
"""
import argparse
import logging
import sys

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from dice import DiceRoller
from errors import InvalidAction
from game import JoinGame, Place, Roll, StartGame, State, ToggleHold
from game_coordinator import GameCoordinator
from rules import Bonus, category_name
from rulesets import PRESETS, get_ruleset
from settings import load_settings, log_level, with_overrides

logger = logging.getLogger(__name__)

MAX_HOLD_KEYS = 9


# ── Pure rendering helpers ───────────────────────────────────────────────────

def render_die(value, held=False, blank=False):
    """Box art for one die as 3 lines. Held dice get a double border."""
    label = "?" if blank else str(value)
    if held:
        return ["╔═════╗", f"║{label:^5}║", "╚═════╝"]
    return ["┌─────┐", f"│{label:^5}│", "└─────┘"]


def render_dice(roll, keep, shapes, rolled=True):
    """Render all dice side by side, with key and shape labels underneath."""
    boxes = [render_die(value, held and rolled, blank=not rolled)
             for value, held in zip(roll, keep)]
    lines = ["  ".join(box[row] for box in boxes) for row in range(3)]
    labels = []
    for i, (sides, held) in enumerate(zip(shapes, keep)):
        key = f"[{i + 1}]" if i < MAX_HOLD_KEYS else "   "
        tag = "H" if held and rolled else " "
        labels.append(f"{key}d{sides}{tag}".ljust(9))
    lines.append("".join(labels).rstrip())
    return "\n".join(lines)


def format_row(name, points, potential, selected=False):
    """One score sheet row: filled points, or the potential score in parentheses."""
    marker = ">>" if selected else "  "
    if points is not None and potential is None:
        return f"{marker}{name:<16} {points:>4}"
    if potential is None:
        return f"{marker}[dim]{name:<16}    —[/dim]"
    shown = f"({potential:>3})"
    if points is not None:
        shown = f"{points:>4} +{potential}"
    if selected:
        return f"{marker}[bold]{name:<16} {shown}[/bold]"
    elif potential > 0:
        return f"{marker}[green]{name:<16} {shown}[/green]"
    return f"{marker}{name:<16} {shown}"


# ── Widgets ──────────────────────────────────────────────────────────────────

class DiceDisplay(Static):
    """Renders the dice using box art."""

    def render(self):
        game = self.app.coordinator.game
        rolled = game.state in (State.REROLL, State.PLACE)
        return render_dice(game.roll, game.keep, game.ruleset.dice, rolled=rolled)


class StatusDisplay(Static):
    """Whose turn it is, rolls left, and the last rejection."""

    def render(self):
        app = self.app
        game = app.coordinator.game
        lines = []

        if game.state == State.END:
            lines.append("[bold]GAME OVER![/bold]")
        elif game.current_player is not None:
            lines.append(f"[bold]{game.current_player.name}'s turn[/bold]")
            if game.state == State.FIRST_ROLL:
                lines.append("Roll the dice!")
            else:
                lines.append(f"Rolls left: {game.ruleset.rolls - game.times_rolled}")

        if app.message:
            lines.append(f"[red]{app.message}[/red]")
        return "\n".join(lines)


class ScorecardDisplay(Static):
    """Every player's score sheet; potentials shown for the player in turn."""

    def render(self):
        app = self.app
        game = app.coordinator.game
        player = game.current_player
        if player is None:
            return ""
        potentials = game.potential_scores()

        lines = [f"[bold]{player.name}'s score sheet[/bold]"]
        for row, scoring in enumerate(game.ruleset.scorings):
            name = category_name(scoring)
            if isinstance(scoring, Bonus):
                name = f"{name} ({scoring.threshold}+)"
            lines.append(format_row(name, player.score_sheet[row], potentials[row],
                                    selected=(row == app.selected_row)))
        lines.append(f"[bold]  {'TOTAL':<16} {player.total:>4}[/bold]")

        if len(game.players) > 1:
            lines.append("")
            for total, name in game.scoreboard():
                lines.append(f"  {name:<16} {total:>4}")
        return "\n".join(lines)


class GameOverDisplay(Static):
    """Shows the final scoreboard."""

    def render(self):
        game = self.app.coordinator.game
        if game.state != State.END:
            return ""
        board = game.scoreboard()
        lines = ["", "[bold]═══ GAME OVER ═══[/bold]", ""]
        if board:
            lines.append(f"[bold]{board[0][1]} wins![/bold]")
            lines.append("")
        for total, name in board:
            lines.append(f"  {name}: {total}")
        lines.append("")
        lines.append("[dim]Press N for a new game[/dim]")
        return "\n".join(lines)


class JatsiApp(App):
    """Jatsi terminal UI application."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #game-area {
        layout: horizontal;
        height: 1fr;
    }

    #dice-panel {
        width: 60;
        padding: 1 2;
    }

    #scorecard-panel {
        width: 1fr;
        padding: 1 2;
    }

    #round-display {
        height: auto;
        padding: 0 2;
    }

    #dice-display, #status-display, #game-over-display {
        height: auto;
    }

    #status-display {
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("space", "roll", "Roll", show=True),
        *[Binding(str(i + 1), f"hold({i})", f"Hold {i + 1}", show=False) for i in range(MAX_HOLD_KEYS)],
        Binding("down", "move(1)", "Next row"),
        Binding("up", "move(-1)", "Prev row"),
        Binding("tab", "move(1)", "Next row", show=False),
        Binding("enter", "place", "Score", show=True),
        Binding("n", "new_game", "New game"),
        Binding("escape", "quit", "Quit"),
    ]

    def __init__(self, coordinator, names):
        super().__init__()
        self.coordinator = coordinator
        self.names = list(names)
        self.selected_row = 0
        self.message = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="round-display")
        with Horizontal(id="game-area"):
            with Vertical(id="dice-panel"):
                yield DiceDisplay(id="dice-display")
                yield StatusDisplay(id="status-display")
                yield GameOverDisplay(id="game-over-display")
            with Vertical(id="scorecard-panel"):
                yield ScorecardDisplay(id="scorecard-display")
        yield Footer()

    def on_mount(self):
        self.title = "Jatsi"
        self.action_new_game()

    def _refresh_display(self):
        """Refresh all display widgets."""
        self.query_one("#round-display", Static).update(self._round_text())
        for widget_id in ("#dice-display", "#status-display", "#scorecard-display", "#game-over-display"):
            self.query_one(widget_id).refresh()

    def _round_text(self):
        game = self.coordinator.game
        parts = []
        for i, player in enumerate(game.players):
            marker = "▸" if i == game.player_in_turn and game.state != State.END else " "
            parts.append(f"{marker}{player.name}:{player.total}")
        return f"Round {game.round}/{game.ruleset.rounds()} | " + "  ".join(parts)

    def _submit(self, command):
        """Submit a command for the player in turn, showing any rejection."""
        game = self.coordinator.game
        try:
            self.coordinator.submit(game.player_in_turn, command)
            self.message = ""
        except InvalidAction as exc:
            self.message = str(exc)
        self._refresh_display()

    # ── Actions ──────────────────────────────────────────────────────────

    def action_roll(self):
        self._submit(Roll())

    def action_hold(self, die):
        if die < len(self.coordinator.game.ruleset.dice):
            self._submit(ToggleHold(die))

    def action_move(self, direction):
        rows = len(self.coordinator.game.ruleset.scorings)
        self.selected_row = (self.selected_row + direction) % rows
        self._refresh_display()

    def action_place(self):
        self._submit(Place(self.selected_row))

    def action_new_game(self):
        self.coordinator.reset()
        for i, name in enumerate(self.names):
            self.coordinator.submit(i, JoinGame(name))
        self.coordinator.submit(0, StartGame())
        self.selected_row = 0
        self.message = ""
        self._refresh_display()


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Jatsi — hot-seat dice game in the terminal")
    parser.add_argument("--names", nargs="+", metavar="NAME", default=["Player 1"],
                        help="Player names, in turn order")
    parser.add_argument("--ruleset", choices=sorted(PRESETS), help="Ruleset preset")
    parser.add_argument("--seed", type=int, help="Seed the dice for a reproducible game")
    return parser.parse_args(argv)


def main(argv=None):
    """Entry point for the TUI."""
    args = parse_args(argv)
    settings = with_overrides(load_settings(), ruleset=args.ruleset)
    logging.basicConfig(level=log_level(settings), filename="jatsi.log")

    try:
        ruleset = get_ruleset(settings["ruleset"])
    except KeyError as exc:
        print(f"Error: {exc.args[0]}")
        sys.exit(1)

    coordinator = GameCoordinator(ruleset, dice_roller=DiceRoller(args.seed))
    app = JatsiApp(coordinator, args.names)
    app.run()


if __name__ == "__main__":
    main()
