"""
Jatsi Rules - scoring categories, rulesets and the score sheet

Pure logic with no I/O. Scoring categories are a closed set of immutable
variants; category_name() and calculate_score() dispatch over them.
update_score_sheet() applies one placement to a player's sheet and fills
in the bonus row when it becomes due.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

from errors import AlreadyOccupied, NotSelectable, OutOfBounds


# ── Scoring categories ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Numbers:
    """Sum of the dice showing `face`."""
    face: int


@dataclass(frozen=True)
class Bonus:
    """Awarded automatically once the rows above it reach `threshold`."""
    threshold: int
    value: int


@dataclass(frozen=True)
class SetOf:
    """`count` dice of the same value, scored as value * count."""
    count: int


@dataclass(frozen=True)
class Straight:
    """A run of at least `min_length` consecutive values."""
    min_length: int
    value: int


@dataclass(frozen=True)
class TwoPairs:
    """Two pairs of different values, scored as the sum of the four dice."""


@dataclass(frozen=True)
class FullHouse:
    """Three of one value and two of another."""
    value: int


@dataclass(frozen=True)
class Yahtzee:
    """All dice equal."""
    value: int


@dataclass(frozen=True)
class Chance:
    """Sum of all dice."""


Scoring = Union[Numbers, Bonus, SetOf, Straight, TwoPairs, FullHouse, Yahtzee, Chance]

SCORING_TYPES = (Numbers, Bonus, SetOf, Straight, TwoPairs, FullHouse, Yahtzee, Chance)

_NUMBER_NAMES = {1: "Ones", 2: "Twos", 3: "Threes", 4: "Fours", 5: "Fives", 6: "Sixes"}


class JokerRule(Enum):
    """Joker rule mode of a ruleset.

    Carried through configuration and the wire format, but no mode changes
    how a roll is scored yet.
    """
    NONE = "none"
    FREE_CHOICE = "free_choice"
    FORCED = "forced"


def category_name(scoring: Scoring) -> str:
    """Display name of a scoring category."""
    if isinstance(scoring, Numbers):
        return _NUMBER_NAMES.get(scoring.face, f"{scoring.face}'s")
    elif isinstance(scoring, Bonus):
        return "Bonus"
    elif isinstance(scoring, SetOf):
        return "Pair" if scoring.count == 2 else f"Set of {scoring.count}"
    elif isinstance(scoring, Straight):
        if scoring.min_length == 4:
            return "Small Straight"
        elif scoring.min_length == 5:
            return "Large Straight"
        return f"Straight of {scoring.min_length}"
    elif isinstance(scoring, TwoPairs):
        return "Two Pairs"
    elif isinstance(scoring, FullHouse):
        return "Full House"
    elif isinstance(scoring, Yahtzee):
        return "Yahtzee"
    elif isinstance(scoring, Chance):
        return "Chance"
    raise TypeError(f"not a scoring category: {scoring!r}")


# ── Roll predicates ──────────────────────────────────────────────────────────

def longest_run(roll: Sequence[int]) -> int:
    """
    Length of the longest run of consecutive values in a roll

    Duplicates are ignored, so 6-5-4-4-3 has a run of 4.

    Args:
        roll: Die values in any order

    Returns:
        Length of the longest run, 0 for an empty roll
    """
    values = sorted(set(roll), reverse=True)
    best = 0
    length = 0
    previous = None
    for value in values:
        if previous is not None and value == previous - 1:
            length += 1
        else:
            length = 1
        best = max(best, length)
        previous = value
    return best


def highest_set(roll: Sequence[int], count: int) -> int | None:
    """
    Largest value that appears at least `count` times

    The roll is sorted descending first, so the answer does not depend on
    the order the dice were rolled in.

    Args:
        roll: Die values in any order
        count: Required number of equal dice

    Returns:
        The value, or None if no value appears often enough
    """
    counts = Counter(roll)
    for value in sorted(counts, reverse=True):
        if counts[value] >= count:
            return value
    return None


def is_full_house(roll: Sequence[int]) -> bool:
    """Five dice that split into a triple and a pair, in either order."""
    if len(roll) != 5:
        return False
    a, b, c, d, e = sorted(roll, reverse=True)
    return (a == b and c == d == e) or (a == b == c and d == e)


def is_yahtzee(roll: Sequence[int]) -> bool:
    """All dice show the same value."""
    return len(roll) > 0 and len(set(roll)) == 1


def calculate_score(scoring: Scoring, roll: Sequence[int]) -> int:
    """
    Calculate the score a roll earns in a category

    Args:
        scoring: Scoring category
        roll: Die values in any order

    TwoPairs needs pairs of two different values, so four of a kind alone
    scores 0 while a full house counts.

    Returns:
        Points for the category (0 if the roll doesn't qualify). Bonus rows
        always score 0 here; update_score_sheet() awards them.
    """
    if isinstance(scoring, Numbers):
        return sum(value for value in roll if value == scoring.face)

    elif isinstance(scoring, Bonus):
        return 0

    elif isinstance(scoring, SetOf):
        value = highest_set(roll, scoring.count)
        return value * scoring.count if value is not None else 0

    elif isinstance(scoring, Straight):
        return scoring.value if longest_run(roll) >= scoring.min_length else 0

    elif isinstance(scoring, TwoPairs):
        counts = Counter(roll)
        pairs = sorted((value for value, n in counts.items() if n >= 2), reverse=True)
        if len(pairs) < 2:
            return 0
        return 2 * pairs[0] + 2 * pairs[1]

    elif isinstance(scoring, FullHouse):
        return scoring.value if is_full_house(roll) else 0

    elif isinstance(scoring, Yahtzee):
        return scoring.value if is_yahtzee(roll) else 0

    elif isinstance(scoring, Chance):
        return sum(roll)

    raise TypeError(f"not a scoring category: {scoring!r}")


# ── Ruleset ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Ruleset:
    """Immutable game configuration.

    dice holds one face count per die, scorings the rows of the score sheet
    in order, rolls the number of rolls allowed per turn.
    """
    dice: tuple[int, ...]
    scorings: tuple[Scoring, ...]
    rolls: int = 3
    joker_rule: JokerRule = JokerRule.NONE

    def __post_init__(self) -> None:
        # Accept lists, store tuples so the ruleset stays hashable
        object.__setattr__(self, "dice", tuple(self.dice))
        object.__setattr__(self, "scorings", tuple(self.scorings))
        if not self.dice:
            raise ValueError("a ruleset needs at least one die")
        for sides in self.dice:
            # bool is an int subclass, but never a face count
            if not isinstance(sides, int) or isinstance(sides, bool):
                raise ValueError(f"invalid die shape {sides!r}, must be a whole number of faces")
            if sides < 1:
                raise ValueError(f"invalid die shape {sides}, must have at least 1 face")
        if self.rolls < 1:
            raise ValueError(f"invalid rolls per turn {self.rolls}, must be at least 1")
        for scoring in self.scorings:
            if not isinstance(scoring, SCORING_TYPES):
                raise ValueError(f"not a scoring category: {scoring!r}")

    def rounds(self) -> int:
        """Number of rounds in a game: one per selectable row."""
        return sum(1 for s in self.scorings if not isinstance(s, Bonus))

    def bonus_index(self) -> int | None:
        """Index of the bonus row, or None unless there is exactly one."""
        indices = [i for i, s in enumerate(self.scorings) if isinstance(s, Bonus)]
        return indices[0] if len(indices) == 1 else None

    def row_names(self) -> list[str]:
        return [category_name(s) for s in self.scorings]


# ── Score sheet ──────────────────────────────────────────────────────────────

def empty_score_sheet(ruleset: Ruleset) -> list[int | None]:
    """A score sheet with every row open."""
    return [None] * len(ruleset.scorings)


def sheet_total(sheet: Sequence[int | None]) -> int:
    """Sum of all filled rows; open rows count as 0."""
    return sum(points for points in sheet if points is not None)


def _apply_bonus(sheet: list[int | None], scorings: Sequence[Scoring]) -> None:
    """Fill the bonus row in place once it is due."""
    indices = [i for i, s in enumerate(scorings) if isinstance(s, Bonus)]
    if len(indices) != 1:
        return
    bonus_index = indices[0]
    if bonus_index >= len(sheet) or sheet[bonus_index] is not None:
        return

    bonus = scorings[bonus_index]
    affecting = sheet[:bonus_index]
    reached = sheet_total(affecting) >= bonus.threshold
    if reached or all(points is not None for points in affecting):
        sheet[bonus_index] = bonus.value if reached else 0


def update_score_sheet(sheet: Sequence[int | None], scorings: Sequence[Scoring],
                       selected_row: int, roll: Sequence[int]) -> list[int | None]:
    """
    Place a roll into a row of a score sheet

    A Yahtzee row that already holds a nonzero score accumulates a further
    nonzero Yahtzee instead of rejecting it. After placement the bonus row
    is filled if it has become due.

    Args:
        sheet: Current score sheet, one slot per scoring category
        scorings: Scoring categories of the ruleset
        selected_row: Row to place the roll in
        roll: Die values

    Returns:
        New score sheet. The input sheet is never modified.

    Raises:
        OutOfBounds: selected_row is not a row of both scorings and sheet
        NotSelectable: selected_row is the bonus row
        AlreadyOccupied: the row is filled and no Yahtzee accumulates
    """
    if not (0 <= selected_row < len(scorings) and selected_row < len(sheet)):
        raise OutOfBounds(f"row {selected_row} does not exist")

    scoring = scorings[selected_row]
    if isinstance(scoring, Bonus):
        raise NotSelectable()

    points = calculate_score(scoring, roll)
    existing = sheet[selected_row]
    new_sheet = list(sheet)

    if existing is not None:
        if isinstance(scoring, Yahtzee) and existing != 0 and points != 0:
            new_sheet[selected_row] = existing + points
        else:
            raise AlreadyOccupied(f"row {selected_row} ({category_name(scoring)}) is already filled")
    else:
        new_sheet[selected_row] = points

    _apply_bonus(new_sheet, scorings)
    return new_sheet
