"""Dice rolling for arbitrary die shapes.

A die shape is its face count: a d6 is 6, a d10 is 10. Rolls are returned
in die order and never sorted, so index i of a roll always belongs to die i
and to keep-mask entry i.
"""
from __future__ import annotations

import random
from typing import Sequence


def roll_dice(shapes: Sequence[int], rng=random) -> list[int]:
    """Roll every die once, each uniform over 1..shape."""
    return [rng.randint(1, sides) for sides in shapes]


def roll_dice_keeping(shapes: Sequence[int], previous: Sequence[int],
                      keep: Sequence[bool], rng=random) -> list[int]:
    """Reroll the dice not marked in keep, keeping the previous value for the rest."""
    if not (len(shapes) == len(previous) == len(keep)):
        raise ValueError(
            f"shapes, previous roll and keep mask differ in length: "
            f"{len(shapes)}, {len(previous)}, {len(keep)}"
        )
    return [
        old if kept else rng.randint(1, sides)
        for sides, old, kept in zip(shapes, previous, keep)
    ]


class DiceRoller:
    """Random roll source with its own generator, seedable for reproducible games."""

    def __init__(self, seed=None) -> None:
        self._rng = random.Random(seed)

    def roll(self, shapes: Sequence[int]) -> list[int]:
        return roll_dice(shapes, rng=self._rng)

    def roll_keeping(self, shapes: Sequence[int], previous: Sequence[int],
                     keep: Sequence[bool]) -> list[int]:
        return roll_dice_keeping(shapes, previous, keep, rng=self._rng)


class ScriptedRoller:
    """Roll source that hands out pre-recorded rolls in order.

    Kept dice still come from the previous roll, so a script only needs to
    be right about the dice that are actually rerolled.
    """

    def __init__(self, rolls: Sequence[Sequence[int]]) -> None:
        self._rolls = [list(r) for r in rolls]
        self._next = 0

    @property
    def remaining(self) -> int:
        """Number of scripted rolls not yet handed out."""
        return len(self._rolls) - self._next

    def _take(self, shapes: Sequence[int]) -> list[int]:
        if self._next >= len(self._rolls):
            raise IndexError("scripted rolls exhausted")
        values = self._rolls[self._next]
        if len(values) != len(shapes):
            raise ValueError(f"scripted roll {values} does not match {len(shapes)} dice")
        self._next += 1
        return list(values)

    def roll(self, shapes: Sequence[int]) -> list[int]:
        return self._take(shapes)

    def roll_keeping(self, shapes: Sequence[int], previous: Sequence[int],
                     keep: Sequence[bool]) -> list[int]:
        values = self._take(shapes)
        return [old if kept else new for new, old, kept in zip(values, previous, keep)]
