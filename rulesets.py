"""Named ruleset presets.

Each preset is plain configuration; nothing in the engine depends on which
one is in play.
"""
from rules import (
    Bonus, Chance, FullHouse, Numbers, Ruleset, SetOf, Straight, TwoPairs, Yahtzee,
)


def basic_rules():
    """Classic five d6 Yahtzee."""
    return Ruleset(
        dice=(6, 6, 6, 6, 6),
        scorings=(
            Numbers(1), Numbers(2), Numbers(3), Numbers(4), Numbers(5), Numbers(6),
            Bonus(threshold=63, value=50),
            SetOf(3),
            SetOf(4),
            FullHouse(25),
            Straight(min_length=4, value=30),
            Straight(min_length=5, value=40),
            Chance(),
            Yahtzee(50),
        ),
        rolls=3,
    )


def yatzy_rules():
    """Scandinavian Yatzy: pairs, two pairs and a 50 point Yatzy."""
    return Ruleset(
        dice=(6, 6, 6, 6, 6),
        scorings=(
            Numbers(1), Numbers(2), Numbers(3), Numbers(4), Numbers(5), Numbers(6),
            Bonus(threshold=63, value=50),
            SetOf(2),
            TwoPairs(),
            SetOf(3),
            SetOf(4),
            Straight(min_length=4, value=15),
            Straight(min_length=5, value=20),
            FullHouse(25),
            Chance(),
            Yahtzee(50),
        ),
        rolls=3,
    )


def roleplayers_rules():
    """Mixed polyhedral dice: d4, d6, d8 and two d10."""
    # TODO: small straight should mean 1-5 or 2-6 and large 3-7 or 4-8 with these dice
    return Ruleset(
        dice=(4, 6, 8, 10, 10),
        scorings=(
            Numbers(1), Numbers(2), Numbers(3), Numbers(4), Numbers(5),
            Numbers(6), Numbers(7), Numbers(8), Numbers(9), Numbers(10),
            Bonus(threshold=105, value=50),
            SetOf(3),
            SetOf(4),
            FullHouse(25),
            Straight(min_length=4, value=30),
            Straight(min_length=5, value=40),
            Chance(),
            Yahtzee(50),
        ),
        rolls=3,
    )


def mini_rules():
    """Three-round game, handy for quick matches and tests."""
    return Ruleset(
        dice=(6, 6, 6, 6, 6),
        scorings=(
            Numbers(6),
            Bonus(threshold=24, value=50),
            FullHouse(25),
            Straight(min_length=4, value=30),
        ),
        rolls=3,
    )


PRESETS = {
    "basic": basic_rules,
    "yatzy": yatzy_rules,
    "roleplayers": roleplayers_rules,
    "mini": mini_rules,
}


def get_ruleset(name):
    """Return a fresh Ruleset for a preset name. Raises KeyError if unknown."""
    try:
        factory = PRESETS[name]
    except KeyError:
        raise KeyError(f"unknown ruleset {name!r}, choose from {', '.join(PRESETS)}") from None
    return factory()
