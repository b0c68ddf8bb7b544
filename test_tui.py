"""
TUI Rendering Test Suite

Covers the pure text helpers behind the Textual widgets.

Sections:
    1. render_die — plain and held borders, blank faces
    2. render_dice — layout, hold keys, shape labels
    3. format_row — filled, unavailable, potential, accumulation
"""
from tui import MAX_HOLD_KEYS, format_row, render_dice, render_die

# ── 1. render_die ────────────────────────────────────────────────────────────


def test_plain_die():
    assert render_die(4) == ["┌─────┐", "│  4  │", "└─────┘"]


def test_held_die_has_double_border():
    lines = render_die(6, held=True)
    assert lines[0].startswith("╔")
    assert "6" in lines[1]


def test_blank_die_hides_value():
    assert "?" in render_die(3, blank=True)[1]
    assert "3" not in render_die(3, blank=True)[1]


def test_two_digit_face_fits():
    lines = render_die(12)
    assert len({len(line) for line in lines}) == 1


# ── 2. render_dice ───────────────────────────────────────────────────────────


def test_dice_rendered_side_by_side():
    text = render_dice([1, 2, 3], [False, False, False], [6, 6, 6])
    lines = text.split("\n")
    assert len(lines) == 4
    assert lines[1].count("│") == 6


def test_labels_show_keys_and_shapes():
    text = render_dice([1, 2], [False, True], [4, 20])
    labels = text.split("\n")[-1]
    assert "[1]d4" in labels
    assert "[2]d20H" in labels


def test_holds_hidden_before_first_roll():
    text = render_dice([1, 1], [True, True], [6, 6], rolled=False)
    assert "╔" not in text
    assert "H" not in text.split("\n")[-1]


def test_dice_beyond_hold_keys_have_no_key():
    count = MAX_HOLD_KEYS + 1
    labels = render_dice([1] * count, [False] * count, [6] * count).split("\n")[-1]
    assert f"[{MAX_HOLD_KEYS}]" in labels
    assert f"[{count}]" not in labels


# ── 3. format_row ────────────────────────────────────────────────────────────


def test_filled_row():
    assert format_row("Sixes", 18, None) == "  Sixes              18"


def test_unavailable_row_is_dimmed():
    row = format_row("Bonus", None, None)
    assert "[dim]" in row
    assert "—" in row


def test_potential_in_parentheses():
    row = format_row("Chance", None, 23)
    assert "( 23)" in row
    assert "[green]" in row


def test_zero_potential_not_highlighted():
    row = format_row("Yahtzee", None, 0)
    assert "(  0)" in row
    assert "[green]" not in row


def test_accumulating_row_shows_both():
    row = format_row("Yahtzee", 50, 50)
    assert "50 +50" in row


def test_selected_row_marked():
    row = format_row("Chance", None, 12, selected=True)
    assert row.startswith(">>")
    assert "[bold]" in row
