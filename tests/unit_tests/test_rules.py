import pytest

from klondike.engine.rules import (
    can_place_on_foundation,
    can_stack_on_tableau,
    is_movable_run,
    movable_run,
)

from conftest import card


@pytest.mark.parametrize(
    "moving, top, expected",
    [
        ("5-spades", "6-hearts", True),
        ("5-clubs", "6-diamonds", True),
        ("5-spades", "6-clubs", False),   # same color
        ("5-hearts", "6-diamonds", False),
        ("4-spades", "6-hearts", False),  # skips a rank
        ("7-spades", "6-hearts", False),  # wrong direction
        ("K-clubs", None, True),
        ("Q-hearts", None, False),
        ("Q-hearts", "K-spades", True),
        ("A-hearts", "2-clubs", True),
    ],
)
def test_can_stack_on_tableau(moving, top, expected):
    assert can_stack_on_tableau(card(moving), card(top) if top else None) is expected


@pytest.mark.parametrize(
    "moving, top, suit, expected",
    [
        ("A-hearts", None, "hearts", True),
        ("2-hearts", None, "hearts", False),
        ("2-hearts", "A-hearts", "hearts", True),
        ("3-hearts", "A-hearts", "hearts", False),
        ("A-spades", None, "hearts", False),
        ("2-diamonds", "A-hearts", "hearts", False),
        ("K-clubs", "Q-clubs", "clubs", True),
    ],
)
def test_can_place_on_foundation(moving, top, suit, expected):
    assert can_place_on_foundation(card(moving), card(top) if top else None, suit) is expected


def test_movable_run_requires_alternating_descent():
    assert is_movable_run([card("9-hearts"), card("8-clubs"), card("7-diamonds")])
    assert not is_movable_run([card("9-hearts"), card("8-hearts")])
    assert not is_movable_run([card("9-hearts"), card("7-clubs")])
    assert not is_movable_run([])


def test_movable_run_rejects_face_down_cards():
    assert not is_movable_run([card("#9-hearts"), card("8-clubs")])


def test_movable_run_takes_suffix_from_depth():
    pile = [card("#K-spades"), card("9-hearts"), card("8-clubs"), card("7-diamonds")]
    assert [c.id for c in movable_run(pile, 1)] == ["9-hearts", "8-clubs", "7-diamonds"]
    assert [c.id for c in movable_run(pile, 3)] == ["7-diamonds"]
    assert movable_run(pile, 0) is None
    assert movable_run(pile, 4) is None

    broken = [card("9-hearts"), card("5-clubs"), card("4-hearts")]
    assert movable_run(broken, 0) is None
    assert movable_run(broken, 1) is not None
