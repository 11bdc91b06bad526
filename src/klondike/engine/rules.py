"""Legality checks for Klondike moves.

Every function here is a pure predicate over cards; none of them touches a
pile or the engine.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from klondike.engine.cards import Card, rank_index


def can_stack_on_tableau(card: Card, top: Optional[Card]) -> bool:
    """Can ``card`` be placed on a tableau column whose top card is ``top``?"""

    if top is None:
        return card.rank == "K"
    return card.color != top.color and rank_index(card.rank) + 1 == rank_index(top.rank)


def can_place_on_foundation(card: Card, top: Optional[Card], foundation_suit: str) -> bool:
    """Can ``card`` go on the ``foundation_suit`` foundation showing ``top``?"""

    if card.suit != foundation_suit:
        return False
    if top is None:
        return card.rank == "A"
    return rank_index(card.rank) == rank_index(top.rank) + 1


def is_movable_run(cards: Sequence[Card]) -> bool:
    """True when ``cards`` are all face-up and build down in alternating colors."""

    if not cards:
        return False
    if not all(c.face_up for c in cards):
        return False
    return all(can_stack_on_tableau(upper, lower) for lower, upper in zip(cards, cards[1:]))


def movable_run(pile: Sequence[Card], depth: int) -> Optional[List[Card]]:
    """Return the suffix of ``pile`` starting at ``depth`` if it may move as a unit."""

    if depth < 0 or depth >= len(pile):
        return None
    run = list(pile[depth:])
    return run if is_movable_run(run) else None
