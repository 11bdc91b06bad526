"""Canonical Klondike game state."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from klondike.engine.cards import Card, RANKS, SUITS
from klondike.engine.errors import InvariantViolation

TABLEAU_COLUMNS = 7


def _empty_foundations() -> Dict[str, List[Card]]:
    return {suit: [] for suit in SUITS}


def _empty_tableau() -> List[List[Card]]:
    return [[] for _ in range(TABLEAU_COLUMNS)]


@dataclass
class GameState:
    stock: List[Card] = field(default_factory=list)
    waste: List[Card] = field(default_factory=list)
    foundations: Dict[str, List[Card]] = field(default_factory=_empty_foundations)
    tableau: List[List[Card]] = field(default_factory=_empty_tableau)
    score: int = 0
    recycle_count: int = 0
    elapsed_seconds: int = 0

    @classmethod
    def deal(cls, deck: List[Card]) -> "GameState":
        """Lay out ``deck``: column i gets i+1 cards with only the last face up.

        The remaining cards form the stock, face down, drawn from the end.
        """
        if len(deck) != len(SUITS) * len(RANKS):
            raise InvariantViolation(f"cannot deal a deck of {len(deck)} cards")
        cards = [c.copy() for c in deck]
        state = cls()
        pos = 0
        for col in range(TABLEAU_COLUMNS):
            for r in range(col + 1):
                c = cards[pos]
                c.face_up = (r == col)
                state.tableau[col].append(c)
                pos += 1
        state.stock = cards[pos:]
        for c in state.stock:
            c.face_up = False
        return state

    def clone(self) -> "GameState":
        """Structural copy: no list or card object is shared with ``self``."""
        return GameState(
            stock=[c.copy() for c in self.stock],
            waste=[c.copy() for c in self.waste],
            foundations={s: [c.copy() for c in pile] for s, pile in self.foundations.items()},
            tableau=[[c.copy() for c in pile] for pile in self.tableau],
            score=self.score,
            recycle_count=self.recycle_count,
            elapsed_seconds=self.elapsed_seconds,
        )

    def piles(self) -> Iterator[List[Card]]:
        yield self.stock
        yield self.waste
        for suit in SUITS:
            yield self.foundations[suit]
        yield from self.tableau

    def all_cards(self) -> Iterator[Card]:
        for pile in self.piles():
            yield from pile

    def is_won(self) -> bool:
        return all(len(self.foundations[s]) == len(RANKS) for s in SUITS)

    def verify(self) -> None:
        """Raise ``InvariantViolation`` unless every card is present exactly once."""
        if set(self.foundations) != set(SUITS) or len(self.tableau) != TABLEAU_COLUMNS:
            raise InvariantViolation("table layout is malformed")
        counts = Counter(c.id for c in self.all_cards())
        duplicated = sorted(cid for cid, n in counts.items() if n > 1)
        if duplicated:
            raise InvariantViolation(f"cards duplicated across piles: {', '.join(duplicated)}")
        missing = sorted(f"{r}-{s}" for s in SUITS for r in RANKS if f"{r}-{s}" not in counts)
        if missing:
            raise InvariantViolation(f"cards missing from the table: {', '.join(missing)}")
