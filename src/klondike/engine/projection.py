"""Read-only view of the table handed to renderers after every command."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import AbstractSet, Mapping, Optional, Tuple

from klondike.engine import scoring
from klondike.engine.cards import Card, SUITS
from klondike.engine.state import GameState

WASTE_FAN = 3


@dataclass(frozen=True)
class CardView:
    id: str
    rank: str
    suit: str
    color: str
    face_up: bool
    just_revealed: bool = False


@dataclass(frozen=True)
class RenderSnapshot:
    tableau: Tuple[Tuple[CardView, ...], ...]
    stock_size: int
    waste: Tuple[CardView, ...]
    waste_size: int
    foundations: Mapping[str, Optional[CardView]]
    foundation_sizes: Mapping[str, int]
    score: int
    time: str
    phase: str
    can_undo: bool
    busy: bool


def card_view(card: Card, revealed: AbstractSet[str] = frozenset()) -> CardView:
    return CardView(card.id, card.rank, card.suit, card.color, card.face_up, card.id in revealed)


def build_snapshot(
    state: GameState,
    *,
    phase: str,
    can_undo: bool,
    busy: bool,
    revealed: AbstractSet[str] = frozenset(),
) -> RenderSnapshot:
    """Project ``state`` into plain immutable values.

    Only the last ``WASTE_FAN`` waste cards and the top of each foundation are
    included; the stock contributes its size alone.
    """
    projection = scoring.project(state)
    return RenderSnapshot(
        tableau=tuple(tuple(card_view(c, revealed) for c in pile) for pile in state.tableau),
        stock_size=len(state.stock),
        waste=tuple(card_view(c, revealed) for c in state.waste[-WASTE_FAN:]),
        waste_size=len(state.waste),
        foundations=MappingProxyType({
            s: card_view(state.foundations[s][-1]) if state.foundations[s] else None for s in SUITS
        }),
        foundation_sizes=MappingProxyType({s: len(state.foundations[s]) for s in SUITS}),
        score=projection.display_score,
        time=projection.display_time,
        phase=phase,
        can_undo=can_undo,
        busy=busy,
    )
