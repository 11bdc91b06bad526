# cards.py - card identity and deck construction
import random
from typing import List, Optional

SUITS = ("hearts", "diamonds", "clubs", "spades")
RED_SUITS = ("hearts", "diamonds")
RANKS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
SUIT_SYMBOLS = {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}

_RANK_INDEX = {r: i for i, r in enumerate(RANKS)}


def rank_index(rank: str) -> int:
    """Position of a rank in A..K (0..12)."""
    return _RANK_INDEX[rank]


def suit_color(suit: str) -> str:
    return "red" if suit in RED_SUITS else "black"


class Card:
    __slots__ = ("rank", "suit", "face_up")

    def __init__(self, rank, suit, face_up=False):
        if rank not in _RANK_INDEX or suit not in SUITS:
            raise ValueError(f"not a card: {rank!r} of {suit!r}")
        self.rank = rank
        self.suit = suit
        self.face_up = face_up

    @property
    def id(self) -> str:
        return f"{self.rank}-{self.suit}"

    @property
    def color(self) -> str:
        return suit_color(self.suit)

    def copy(self) -> "Card":
        return Card(self.rank, self.suit, self.face_up)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return NotImplemented
        return (self.rank, self.suit, self.face_up) == (other.rank, other.suit, other.face_up)

    def __repr__(self):
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}{'↑' if self.face_up else '↓'}"


def ordered_deck() -> List[Card]:
    """All 52 cards, suit by suit, A..K, face down."""
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


def create_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """Return a freshly shuffled 52-card deck.

    ``rng`` is any ``random.Random``; pass a seeded one for reproducible deals.
    ``shuffle`` is Fisher-Yates, so every ordering is equally likely.
    """
    deck = ordered_deck()
    (rng or random).shuffle(deck)
    return deck
