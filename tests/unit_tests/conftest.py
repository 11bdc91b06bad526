import importlib
import random

import pytest

from klondike.engine.cards import RANKS, SUITS, Card
from klondike.engine.game import GameEngine
from klondike.engine.state import GameState


def card(code: str) -> Card:
    """``"5-spades"`` is face-up, ``"#5-spades"`` face-down."""
    face_up = not code.startswith("#")
    rank, suit = code.lstrip("#").split("-")
    return Card(rank, suit, face_up)


def build_state(tableau=(), waste=(), foundations=None, stock=None, **counters) -> GameState:
    """Lay out a table from card codes; every unplaced card goes face-down to the stock."""
    state = GameState(**counters)
    for i, column in enumerate(tableau):
        state.tableau[i] = [card(s) for s in column]
    state.waste = [card(s) for s in waste]
    for suit, top in (foundations or {}).items():
        upto = RANKS.index(top) + 1
        state.foundations[suit] = [Card(r, suit, True) for r in RANKS[:upto]]
    placed = {c.id for c in state.all_cards()}
    if stock is not None:
        state.stock = [card(s) for s in stock]
    else:
        state.stock = [Card(r, s) for s in SUITS for r in RANKS if f"{r}-{s}" not in placed]
    return state


@pytest.fixture
def engine():
    eng = GameEngine(rng=random.Random(1234))
    eng.init()
    return eng


@pytest.fixture
def table():
    """Return a factory that puts an engine in front of a hand-built state."""

    def _make(state: GameState) -> GameEngine:
        eng = GameEngine(rng=random.Random(99))
        eng.load(state)
        return eng

    return _make


@pytest.fixture
def headless_pygame(monkeypatch):
    """Dummy SDL drivers and stand-in fonts so scenes can draw without a display."""
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")

    pygame = importlib.import_module("pygame")

    class DummyFont:
        def __init__(self, size):
            self._size = max(1, int(size) if size else 1)

        def render(self, text, *_, **__):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            height = max(1, self._size)
            return pygame.Surface((width, height), pygame.SRCALPHA)

        def size(self, text):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            return width, max(1, self._size)

        def get_height(self):
            return max(1, self._size)

    def _make_font(*args, size=None, **kwargs):
        if size is None:
            size = args[1] if len(args) > 1 else None
        return DummyFont(size or 24)

    monkeypatch.setattr(pygame.font, "SysFont", _make_font, raising=False)
    monkeypatch.setattr(pygame.font, "Font", _make_font, raising=False)
    monkeypatch.setattr(pygame.font, "get_default_font", lambda: "dummy", raising=False)
    monkeypatch.setattr(pygame.mouse, "get_pos", lambda: (0, 0))

    from klondike import common as C

    monkeypatch.setattr(C, "SCREEN_W", 1024)
    monkeypatch.setattr(C, "SCREEN_H", 768)
    C.apply_card_settings(size_name="Medium", back_color="Blue")
    C.setup_fonts()
    return pygame
