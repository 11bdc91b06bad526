"""Klondike game engine.

``GameEngine`` owns the canonical ``GameState`` and is the only thing that
mutates it. Callers speak to it through a small command surface:

- ``init`` deals a new game, ``restart`` re-deals the same layout
- ``draw`` turns a stock card (or recycles the waste), ``move`` relocates cards
- ``undo`` restores the state saved before the last command
- ``tick`` adds one second of play time

Rejected commands return ``False`` and leave the table untouched. After each
accepted command every subscribed listener receives a ``RenderSnapshot``.

The engine never schedules anything itself. The caller drives ``tick`` from
its clock and ends the post-draw busy window with ``release_busy``.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple, Union

from klondike.engine import rules, scoring
from klondike.engine.cards import SUITS, create_deck
from klondike.engine.errors import InvariantViolation
from klondike.engine.history import HistoryManager
from klondike.engine.projection import RenderSnapshot, build_snapshot
from klondike.engine.state import TABLEAU_COLUMNS, GameState

logger = logging.getLogger(__name__)

Listener = Callable[[RenderSnapshot], None]


class GamePhase(str, enum.Enum):
    DEALING = "dealing"
    PLAYING = "playing"
    WON = "won"


@dataclass(frozen=True)
class MoveRequest:
    """A proposed transfer of the card at ``depth`` (and those above it).

    ``source`` is ``"waste"`` or ``"tableau:<i>"``; ``target`` is
    ``"tableau:<i>"`` or ``"foundation:<suit>"``. A ``depth`` of ``None``
    means the top card of the source pile.
    """

    source: str
    target: str
    depth: Optional[int] = None


def parse_location(location: str) -> Tuple[str, Union[int, str, None]]:
    """Split ``"tableau:3"`` into ``("tableau", 3)`` and validate it."""

    kind, sep, key = str(location).partition(":")
    if kind in ("waste", "stock") and not sep:
        return kind, None
    if kind == "tableau" and key.isdigit() and int(key) < TABLEAU_COLUMNS:
        return kind, int(key)
    if kind == "foundation" and key in SUITS:
        return kind, key
    raise InvariantViolation(f"unknown pile location {location!r}")


class GameEngine:
    def __init__(self, rng: Optional[random.Random] = None, *, check_invariants: bool = __debug__):
        self.rng = rng
        self.check_invariants = check_invariants
        self.history = HistoryManager()
        self._state = GameState()
        self._initial: Optional[GameState] = None
        self._phase = GamePhase.DEALING
        self._busy = False
        self._revealed: Set[str] = set()
        self._listeners: List[Listener] = []

    # ---------- Queries ----------
    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def state(self) -> GameState:
        """The live state. Treat it as read-only; use ``clone()`` to keep a copy."""
        return self._state

    def is_busy(self) -> bool:
        return self._busy

    def can_undo(self) -> bool:
        return self._phase is GamePhase.PLAYING and self.history.can_undo()

    def snapshot(self) -> RenderSnapshot:
        return build_snapshot(
            self._state,
            phase=self._phase.value,
            can_undo=self.can_undo(),
            busy=self._busy,
            revealed=self._revealed,
        )

    def locate(self, card_id: str) -> Tuple[str, int]:
        """Return ``(location, depth)`` of a card on the table."""
        s = self._state
        named = [("stock", s.stock), ("waste", s.waste)]
        named += [(f"foundation:{suit}", s.foundations[suit]) for suit in SUITS]
        named += [(f"tableau:{i}", pile) for i, pile in enumerate(s.tableau)]
        for location, pile in named:
            for depth, c in enumerate(pile):
                if c.id == card_id:
                    return location, depth
        raise InvariantViolation(f"card {card_id!r} is not on the table")

    # ---------- Listeners ----------
    def subscribe(self, listener: Listener):
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---------- Commands ----------
    def init(self):
        self._phase = GamePhase.DEALING
        self._begin_command()
        self._state = GameState.deal(create_deck(self.rng))
        self._initial = self._state.clone()
        self.history.clear()
        self._busy = False
        self._phase = GamePhase.PLAYING
        logger.info("new game dealt")
        self._commit()

    def restart(self) -> bool:
        """Re-deal the layout of the current game from the beginning."""
        if self._phase is not GamePhase.PLAYING or self._initial is None:
            return False
        self._begin_command()
        self._state = self._initial.clone()
        self.history.clear()
        self._busy = False
        logger.info("game restarted")
        self._commit()
        return True

    def load(self, state: GameState):
        """Start playing from a prepared ``state`` with an empty history."""
        state.verify()
        self._begin_command()
        self._state = state
        self._initial = state.clone()
        self.history.clear()
        self._busy = False
        self._phase = GamePhase.WON if state.is_won() else GamePhase.PLAYING
        logger.info("game loaded")
        self._commit()

    def draw(self) -> bool:
        if self._phase is not GamePhase.PLAYING:
            return False
        if self._busy:
            logger.debug("draw dropped while busy")
            return False
        s = self._state
        if not s.stock and not s.waste:
            return False
        self._begin_command()
        self.history.save(s)
        if s.stock:
            c = s.stock.pop()
            c.face_up = True
            s.waste.append(c)
            self._revealed.add(c.id)
        else:
            s.stock = list(reversed(s.waste))
            for c in s.stock:
                c.face_up = False
            s.waste = []
            s.recycle_count += 1
            logger.info("waste recycled into stock (%d so far)", s.recycle_count)
        self._busy = True
        self._commit()
        return True

    def release_busy(self):
        """End the busy window opened by the last draw."""
        self._busy = False

    def move(self, request: MoveRequest) -> bool:
        if self._phase is not GamePhase.PLAYING:
            return False
        src_kind, src_key = parse_location(request.source)
        dst_kind, dst_key = parse_location(request.target)
        if src_kind not in ("waste", "tableau"):
            raise InvariantViolation(f"cannot move cards out of {request.source!r}")
        if dst_kind not in ("tableau", "foundation"):
            raise InvariantViolation(f"cannot move cards onto {request.target!r}")

        s = self._state
        src = s.waste if src_kind == "waste" else s.tableau[src_key]
        if request.depth is None:
            if not src:
                return self._reject(request, "source pile is empty")
            depth = len(src) - 1
        else:
            depth = request.depth
            if depth < 0 or depth >= len(src):
                raise InvariantViolation(f"no card at depth {depth} of {request.source!r}")

        cards = src[depth:]
        if not cards[0].face_up:
            return self._reject(request, "card is face down")
        if src_kind == "waste" and len(cards) != 1:
            return self._reject(request, "only the waste top can move")

        if dst_kind == "foundation":
            dst = s.foundations[dst_key]
            if len(cards) != 1:
                return self._reject(request, "only a top card can go to a foundation")
            top = dst[-1] if dst else None
            if not rules.can_place_on_foundation(cards[0], top, dst_key):
                return self._reject(request, "foundation does not accept card")
        else:
            dst = s.tableau[dst_key]
            if src is dst:
                return self._reject(request, "source and target are the same column")
            if rules.movable_run(src, depth) is None:
                return self._reject(request, "cards are not an ordered run")
            top = dst[-1] if dst else None
            if top is not None and not top.face_up:
                return self._reject(request, "target top card is face down")
            if not rules.can_stack_on_tableau(cards[0], top):
                return self._reject(request, "tableau does not accept card")

        self._begin_command()
        self.history.save(s)
        del src[depth:]
        flipped = False
        if src_kind == "tableau" and src and not src[-1].face_up:
            src[-1].face_up = True
            self._revealed.add(src[-1].id)
            flipped = True
        dst.extend(cards)
        s.score += scoring.move_points(src_kind, dst_kind, len(cards), flipped)
        if dst_kind == "foundation" and s.is_won():
            self._phase = GamePhase.WON
            self._busy = False
            logger.info("game won in %s", scoring.display_time(s.elapsed_seconds))
        self._commit()
        return True

    def move_card(self, card_id: str, target: str) -> bool:
        """Move the card with ``card_id`` (and any cards above it) to ``target``."""
        location, depth = self.locate(card_id)
        if location == "stock" or location.startswith("foundation"):
            return self._reject(card_id, f"card sits in {location}")
        return self.move(MoveRequest(location, target, depth))

    def undo(self) -> bool:
        if self._phase is not GamePhase.PLAYING:
            return False
        previous = self.history.undo()
        if previous is None:
            return False
        self._begin_command()
        self._state = previous
        self._commit()
        return True

    def tick(self):
        if self._phase is not GamePhase.PLAYING:
            return
        self._begin_command()
        self._state.elapsed_seconds += 1
        self._commit()

    # ---------- Auto finish ----------
    def can_auto_finish(self) -> bool:
        """Eligible when stock and waste are empty and all tableau cards are face-up."""
        s = self._state
        if self._phase is not GamePhase.PLAYING or s.stock or s.waste:
            return False
        return all(c.face_up for pile in s.tableau for c in pile)

    def auto_finish_step(self) -> bool:
        """Move one tableau top to its foundation. Return False when none can go."""
        if not self.can_auto_finish():
            return False
        for ti, pile in enumerate(self._state.tableau):
            if not pile:
                continue
            c = pile[-1]
            f = self._state.foundations[c.suit]
            if rules.can_place_on_foundation(c, f[-1] if f else None, c.suit):
                return self.move(MoveRequest(f"tableau:{ti}", f"foundation:{c.suit}"))
        return False

    # ---------- Internals ----------
    def _begin_command(self):
        self._revealed.clear()

    def _commit(self):
        if self.check_invariants:
            self._state.verify()
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def _reject(self, request, reason: str) -> bool:
        logger.debug("move rejected (%s): %s", reason, request)
        return False
