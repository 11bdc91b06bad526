import logging
from typing import List, Optional

from klondike.engine.state import GameState

logger = logging.getLogger(__name__)


class HistoryManager:
    """
    Undo stack of whole-table snapshots. The engine saves the state right
    before applying a command; undo hands the most recent snapshot back.
    Depth is unbounded.
    """

    def __init__(self):
        self._stack: List[GameState] = []

    def save(self, state: GameState):
        self._stack.append(state.clone())

    def can_undo(self) -> bool:
        return len(self._stack) > 0

    def undo(self) -> Optional[GameState]:
        # Popped snapshots leave the stack, so the caller owns them outright.
        if not self._stack:
            logger.debug("nothing to undo")
            return None
        return self._stack.pop()

    def clear(self):
        self._stack.clear()

    def __len__(self):
        return len(self._stack)
