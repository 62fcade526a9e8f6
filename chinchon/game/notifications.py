"""State-changed notifications sent to subscribers after each mutation."""

from __future__ import annotations

import copy
import logging
from typing import Callable

from chinchon.game.models import GameState

logger = logging.getLogger("chinchon.notifications")

StateListener = Callable[[GameState, list[dict]], None]


class Notifier:
    """Synchronous listener list. Listeners receive a copy of the state."""

    def __init__(self) -> None:
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> bool:
        """Remove a listener. Returns False if it was not registered."""
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def __len__(self) -> int:
        return len(self._listeners)

    def notify(self, game: GameState, events: list[dict]) -> None:
        if not self._listeners:
            return
        logger.debug("Notifying %d listener(s)", len(self._listeners))
        for listener in list(self._listeners):
            listener(copy.deepcopy(game), [dict(e) for e in events])
