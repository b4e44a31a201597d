from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Tuple

from stagesync.domain.ports import StateStorePort

FACETS: Tuple[str, ...] = ("room", "playback", "timer", "message")

ChangeListener = Callable[[str, Dict[str, Any]], None]
FlashListener = Callable[[int], None]


class InMemoryStateStore(StateStorePort):
    """Process-local state store that merges partial updates per facet.

    Each update call is one atomic field merge. Listeners receive only the
    fields whose value actually changed and run outside the lock.
    """

    def __init__(self) -> None:
        self._log = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._state: Dict[str, Dict[str, Any]] = {facet: {} for facet in FACETS}
        self._listeners: List[ChangeListener] = []
        self._flash_listeners: List[FlashListener] = []

    # ---------- StateStorePort ----------

    def update_room_state(self, partial: Mapping[str, Any]) -> None:
        self._merge("room", partial)

    def update_playback_state(self, partial: Mapping[str, Any]) -> None:
        self._merge("playback", partial)

    def update_timer_state(self, partial: Mapping[str, Any]) -> None:
        self._merge("timer", partial)

    def update_message_state(self, partial: Mapping[str, Any]) -> None:
        self._merge("message", partial)

    def update_flashing_state(self, count: int) -> None:
        # Flashing is a one-shot signal, never stored.
        self._log.debug("flash x%s", count)
        for listener in list(self._flash_listeners):
            listener(count)

    # ---------- Queries / subscriptions ----------

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._state)

    def get(self, facet: str) -> Dict[str, Any]:
        if facet not in self._state:
            raise KeyError(f"Unknown state facet: {facet!r}")
        with self._lock:
            return copy.deepcopy(self._state[facet])

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener(facet, changed)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_flash(self, listener: FlashListener) -> None:
        self._flash_listeners.append(listener)

    def clear(self) -> None:
        with self._lock:
            self._state = {facet: {} for facet in FACETS}

    def _merge(self, facet: str, partial: Mapping[str, Any]) -> None:
        with self._lock:
            current = self._state[facet]
            changed = {
                key: value
                for key, value in dict(partial or {}).items()
                if key not in current or current[key] != value
            }
            current.update(changed)
        if not changed:
            return
        for listener in list(self._listeners):
            listener(facet, dict(changed))


__all__ = ["FACETS", "InMemoryStateStore"]
