from __future__ import annotations

"""Dispatch table for the timer service push events."""

from typing import Any, Callable, Dict, Optional

from stagesync.domain.entities import (
    MessageSnapshot,
    PlaybackSnapshot,
    PushEvent,
    RoomSnapshot,
    flash_count,
)
from stagesync.domain.ports import ApiClientPort, StateStorePort, StatusSink
from stagesync.usecases.sync_timer import SyncTimer

PushHandler = Callable[[Any], None]


class EventDispatcher:
    """Maps push events to state-store updates.

    Handlers keep no state between calls. Every handler is wrapped so that a
    bad payload or a failed store call is logged and never reaches the
    transport.
    """

    def __init__(
        self,
        api: ApiClientPort,
        store: StateStorePort,
        status: StatusSink,
        sync_timer: Optional[SyncTimer] = None,
    ) -> None:
        self.store = store
        self.status = status
        self.sync_timer = sync_timer or SyncTimer(api=api, store=store, status=status)
        self._table: Dict[str, PushHandler] = {
            PushEvent.PLAYBACK_STATUS.value: self._guard(PushEvent.PLAYBACK_STATUS, self.on_playback_status),
            PushEvent.ROOM.value: self._guard(PushEvent.ROOM, self.on_room),
            PushEvent.MESSAGE.value: self._guard(PushEvent.MESSAGE, self.on_message),
            PushEvent.FLASH.value: self._guard(PushEvent.FLASH, self.on_flash),
        }

    def table(self) -> Dict[str, PushHandler]:
        """Event name -> guarded handler, ready to register on a transport."""
        return dict(self._table)

    def dispatch(self, event: str, payload: Any = None) -> bool:
        """Route one push event; returns ``False`` for unknown event names."""
        handler = self._table.get(str(event))
        if handler is None:
            self.status.log("debug", f"Ignoring unknown event: {event}")
            return False
        handler(payload)
        return True

    # ---------- Handlers ----------

    def on_playback_status(self, payload: Any) -> None:
        snapshot = PlaybackSnapshot.from_payload(payload)
        self.store.update_playback_state(snapshot.as_update())
        # Unlike bootstrap, the push path fetches even when no timer is loaded.
        self.sync_timer(snapshot.current_timer_id)

    def on_room(self, payload: Any) -> None:
        self.store.update_room_state(RoomSnapshot.from_event(payload).as_update())

    def on_message(self, payload: Any) -> None:
        self.store.update_message_state(MessageSnapshot.from_payload(payload).as_update())

    def on_flash(self, payload: Any) -> None:
        self.store.update_flashing_state(flash_count(payload))

    def _guard(self, event: PushEvent, handler: PushHandler) -> PushHandler:
        def guarded(payload: Any = None, *_: Any) -> None:
            self.status.log("debug", f"Event: {event.value}")
            try:
                handler(payload)
            except Exception as exc:
                self.status.log("error", f"{event.value} handler failed: {exc}")

        guarded.__name__ = f"on_{event.value}"
        return guarded


__all__ = ["EventDispatcher"]
