from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stagesync.domain.entities import RequestKind, TimerSnapshot
from stagesync.domain.ports import ApiClientPort, StateStorePort, StatusSink
from stagesync.usecases.error_mapping import report_fetch_failure


@dataclass
class SyncTimer:
    """Fetch one timer's details and merge them into the state store.

    Shared by the bootstrap chain and the ``playback_status`` handler. The
    fetch is keyed by the id passed in; a late reply for an id that has since
    been superseded is still applied.
    """

    api: ApiClientPort
    store: StateStorePort
    status: StatusSink

    def __call__(self, timer_id: Any) -> bool:
        try:
            response = self.api.send(RequestKind.GET_TIMER, {"timer_id": timer_id})
            snapshot = TimerSnapshot.from_payload(response.data)
            self.store.update_timer_state(snapshot.as_update())
        except Exception as exc:
            report_fetch_failure(self.status, RequestKind.GET_TIMER, exc)
            return False
        return True


__all__ = ["SyncTimer"]
