"""Use case that seeds local state after every successful (re)connection.

The two root fetches (room and playback status) run concurrently; the status
branch chains into a timer fetch when a timer is loaded. Failures stay inside
their own branch and are only logged.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from stagesync.domain.entities import PlaybackSnapshot, RequestKind, RoomSnapshot
from stagesync.domain.ports import ApiClientPort, StateStorePort, StatusSink
from stagesync.usecases.error_mapping import report_fetch_failure
from stagesync.usecases.sync_timer import SyncTimer


class BootstrapSynchronizer:
    """Use-case callable run once per successful connection."""

    def __init__(
        self,
        api: ApiClientPort,
        store: StateStorePort,
        status: StatusSink,
        sync_timer: Optional[SyncTimer] = None,
    ) -> None:
        self.api = api
        self.store = store
        self.status = status
        self.sync_timer = sync_timer or SyncTimer(api=api, store=store, status=status)

    def __call__(self) -> None:
        """Run both root fetches in parallel and wait for each to settle.

        Side Effects:
            Calls ``update_room_state``, ``update_playback_state`` and, when a
            timer is loaded, ``update_timer_state`` on the store.

        Call Chain:
            Transport ``connect`` -> ``ConnectionSession`` ->
            ``BootstrapSynchronizer.__call__``.
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="bootstrap") as pool:
            branches = [pool.submit(self.sync_room), pool.submit(self.sync_playback)]
            for branch in branches:
                branch.result()

    def sync_room(self) -> bool:
        try:
            response = self.api.send(RequestKind.GET_ROOM, {})
            snapshot = RoomSnapshot.from_room(response.data)
            self.store.update_room_state(snapshot.as_update())
        except Exception as exc:
            report_fetch_failure(self.status, RequestKind.GET_ROOM, exc)
            return False
        return True

    def sync_playback(self) -> bool:
        try:
            response = self.api.send(RequestKind.GET_STATUS, {})
            snapshot = PlaybackSnapshot.from_payload(response.data)
            self.store.update_playback_state(snapshot.as_update())
        except Exception as exc:
            report_fetch_failure(self.status, RequestKind.GET_STATUS, exc)
            return False
        if not snapshot.current_timer_id:
            return True
        return self.sync_timer(snapshot.current_timer_id)


__all__ = ["BootstrapSynchronizer"]
