from __future__ import annotations

import pytest

from stagesync.adapters.state_memory import FACETS, InMemoryStateStore


def test_partial_updates_merge_and_leave_other_fields() -> None:
    store = InMemoryStateStore()

    store.update_room_state({"room_id": "R1", "room_name": "Main", "room_blackout": False, "room_focus": "Hi"})
    store.update_room_state({"room_blackout": True, "room_focus": None})

    assert store.get("room") == {
        "room_id": "R1",
        "room_name": "Main",
        "room_blackout": True,
        "room_focus": None,
    }


def test_listeners_receive_only_changed_fields() -> None:
    store = InMemoryStateStore()
    seen = []
    store.subscribe(lambda facet, changed: seen.append((facet, changed)))

    store.update_playback_state({"current_timer_id": "T1", "is_running": True})
    store.update_playback_state({"current_timer_id": "T1", "is_running": False})
    store.update_playback_state({"current_timer_id": "T1"})

    assert seen == [
        ("playback", {"current_timer_id": "T1", "is_running": True}),
        ("playback", {"is_running": False}),
    ]


def test_unsubscribe_stops_notifications() -> None:
    store = InMemoryStateStore()
    seen = []
    unsubscribe = store.subscribe(lambda facet, changed: seen.append(facet))

    store.update_timer_state({"name": "A"})
    unsubscribe()
    unsubscribe()
    store.update_timer_state({"name": "B"})

    assert seen == ["timer"]
    assert store.get("timer") == {"name": "B"}


def test_flash_is_signalled_not_stored() -> None:
    store = InMemoryStateStore()
    flashes = []
    store.on_flash(flashes.append)

    store.update_flashing_state(3)

    assert flashes == [3]
    assert store.snapshot() == {facet: {} for facet in FACETS}


def test_snapshot_is_a_copy() -> None:
    store = InMemoryStateStore()
    store.update_message_state({"text": "Wrap up", "showing": True})

    snap = store.snapshot()
    snap["message"]["text"] = "changed"

    assert store.get("message")["text"] == "Wrap up"


def test_unknown_facet_and_clear() -> None:
    store = InMemoryStateStore()
    store.update_room_state({"room_id": "R1"})

    with pytest.raises(KeyError):
        store.get("speakers")

    store.clear()
    assert store.get("room") == {}
