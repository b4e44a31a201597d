from stagesync.adapters.api_errors import ApiTimeoutError
from stagesync.domain.entities import RequestKind
from stagesync.tests.unit.usecases.helpers import FakeApi, RecordingStatusSink, RecordingStore
from stagesync.usecases.sync_timer import SyncTimer


def test_sync_timer_fetches_by_id_and_merges():
    api = FakeApi({RequestKind.GET_TIMER: {"name": "Intro", "speaker": "Sam", "wrap_up_red": 10}})
    store = RecordingStore()
    uc = SyncTimer(api=api, store=store, status=RecordingStatusSink())

    assert uc("T9") is True

    assert api.calls == [(RequestKind.GET_TIMER, {"timer_id": "T9"})]
    timer = store.of("timer")[0]
    assert timer["name"] == "Intro"
    assert timer["speaker"] == "Sam"
    assert timer["wrap_up_red_at"] == 10
    assert timer["wrap_up_yellow_at"] is None


def test_sync_timer_failure_returns_false_and_logs():
    api = FakeApi({RequestKind.GET_TIMER: ApiTimeoutError("Timeout contacting x")})
    store = RecordingStore()
    sink = RecordingStatusSink()

    assert SyncTimer(api=api, store=store, status=sink)("T9") is False

    assert store.calls == []
    assert sink.messages("error") == ["get_timer failed: REQUEST_TIMEOUT: Request timed out. Check connection."]


def test_late_reply_is_still_applied():
    replies = iter([{"name": "First"}, {"name": "Second"}])
    api = FakeApi({RequestKind.GET_TIMER: lambda _params: next(replies)})
    store = RecordingStore()
    uc = SyncTimer(api=api, store=store, status=RecordingStatusSink())

    uc("T1")
    uc("T2")

    assert [t["name"] for t in store.of("timer")] == ["First", "Second"]
