from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from naijavoice_core.history import (
    HISTORY_KEY,
    HistoryStore,
    JsonFileStorage,
    MemoryStorage,
    TranslationRecord,
    push_bounded,
)


def make_record(index: int) -> TranslationRecord:
    return TranslationRecord(
        id=f"rec-{index}",
        source_text=f"hello {index}",
        translated_text=f"báwo {index}",
        source_lang="en",
        target_lang="yo",
        timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=index),
        confidence_score=0.95,
    )


def test_push_bounded_keeps_newest_first():
    records: tuple[TranslationRecord, ...] = ()
    for index in range(3):
        records = push_bounded(records, make_record(index), capacity=2)
    assert [r.id for r in records] == ["rec-2", "rec-1"]


def test_append_ten_keeps_last_seven_newest_first(history):
    for index in range(10):
        history.append(make_record(index))

    assert len(history) == 7
    assert [r.id for r in history.records] == [f"rec-{i}" for i in range(9, 2, -1)]


def test_append_persists_every_mutation():
    storage = MemoryStorage()
    store = HistoryStore(storage)
    store.append(make_record(1))
    store.append(make_record(2))

    persisted = json.loads(storage.get(HISTORY_KEY))
    assert [item["id"] for item in persisted] == ["rec-2", "rec-1"]
    assert persisted[0]["timestamp"] == "2025-01-01T00:02:00+00:00"


def test_reload_restores_timestamps_as_datetimes():
    storage = MemoryStorage()
    HistoryStore(storage).append(make_record(4))

    restored = HistoryStore(storage)
    restored.load_on_startup()

    assert restored.records == (make_record(4),)
    assert isinstance(restored.records[0].timestamp, datetime)


def test_load_accepts_browser_style_timestamps():
    stored = [
        {
            "id": "1700000000000",
            "sourceText": "Good morning",
            "translatedText": "E kaaro",
            "sourceLang": "en",
            "targetLang": "yo",
            "timestamp": "2025-03-04T05:06:07.000Z",
        }
    ]
    store = HistoryStore(MemoryStorage({HISTORY_KEY: json.dumps(stored)}))
    store.load_on_startup()

    record = store.records[0]
    assert record.timestamp == datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    assert record.confidence_score is None


def test_clear_then_load_is_empty(history):
    history.append(make_record(1))
    history.clear()

    assert history.records == ()
    assert history.storage.get(HISTORY_KEY) is None
    assert history.load_on_startup() == ()


@pytest.mark.parametrize("raw", ["not json", "{}", "[1]", "[null]", '[{"id": 1}]', '[{"id": "x", "sourceText": "a", '
                                 '"translatedText": "b", "sourceLang": "en", "targetLang": "yo", '
                                 '"timestamp": "yesterday"}]'])
def test_corrupt_state_loads_empty(raw):
    store = HistoryStore(MemoryStorage({HISTORY_KEY: raw}))
    assert store.load_on_startup() == ()


def test_missing_state_loads_empty(history):
    assert history.load_on_startup() == ()


def test_failed_write_leaves_memory_unchanged(history):
    history.append(make_record(1))

    class BrokenStorage(MemoryStorage):
        def set(self, key, value):
            raise OSError("disk full")

    history.storage = BrokenStorage()
    with pytest.raises(OSError):
        history.append(make_record(2))
    assert [r.id for r in history.records] == ["rec-1"]


def test_json_file_storage_round_trip(tmp_path):
    storage = JsonFileStorage(tmp_path / "state")
    store = HistoryStore(storage)
    store.append(make_record(1))

    assert (tmp_path / "state" / f"{HISTORY_KEY}.json").exists()
    reloaded = HistoryStore(JsonFileStorage(tmp_path / "state"))
    assert [r.id for r in reloaded.load_on_startup()] == ["rec-1"]

    store.clear()
    assert not (tmp_path / "state" / f"{HISTORY_KEY}.json").exists()
    assert list((tmp_path / "state").iterdir()) == []


def test_new_records_get_unique_ids():
    first = TranslationRecord("a", "b", "en", "yo")
    second = TranslationRecord("a", "b", "en", "yo")
    assert first.id != second.id
    assert first.timestamp.tzinfo is not None
