"""Bounded translation history kept on the client."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from .config import CONFIG_DIR

LOGGER = logging.getLogger(__name__)

HISTORY_CAPACITY = 7
HISTORY_KEY = "translation_history"


@dataclass(frozen=True, slots=True)
class TranslationRecord:
    """A completed translation as shown in the activity log."""

    source_text: str
    translated_text: str
    source_lang: str
    target_lang: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    confidence_score: float | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TranslationRecord":
        """Rebuild a record from its stored form.

        Raises ``ValueError`` (or ``KeyError``/``TypeError``) when the payload
        is not a stored record.
        """
        if not isinstance(payload, Mapping):
            raise TypeError(f"history entry is not an object: {payload!r}")
        score = payload.get("confidenceScore")
        return cls(
            id=str(payload["id"]),
            source_text=str(payload["sourceText"]),
            translated_text=str(payload["translatedText"]),
            source_lang=str(payload["sourceLang"]),
            target_lang=str(payload["targetLang"]),
            timestamp=parse_timestamp(payload["timestamp"]),
            confidence_score=None if score is None else float(score),
        )

    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "sourceText": self.source_text,
            "translatedText": self.translated_text,
            "sourceLang": self.source_lang,
            "targetLang": self.target_lang,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.confidence_score is not None:
            payload["confidenceScore"] = self.confidence_score
        return payload


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp, accepting the ``Z`` suffix browsers emit."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def push_bounded(
    records: Iterable[TranslationRecord],
    record: TranslationRecord,
    capacity: int = HISTORY_CAPACITY,
) -> tuple[TranslationRecord, ...]:
    """Return *records* with *record* prepended, keeping only the newest *capacity*."""

    return (record, *records)[:capacity]


class KeyValueStorage(Protocol):
    """Durable string storage keyed by name, like a browser's localStorage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage used by tests and ephemeral sessions."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = Path(directory or CONFIG_DIR)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.debug("Saved %s to %s", key, path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class HistoryStore:
    """Newest-first history of at most :data:`HISTORY_CAPACITY` translations.

    Every mutation writes the storage before replacing the in-memory tuple, so
    a failed write leaves both sides unchanged.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = HISTORY_KEY,
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        self.storage = storage
        self.key = key
        self.capacity = capacity
        self._records: tuple[TranslationRecord, ...] = ()

    @property
    def records(self) -> tuple[TranslationRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def load_on_startup(self) -> tuple[TranslationRecord, ...]:
        """Populate the store from durable storage; bad state yields an empty history."""

        raw = self.storage.get(self.key)
        if raw is None:
            self._records = ()
            return self._records
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("history is not a list")
            records = tuple(TranslationRecord.from_mapping(item) for item in payload)
        except (ValueError, KeyError, TypeError) as exc:
            LOGGER.warning("Failed to load history: %s", exc)
            self._records = ()
            return self._records
        self._records = records[: self.capacity]
        LOGGER.debug("Loaded %d history records", len(self._records))
        return self._records

    def append(self, record: TranslationRecord) -> tuple[TranslationRecord, ...]:
        updated = push_bounded(self._records, record, self.capacity)
        self.storage.set(self.key, json.dumps([item.to_mapping() for item in updated], ensure_ascii=False))
        self._records = updated
        return updated

    def clear(self) -> None:
        self.storage.remove(self.key)
        self._records = ()


__all__ = [
    "HISTORY_CAPACITY",
    "HISTORY_KEY",
    "HistoryStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "TranslationRecord",
    "parse_timestamp",
    "push_bounded",
]
