"""A JSON file holding one collection of documents.

Each document carries a ``version``. ``replace`` only writes when the stored
version still matches the caller's, which gives repositories a conditional
update. The check and the write happen under one lock per file, so the
guarantee holds within a process; several processes sharing the same files
would need a store with native conditional updates.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path

from storefront.domain.exceptions import ConcurrentUpdateConflict

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _locks_guard:
        return _locks.setdefault(path, threading.RLock())


class JsonCollection:

    def __init__(self, file_path: Path, key_field: str) -> None:
        self._file_path = file_path.resolve()
        self._key_field = key_field
        self._lock = _lock_for(self._file_path)
        self._ensure_file()

    def find(self, key) -> dict | None:
        for raw in self.all():
            if raw[self._key_field] == key:
                return raw
        return None

    def all(self) -> list[dict]:
        with self._lock:
            return self._load_raw()

    def replace(self, doc: dict, expected_version: int) -> int:
        """Upsert ``doc`` if the stored version equals ``expected_version``.

        A document that is not stored yet counts as version 0. Returns the
        new version.
        """
        key = doc[self._key_field]
        with self._lock:
            records = self._load_raw()
            index = next(
                (i for i, raw in enumerate(records) if raw[self._key_field] == key), None
            )
            stored_version = records[index].get("version", 0) if index is not None else 0
            if stored_version != expected_version:
                raise ConcurrentUpdateConflict(
                    f"{self._file_path.stem} {key!r} changed "
                    f"(expected version {expected_version}, found {stored_version})"
                )
            new_doc = dict(doc, version=expected_version + 1)
            if index is None:
                records.append(new_doc)
            else:
                records[index] = new_doc
            self._persist_raw(records)
            return expected_version + 1

    def delete(self, key) -> None:
        with self._lock:
            records = [raw for raw in self._load_raw() if raw[self._key_field] != key]
            self._persist_raw(records)

    def next_int_key(self) -> int:
        with self._lock:
            records = self._load_raw()
            if not records:
                return 1
            return max(int(raw[self._key_field]) for raw in records) + 1

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        # write-then-rename so readers never see a half-written file
        tmp = self._file_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp, self._file_path)

    def _ensure_file(self) -> None:
        with self._lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._file_path.write_text("[]", encoding="utf-8")
