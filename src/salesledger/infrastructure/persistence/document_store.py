"""Document stores — the backing store behind every unit of work.

Records are plain JSON-compatible dicts grouped in collections and keyed
by string id.  Every record carries a ``version``.  ``commit()`` is the
store's only write path: under the store lock it checks that each staged
record still has the version the writer read, then writes all of them
with ``version + 1``.  One stale record aborts the whole batch.

Two backends share that logic:

- ``InMemoryDocumentStore`` — dicts in process memory (tests, embedding).
- ``JsonDocumentStore`` — a single JSON file replaced atomically, guarded
  by an ``fcntl`` lock file so separate CLI processes serialize too.
"""

from __future__ import annotations

import copy
import fcntl
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import structlog

from salesledger.domain.exceptions import ConcurrencyConflictError

logger = structlog.get_logger(__name__)

COLLECTIONS = ("products", "orders", "customers", "reservations")
SEQUENCES = "sequences"


@dataclass(frozen=True)
class StagedWrite:
    collection: str
    key: str
    expected_version: int
    record: dict


class DocumentStore(ABC):

    def __init__(self) -> None:
        self._lock = threading.RLock()

    # --- Reads ----------------------------------------------------------------

    def get(self, collection: str, key: str) -> dict | None:
        with self._locked():
            record = self._load()[collection].get(key)
        return copy.deepcopy(record)

    def all(self, collection: str) -> list[dict]:
        with self._locked():
            records = list(self._load()[collection].values())
        return copy.deepcopy(records)

    # --- Writes ---------------------------------------------------------------

    def next_sequence(self, name: str) -> int:
        """Atomically increment and return a named counter.

        Sequences are not part of any commit; a rolled-back unit of work
        leaves a gap.
        """
        with self._locked():
            data = self._load()
            value = data[SEQUENCES].get(name, 0) + 1
            data[SEQUENCES][name] = value
            self._dump(data)
        return value

    def commit(self, writes: list[StagedWrite]) -> None:
        if not writes:
            return
        with self._locked():
            data = self._load()
            for write in writes:
                current = data[write.collection].get(write.key)
                current_version = current["version"] if current else 0
                if current_version != write.expected_version:
                    logger.info(
                        "Optimistic version check failed",
                        collection=write.collection,
                        key=write.key,
                        expected=write.expected_version,
                        found=current_version,
                    )
                    raise ConcurrencyConflictError(write.collection, write.key)
            for write in writes:
                record = copy.deepcopy(write.record)
                record["version"] = write.expected_version + 1
                data[write.collection][write.key] = record
            self._dump(data)

    # --- Backend hooks --------------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            yield

    @abstractmethod
    def _load(self) -> dict[str, dict]:
        """Return ``{collection: {key: record}}`` for every collection."""

    @abstractmethod
    def _dump(self, data: dict[str, dict]) -> None:
        """Persist the full data set returned by ``_load`` after mutation."""


def _empty() -> dict[str, dict]:
    data: dict[str, dict] = {name: {} for name in COLLECTIONS}
    data[SEQUENCES] = {}
    return data


class InMemoryDocumentStore(DocumentStore):

    def __init__(self) -> None:
        super().__init__()
        self._data = _empty()

    def _load(self) -> dict[str, dict]:
        # Shallow per-collection copies: records are replaced, never mutated.
        return {name: dict(records) for name, records in self._data.items()}

    def _dump(self, data: dict[str, dict]) -> None:
        self._data = data


class JsonDocumentStore(DocumentStore):

    def __init__(self, data_dir: Path) -> None:
        super().__init__()
        self._file_path = data_dir / "store.json"
        self._lock_path = data_dir / ".store.lock"
        self._ensure_file()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock, open(self._lock_path, "a", encoding="utf-8") as handle:
            fcntl.flock(handle, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)

    def _load(self) -> dict[str, dict]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        data = _empty()
        data.update(raw)
        return data

    def _dump(self, data: dict[str, dict]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._file_path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
                handle.write("\n")
            os.replace(tmp, self._file_path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(_empty()) + "\n", encoding="utf-8")
