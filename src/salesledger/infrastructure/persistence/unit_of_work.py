"""Document-store-backed Unit of Work.

The session keeps an identity map (one object per record per unit of
work) and remembers the version each record had when it was read.  Staged
aggregates are serialized and handed to ``DocumentStore.commit`` as one
batch, which either applies them all or raises ConcurrencyConflictError.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from salesledger.domain.repository.unit_of_work import UnitOfWork
from salesledger.infrastructure.persistence.customer_repository import (
    DocumentCustomerRepository,
)
from salesledger.infrastructure.persistence.document_store import (
    DocumentStore,
    StagedWrite,
)
from salesledger.infrastructure.persistence.order_repository import (
    DocumentOrderRepository,
)
from salesledger.infrastructure.persistence.product_repository import (
    DocumentProductRepository,
)
from salesledger.infrastructure.persistence.reservation_repository import (
    DocumentReservationRepository,
)

logger = structlog.get_logger(__name__)

ToDomain = Callable[[dict], Any]
ToRaw = Callable[[Any], dict]


class Session:

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._identity: dict[tuple[str, str], Any] = {}
        self._staged: dict[tuple[str, str], ToRaw] = {}

    def load(self, collection: str, key: str, to_domain: ToDomain) -> Any | None:
        if (collection, key) in self._identity:
            return self._identity[(collection, key)]
        raw = self._store.get(collection, key)
        if raw is None:
            return None
        return self._remember(collection, key, raw, to_domain)

    def load_all(self, collection: str, key_of: Callable[[dict], str], to_domain: ToDomain) -> list:
        """Every record in the collection, plus objects staged but not yet stored."""
        result = []
        seen = set()
        for raw in self._store.all(collection):
            key = key_of(raw)
            seen.add(key)
            obj = self._identity.get((collection, key))
            if obj is None:
                obj = self._remember(collection, key, raw, to_domain)
            result.append(obj)
        for (name, key), obj in self._identity.items():
            if name == collection and key not in seen:
                result.append(obj)
        return result

    def stage(self, collection: str, key: str, obj: Any, to_raw: ToRaw) -> None:
        self._identity[(collection, key)] = obj
        self._staged[(collection, key)] = to_raw

    def next_sequence(self, name: str) -> int:
        return self._store.next_sequence(name)

    def flush(self) -> int:
        writes = []
        for (collection, key), to_raw in self._staged.items():
            obj = self._identity[(collection, key)]
            writes.append(StagedWrite(collection, key, obj.version, to_raw(obj)))
        self._store.commit(writes)
        for collection, key in self._staged:
            self._identity[(collection, key)].version += 1
        self._staged.clear()
        return len(writes)

    def discard(self) -> None:
        self._identity.clear()
        self._staged.clear()

    @property
    def has_changes(self) -> bool:
        return bool(self._staged)

    def _remember(self, collection: str, key: str, raw: dict, to_domain: ToDomain) -> Any:
        obj = to_domain(raw)
        obj.version = raw.get("version", 0)
        self._identity[(collection, key)] = obj
        return obj


class DocumentUnitOfWork(UnitOfWork):
    """One instance per worker; re-entering starts a fresh session."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._session: Session | None = None

    def _begin(self) -> None:
        self._session = Session(self._store)
        self.products = DocumentProductRepository(self._session)
        self.orders = DocumentOrderRepository(self._session)
        self.customers = DocumentCustomerRepository(self._session)
        self.reservations = DocumentReservationRepository(self._session)

    def commit(self) -> None:
        written = self._active_session().flush()
        logger.debug("Unit of work committed", records=written)

    def rollback(self) -> None:
        if self._session is None:
            return
        if self._session.has_changes:
            logger.debug("Unit of work rolled back")
        self._session.discard()

    def _active_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work used outside a 'with' block")
        return self._session
