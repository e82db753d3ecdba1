"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from salesledger.application.notifications import Notifier
from salesledger.application.retry import RetryPolicy
from salesledger.infrastructure.config import Settings
from salesledger.infrastructure.notifier import LoggingNotifier
from salesledger.infrastructure.persistence.document_store import (
    DocumentStore,
    JsonDocumentStore,
)
from salesledger.infrastructure.persistence.unit_of_work import DocumentUnitOfWork


def settings() -> Settings:
    return Settings.from_env()


def document_store(config: Settings | None = None) -> DocumentStore:
    config = config or settings()
    return JsonDocumentStore(config.data_dir)


def unit_of_work(config: Settings | None = None) -> DocumentUnitOfWork:
    return DocumentUnitOfWork(document_store(config))


def retry_policy(config: Settings | None = None) -> RetryPolicy:
    config = config or settings()
    return RetryPolicy(
        max_attempts=config.max_attempts,
        backoff_initial=config.backoff_initial,
        backoff_max=config.backoff_max,
    )


def notifier() -> Notifier:
    return LoggingNotifier()
