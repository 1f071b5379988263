"""Unit of work: begin, do N writes, commit or roll back all of them.

Services receive an ``IUnitOfWork`` through their constructor and wrap every
multi-write use case in ``with self._uow.begin():``.  Any exception raised
inside the block undoes every write made in it (order header, items, stock
deltas, outbox rows) before propagating.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator

import structlog
from django.db import transaction

logger = structlog.get_logger(__name__)


class IUnitOfWork(ABC):
    """Transaction boundary contract."""

    @abstractmethod
    def begin(self) -> Iterator[None]:
        """Context manager delimiting one atomic unit of work."""

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` only once the surrounding unit of work commits."""


class DjangoUnitOfWork(IUnitOfWork):
    """Unit of work backed by ``django.db.transaction.atomic``.

    Nested ``begin()`` calls become savepoints, so a service may call another
    service that opens its own unit of work.
    """

    def __init__(self, using: str | None = None) -> None:
        self._using = using

    @contextmanager
    def begin(self) -> Iterator[None]:
        try:
            with transaction.atomic(using=self._using):
                yield
        except Exception as exc:
            logger.info("unit_of_work.rolled_back", error=type(exc).__name__)
            raise

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, using=self._using)
