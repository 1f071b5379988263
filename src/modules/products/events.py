"""Domain events for the Products bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class StockAdjusted(DomainEvent):
    """Raised when stock is changed manually (restock or write-off)."""

    delta: int = 0
    stock: int = 0
    reason: str = ""
