"""Product domain exceptions.

Raised by the stock ledger and the product service.  Views translate them
through ``modules.core.exceptions.error_response``.
"""

from __future__ import annotations

from modules.core.exceptions import InvalidRequest, NotFound


class ProductNotFound(NotFound):
    """The requested product does not exist."""


class InsufficientStock(InvalidRequest):
    """Applying the delta would drive stock below zero."""


class StockLimitExceeded(InvalidRequest):
    """Applying the delta would push stock above the ledger's upper bound."""


class InvalidStockDelta(InvalidRequest):
    """The delta is zero or not an integer."""
