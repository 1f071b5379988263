"""Event handlers for Products domain events."""

from __future__ import annotations

import structlog

from modules.products.events import StockAdjusted
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class StockAdjustedHandler(IEventHandler[StockAdjusted]):
    def handle(self, event: StockAdjusted) -> None:
        logger.info(
            "product.stock_adjusted_event",
            product_id=str(event.aggregate_id),
            delta=event.delta,
            stock=event.stock,
        )


stock_adjusted_handler = StockAdjustedHandler()
