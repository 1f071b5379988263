"""Persist an aggregate's pending domain events as outbox rows.

Must be called inside the same transaction as the aggregate write so the
event and the state change commit (or roll back) together.
"""

from __future__ import annotations

from typing import Any

import structlog

from modules.core.models import OutboxEvent

logger = structlog.get_logger(__name__)


def record_domain_events(entity: Any, topic: str) -> int:
    """Write one ``OutboxEvent`` per collected event, then clear them."""
    events = entity.domain_events if hasattr(entity, "domain_events") else []
    for event in events:
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=event.to_payload(),
            topic=topic,
        )
    if hasattr(entity, "clear_domain_events"):
        entity.clear_domain_events()
    if events:
        logger.debug("outbox.events_recorded", topic=topic, count=len(events))
    return len(events)
