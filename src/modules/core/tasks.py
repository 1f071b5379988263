"""Celery tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent, UnknownEventType
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int | None = None) -> dict:
    """Drain publishable outbox rows onto the in-process event bus.

    Rows are locked (``SKIP LOCKED`` where the backend supports it) so two
    workers never publish the same event.  A row whose event type is unknown
    or whose handler raises is marked ``FAILED`` and the batch continues;
    it is retried on later runs until ``OUTBOX_MAX_RETRIES`` failures.
    """
    batch_size = batch_size or settings.OUTBOX_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        rows = list(
            OutboxEvent.objects.select_for_update(skip_locked=True).publishable(
                settings.OUTBOX_MAX_RETRIES
            )[:batch_size]
        )
        for row in rows:
            log = logger.bind(
                outbox_id=str(row.id),
                event_type=row.event_type,
                attempt=row.retry_count + 1,
            )
            try:
                event = DomainEvent.from_payload(row.event_type, row.payload)
                event_bus.publish(event)
            except UnknownEventType as exc:
                row.mark_as_failed(str(exc))
                log.warning("outbox.unknown_event_type")
                failed += 1
                continue
            except Exception as exc:
                row.mark_as_failed(f"{type(exc).__name__}: {exc}")
                log.exception("outbox.publish_failed")
                failed += 1
                continue
            row.mark_as_published()
            published += 1

    if rows:
        logger.info("outbox.batch_processed", published=published, failed=failed)
    return {"published": published, "failed": failed}
