from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import patch
from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.outbox import record_domain_events
from modules.core.tasks import publish_outbox_events
from modules.orders.events import OrderCreated
from shared.domain.events import DomainEvent, DomainEventMixin
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


@dataclass(frozen=True)
class AuditPing(DomainEvent):
    note: str = ""


class Aggregate(DomainEventMixin):
    pass


def _pending(event_type="OrderCreated", payload=None):
    aggregate_id = uuid4()
    return OutboxEvent.objects.create(
        event_type=event_type,
        aggregate_id=str(aggregate_id),
        topic="orders",
        payload=payload
        or OrderCreated(aggregate_id=aggregate_id, order_number="ORD-1").to_payload(),
    )


class TestRecordDomainEvents:
    def test_one_row_per_event_then_cleared(self):
        aggregate = Aggregate()
        aggregate.add_domain_event(AuditPing(aggregate_id=uuid4(), note="a"))
        aggregate.add_domain_event(AuditPing(aggregate_id=uuid4(), note="b"))

        assert record_domain_events(aggregate, topic="audit") == 2

        assert aggregate.domain_events == []
        rows = OutboxEvent.objects.filter(topic="audit")
        assert sorted(r.payload["note"] for r in rows) == ["a", "b"]
        assert {r.status for r in rows} == {EventStatus.PENDING}

    def test_entity_without_events(self):
        assert record_domain_events(object(), topic="audit") == 0
        assert not OutboxEvent.objects.exists()


class TestOutboxEventModel:
    def test_mark_as_published(self):
        row = _pending()

        row.mark_as_published()

        row.refresh_from_db()
        assert row.status == EventStatus.PUBLISHED
        assert row.processed_at is not None

    def test_mark_as_failed_counts_retries(self):
        row = _pending()

        row.mark_as_failed("boom")
        row.mark_as_failed("boom again")

        row.refresh_from_db()
        assert row.status == EventStatus.FAILED
        assert row.retry_count == 2
        assert row.error_message == "boom again"

    def test_str(self):
        row = _pending()
        assert str(row).startswith("OrderCreated [PENDING]")


class TestPublishOutboxEvents:
    def test_pending_rows_are_published(self):
        rows = [_pending(), _pending()]

        result = publish_outbox_events()

        assert result == {"published": 2, "failed": 0}
        for row in rows:
            row.refresh_from_db()
            assert row.status == EventStatus.PUBLISHED

    def test_unknown_type_is_marked_failed(self):
        row = _pending(event_type="Vanished", payload={"aggregate_id": str(uuid4())})

        result = publish_outbox_events()

        assert result == {"published": 0, "failed": 1}
        row.refresh_from_db()
        assert row.status == EventStatus.FAILED
        assert "Vanished" in row.error_message

    def test_handler_failure_does_not_stop_the_batch(self):
        broken, healthy = _pending(), _pending(
            event_type="AuditPing",
            payload=AuditPing(aggregate_id=uuid4()).to_payload(),
        )
        real_publish = event_bus.publish

        def publish(event):
            if isinstance(event, OrderCreated):
                raise RuntimeError("handler down")
            return real_publish(event)

        with patch.object(event_bus, "publish", side_effect=publish):
            result = publish_outbox_events()

        assert result == {"published": 1, "failed": 1}
        broken.refresh_from_db()
        healthy.refresh_from_db()
        assert broken.status == EventStatus.FAILED
        assert broken.error_message == "RuntimeError: handler down"
        assert healthy.status == EventStatus.PUBLISHED

    def test_published_rows_are_not_resent(self):
        _pending().mark_as_published()

        assert publish_outbox_events() == {"published": 0, "failed": 0}

    def test_task_runs_eagerly_through_celery(self):
        _pending()

        result = publish_outbox_events.delay()

        assert result.get() == {"published": 1, "failed": 0}

    def test_failed_rows_are_retried(self):
        row = _pending()
        row.mark_as_failed("handler down")

        assert publish_outbox_events() == {"published": 1, "failed": 0}

        row.refresh_from_db()
        assert row.status == EventStatus.PUBLISHED
        assert row.error_message is None

    def test_rows_past_the_retry_cap_are_left_alone(self, settings):
        settings.OUTBOX_MAX_RETRIES = 2
        row = _pending()
        row.mark_as_failed("one")
        row.mark_as_failed("two")

        assert publish_outbox_events() == {"published": 0, "failed": 0}

        row.refresh_from_db()
        assert row.retry_count == 2

    def test_batch_size_limits_one_run(self):
        for _ in range(3):
            _pending()

        assert publish_outbox_events(batch_size=2) == {"published": 2, "failed": 0}
        assert OutboxEvent.objects.publishable(5).count() == 1
