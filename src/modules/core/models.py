"""Abstract base model and the transactional outbox.

- ``BaseModel``: UUIDv7 primary key (time ordered, so index-friendly) plus
  ``created_at`` / ``updated_at``.
- ``OutboxEvent``: one row per domain event, written in the same transaction
  as the state change that raised it.

Rows are hard-deleted throughout; an order that is removed takes its items
and history with it.
"""

from __future__ import annotations

import uuid6
from django.db import models
from django.utils import timezone

ERROR_MESSAGE_MAX_LENGTH = 2000


class BaseModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        # ``auto_now`` is skipped when ``update_fields`` leaves it out.
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "updated_at"]
        super().save(*args, **kwargs)


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxQuerySet(models.QuerySet):
    def publishable(self, max_retries: int) -> OutboxQuerySet:
        """Rows the publisher should (re)try, oldest first.

        ``FAILED`` rows stay eligible until they have failed ``max_retries``
        times; after that they wait for manual inspection.
        """
        return self.filter(
            models.Q(status=EventStatus.PENDING)
            | models.Q(status=EventStatus.FAILED, retry_count__lt=max_retries)
        ).order_by("created_at", "id")

    def for_aggregate(self, aggregate_id) -> OutboxQuerySet:
        return self.filter(aggregate_id=str(aggregate_id)).order_by("created_at", "id")


class OutboxEvent(BaseModel):
    """A domain event waiting to be (or already) published.

    ``payload`` is ``DomainEvent.to_payload()``; ``event_type`` is the event
    class name used to rebuild it.  ``topic`` groups events by bounded
    context (``orders``, ``products``).
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="outbox_status_idx"),
            models.Index(fields=["aggregate_id"], name="outbox_aggregate_idx"),
            models.Index(fields=["topic", "event_type"], name="outbox_topic_type_idx"),
        ]

    def mark_as_published(self) -> None:
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.error_message = None
        self.save(update_fields=["status", "processed_at", "error_message"])

    def mark_as_failed(self, error: str) -> None:
        self.status = EventStatus.FAILED
        self.error_message = error[:ERROR_MESSAGE_MAX_LENGTH]
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count"])

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
