"""Ports for in-process domain event dispatch.

The outbox publisher depends on ``IEventBus`` only; handlers implement
``IEventHandler`` for the event class they subscribe to.
"""

from __future__ import annotations

from typing import Generic, List, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    def publish(self, event: DomainEvent) -> int:
        """Deliver ``event`` to its subscribers; return how many received it."""
        ...

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None: ...

    def handlers_for(self, event_class: Type[DomainEvent]) -> List[IEventHandler]: ...
