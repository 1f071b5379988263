"""Repository contract shared by every module.

Services receive repositories through their constructor and only see this
interface; the Django ORM stays behind ``*DjangoRepository`` classes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Persistence port for one aggregate type ``T``.

    Look-ups with an unknown or malformed id return ``None``/``False``
    instead of raising; turning that into a domain error is the caller's job.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]: ...

    @abstractmethod
    def exists(self, id: str) -> bool: ...

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """Entities matching ``filters`` (ORM look-up kwargs)."""

    @abstractmethod
    def save(self, entity: T) -> T: ...

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Hard delete; ``False`` when nothing matched."""
