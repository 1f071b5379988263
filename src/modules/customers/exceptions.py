"""Customer domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound


class CustomerNotFound(NotFound):
    """The referenced customer does not exist."""
