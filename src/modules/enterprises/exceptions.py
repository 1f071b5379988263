"""Enterprise domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound


class EnterpriseNotFound(NotFound):
    """The referenced enterprise does not exist."""
