"""Error taxonomy shared by every module.

Three kinds of failure reach the API boundary:

- ``NotFound``: a referenced customer, enterprise, product or order does
  not exist.
- ``InvalidRequest``: structural, arithmetic, bound or business-rule
  violation (insufficient stock, bad status transition, price mismatch...).
- ``Conflict``: a uniqueness violation (order number already taken).

Module exceptions subclass one of these so views can translate any
``DomainError`` uniformly, while services and tests can still catch the
precise subclass.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from rest_framework import status
from rest_framework.response import Response


class DomainError(Exception):
    """Base class for business-rule failures.

    ``field`` optionally names the offending input (``"items[1].quantity"``,
    ``"order_number"``) so clients can point at it.
    """

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, "field": self.field}


class NotFound(DomainError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidRequest(DomainError):
    code = "invalid_request"
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(DomainError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


def error_response(exc: DomainError) -> Response:
    """Translate a domain error into a DRF response."""
    return Response(exc.to_dict(), status=exc.status_code)
