"""Order domain constants.

Status choices, the transition table of the order state machine and the
fixed bounds applied by the order validator.
"""

import re
from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Absolute tolerance for every money comparison; amounts agree when
# ``abs(a - b) < MONEY_TOLERANCE``.
MONEY_TOLERANCE = Decimal("0.01")

MAX_ITEM_QUANTITY = 100
MAX_TOTAL_QUANTITY = 50
PRODUCT_NAME_MAX_LENGTH = 255
ORDER_NUMBER_MAX_LENGTH = 50
ORDER_NUMBER_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
NOTES_MAX_LENGTH = 1000
