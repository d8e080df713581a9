"""Order status codes understood by the order command service.

The upstream stores status as a small integer; agents and users speak
in names ("Shipped", "in review"). ``OrderStatus`` is the single table
for both directions: the canonical name is derived from the member
name, so ``code_to_name`` and ``name_to_code`` cannot drift apart.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Any, Optional

from .errors import ValidationError

_WHITESPACE_RE = re.compile(r"\s+")


class OrderStatus(IntEnum):
    DRAFT = 1
    AWAITING_APPROVAL = 2
    APPROVAL_REJECTED = 3
    NEW = 4
    IN_REVIEW = 5
    PROCESSING = 6
    IN_PROGRESS = 7
    WAITING_FOR_DROPSHIPMENT = 8
    WAITING_FOR_ACKNOWLEDGMENT = 9
    WAITING_FOR_SHIPMENT = 10
    PARTIALLY_SHIPPED = 11
    SHIPPED = 12
    DELIVERED = 13
    COMPLETED = 14
    CANCELED = 15
    RETURNED = 16
    PARTIALLY_RETURNED = 17
    CANCELLATION_REQUESTED = 18

    @property
    def label(self) -> str:
        """Canonical upstream name, e.g. ``WaitingForShipment``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


MIN_CODE = min(OrderStatus)
MAX_CODE = max(OrderStatus)

_BY_KEY = {status.label.lower(): status for status in OrderStatus}


def _key(name: str) -> str:
    return _WHITESPACE_RE.sub("", name).lower()


def name_to_code(name: str) -> Optional[int]:
    """Look up a status code by name, ignoring case and whitespace."""
    if not isinstance(name, str):
        return None
    status = _BY_KEY.get(_key(name))
    return int(status) if status is not None else None


def code_to_name(code: Any) -> Optional[str]:
    """Canonical name for ``code``, or None when it is not a known code."""
    if isinstance(code, bool):
        return None
    try:
        return OrderStatus(int(code)).label
    except (TypeError, ValueError):
        return None


def canonicalize(name: str) -> Optional[str]:
    """Canonical spelling of a status name, e.g. ``"in review"`` -> ``"InReview"``."""
    code = name_to_code(name)
    return code_to_name(code) if code is not None else None


def available_statuses() -> list[dict[str, Any]]:
    """All statuses as ``{"code", "name"}`` dicts, in code order."""
    return [{"code": int(status), "name": status.label} for status in OrderStatus]


def resolve_status(value: str | int) -> OrderStatus:
    """Resolve a status given by name or by numeric code.

    Names are tried first. Otherwise the value is read as an integer and
    accepted when it lies in [1, 18]. Anything else raises
    ``ValidationError`` listing every valid name and code so the caller
    can correct itself.
    """
    if isinstance(value, str):
        code = name_to_code(value)
        if code is not None:
            return OrderStatus(code)
        candidate = value.strip()
    else:
        candidate = value

    if not isinstance(candidate, bool):
        try:
            number = int(candidate)
        except (TypeError, ValueError):
            number = None
        if number is not None and MIN_CODE <= number <= MAX_CODE:
            return OrderStatus(number)

    choices = available_statuses()
    listing = ", ".join(f"{c['name']} ({c['code']})" for c in choices)
    raise ValidationError(
        f"Invalid status: {value}. Valid statuses: {listing}",
        choices=choices,
    )
