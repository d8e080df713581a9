"""Shared helpers for the tool implementations.

The order and product services have grown several response shapes over
time: the same logical field may arrive as ``status`` or ``orderStatus``,
``orderDetailId`` or ``id``. ``FieldCandidates`` states that policy once
per field instead of repeating ``a or b`` at every call site.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Callable, Optional, Union

from src.order_api.errors import ContractMismatchError, ValidationError

MAX_PAGE_SIZE = 100

Candidate = Union[str, Callable[[dict], Any]]


def is_empty(value: Any) -> bool:
    """None, blank strings and empty containers count as missing; 0 and False do not."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple)):
        return not value
    return False


class FieldCandidates:
    """Ordered list of upstream fields that may carry one logical value.

    Candidates are evaluated left to right and the first non-empty one
    wins. A candidate is either a key or a callable deriving the value
    from the record (e.g. the length of an ``items`` list).
    """

    def __init__(self, *candidates: Candidate, default: Any = None) -> None:
        self.candidates = candidates
        self.default = default

    def pick(self, record: Any) -> Any:
        if not isinstance(record, dict):
            return self.default
        for candidate in self.candidates:
            value = candidate(record) if callable(candidate) else record.get(candidate)
            if not is_empty(value):
                return value
        return self.default

    def __repr__(self) -> str:
        names = [c if isinstance(c, str) else getattr(c, "__name__", "derived") for c in self.candidates]
        return f"FieldCandidates({', '.join(names)})"


def items_length(record: dict) -> Optional[int]:
    items = record.get("items")
    return len(items) if isinstance(items, list) else None


def unwrap_envelope(payload: Any) -> Optional[Any]:
    """Return ``response`` of a ``{"isSuccess": true, "response": ...}`` envelope.

    Returns None when the payload does not follow the convention, so the
    caller can fall back to passing it through.
    """
    if not isinstance(payload, dict) or not payload.get("isSuccess"):
        return None
    response = payload.get("response")
    if response is None or response is False:
        return None
    return response


def require_response(payload: Any) -> Any:
    """Like ``unwrap_envelope`` but only requires the ``response`` key."""
    if not isinstance(payload, dict) or payload.get("response") is None:
        raise ContractMismatchError(payload=payload)
    return payload["response"]


def clamp_page_size(value: Any, default: int) -> int:
    """Apply the default for a missing or non-numeric size and clamp to [1, MAX_PAGE_SIZE]."""
    size = as_int(value, default) or default
    return max(1, min(size, MAX_PAGE_SIZE))


def page_or_default(value: Any, default: int = 1) -> int:
    return max(1, as_int(value, default) or default)


def total_pages(total_count: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total_count / page_size)


def as_int(value: Any, default: int = 0) -> int:
    """Coerce a numeric upstream value, using ``default`` when it is absent or junk."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def as_str(value: Any) -> str:
    return "" if value is None else str(value)


def validate_iso_date(value: Optional[str], field_name: str) -> Optional[str]:
    """Accept ``YYYY-MM-DD`` (or None); raise ``ValidationError`` otherwise."""
    if value is None or value == "":
        return None
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid {field_name}: {value!r}. Expected an ISO date (YYYY-MM-DD)."
        ) from None
    return value


def error_result(error: str, message: str, **extra: Any) -> dict[str, Any]:
    """Tool-boundary error shape: technical ``error`` plus a user-facing ``message``."""
    return {"error": error, "message": message, **extra}
