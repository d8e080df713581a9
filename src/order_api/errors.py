"""Error types raised inside the tool layer.

Tools never let these escape: each tool function catches them and
returns an ``{"error": ..., "message": ...}`` dict instead.
"""

from __future__ import annotations

from typing import Any, Optional


class OrderApiError(RuntimeError):
    """Base class for all tool-layer failures."""


class ConfigurationError(OrderApiError):
    """A base URL or the API token is not configured."""


class TransportError(OrderApiError):
    """The request never produced a usable response (network, DNS, bad JSON)."""


class UpstreamError(OrderApiError):
    """The upstream answered with a non-2xx status."""

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


class ContractMismatchError(OrderApiError):
    """The upstream answered 2xx but the envelope lacks the expected fields."""

    def __init__(self, message: str = "Unexpected response format", payload: Any = None):
        super().__init__(message)
        self.payload = payload


class ValidationError(OrderApiError):
    """Tool input was rejected locally, before any network call."""

    def __init__(self, message: str, choices: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.choices = choices or []
