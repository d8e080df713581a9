"""Order API core: configuration, HTTP client, status codes and result rendering."""

from .client import ApiCallResult, OrderApiClient, call_api
from .config import ApiConfig, TargetService
from .errors import (
    ConfigurationError,
    ContractMismatchError,
    OrderApiError,
    TransportError,
    UpstreamError,
    ValidationError,
)
from .status_codes import OrderStatus, code_to_name, name_to_code, resolve_status

__all__ = [
    "ApiCallResult",
    "OrderApiClient",
    "call_api",
    "ApiConfig",
    "TargetService",
    "ConfigurationError",
    "ContractMismatchError",
    "OrderApiError",
    "TransportError",
    "UpstreamError",
    "ValidationError",
    "OrderStatus",
    "code_to_name",
    "name_to_code",
    "resolve_status",
]
