"""HTTP client shared by every tool.

Builds a request against one of the configured upstream services,
attaches the bearer token and static headers, executes it once and
folds every outcome into an ``ApiCallResult``. There are no retries:
failures are surfaced to the calling agent, which decides what to do.

Expected envelope (not enforced here, see ``src.tools.base_tool``)::

    {"isSuccess": true, "response": {...}}
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from .config import ApiConfig, TargetService
from .errors import ConfigurationError, TransportError, UpstreamError

logger = logging.getLogger(__name__)

_BODY_METHODS = ("POST", "PUT")


@dataclass(frozen=True)
class ApiCallResult:
    """Outcome of one upstream call: either ``data`` or ``error`` is set."""

    data: Any = None
    error: Optional[str] = None
    status: Optional[int] = None

    @classmethod
    def ok(cls, data: Any) -> "ApiCallResult":
        return cls(data=data)

    @classmethod
    def failed(cls, error: str, status: Optional[int] = None) -> "ApiCallResult":
        return cls(error=error, status=status)

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        result: dict[str, Any] = {"error": self.error}
        if self.status is not None:
            result["status"] = self.status
        return result


def build_url(base_url: str, endpoint: str) -> str:
    """Join ``endpoint`` onto ``base_url`` keeping any path prefix of the base."""
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def encode_query_params(query_params: Optional[dict[str, Any]]) -> list[tuple[str, str]]:
    """Drop None values and stringify the rest, preserving order."""
    params: list[tuple[str, str]] = []
    for key, value in (query_params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params.append((key, str(value)))
    return params


def extract_error_message(text: str, status: int) -> str:
    """Best-effort error message from a non-2xx body.

    JSON bodies contribute their ``message`` or ``error`` field; other
    bodies are used verbatim. Empty bodies get a generic message.
    """
    fallback = f"API request failed with status {status}"
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        return text or fallback
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return message if isinstance(message, str) else json.dumps(message)
        return fallback
    return text or fallback


class OrderApiClient:
    """Single-attempt JSON client for the order/product services.

    Configuration is read when the client is built; build one per tool
    call (``call_api`` does this) so environment changes are honoured.
    A shared ``aiohttp.ClientSession`` may be injected; otherwise a
    session is opened for the duration of each call.
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or ApiConfig()
        self._session = session

    @property
    def config(self) -> ApiConfig:
        return self._config

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        query_params: Optional[dict[str, Any]] = None,
        service: TargetService = TargetService.ORDER_QUERIES,
    ) -> ApiCallResult:
        """Execute one request and return its ``ApiCallResult``. Never raises."""
        try:
            data = await self.request(
                endpoint,
                method=method,
                body=body,
                query_params=query_params,
                service=service,
            )
        except UpstreamError as exc:
            return ApiCallResult.failed(str(exc), status=exc.status)
        except (ConfigurationError, TransportError) as exc:
            return ApiCallResult.failed(str(exc))
        return ApiCallResult.ok(data)

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        query_params: Optional[dict[str, Any]] = None,
        service: TargetService = TargetService.ORDER_QUERIES,
    ) -> Any:
        """Execute one request and return the parsed JSON body.

        Raises ``ConfigurationError`` before any network activity when
        the base URL or token is missing, ``UpstreamError`` for non-2xx
        replies and ``TransportError`` for everything that prevented a
        usable reply.
        """
        method = method.upper()
        missing = self._config.missing_settings(service)
        if missing:
            logger.error("%s API not configured, missing: %s", service.label, ", ".join(missing))
            raise ConfigurationError(
                f"{service.label.capitalize()} API configuration is missing. "
                f"Please check environment variables ({', '.join(missing)})."
            )

        url = build_url(self._config.base_url_for(service), endpoint)
        kwargs: dict[str, Any] = {
            "headers": self._config.build_headers(),
            "params": encode_query_params(query_params),
        }
        if body is not None and method in _BODY_METHODS:
            kwargs["data"] = json.dumps(body)

        logger.info("%s API call: %s %s", service.label.capitalize(), method, url)
        try:
            if self._session is not None:
                return await self._send(self._session, method, url, service, **kwargs)
            async with aiohttp.ClientSession() as session:
                return await self._send(session, method, url, service, **kwargs)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("%s API unreachable: %s %s (%r)", service.label, method, url, exc)
            raise TransportError(
                f"Failed to connect to {service.label} API: {exc or type(exc).__name__}"
            ) from exc

    async def _send(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        service: TargetService,
        **kwargs: Any,
    ) -> Any:
        async with session.request(method, url, **kwargs) as resp:
            if not 200 <= resp.status < 300:
                try:
                    text = await resp.text()
                except (aiohttp.ClientError, UnicodeDecodeError):
                    message = f"API request failed with status {resp.status} (Could not read error details)"
                else:
                    message = extract_error_message(text, resp.status)
                logger.warning(
                    "%s API error: %s %s -> HTTP %s (%s)",
                    service.label.capitalize(),
                    method,
                    url,
                    resp.status,
                    message,
                )
                raise UpstreamError(message, resp.status)

            try:
                return json.loads(await resp.text())
            except ValueError as exc:
                raise TransportError(
                    f"Failed to connect to {service.label} API: invalid JSON in response ({exc})"
                ) from exc


async def call_api(
    endpoint: str,
    method: str = "GET",
    body: Any = None,
    query_params: Optional[dict[str, Any]] = None,
    service: TargetService = TargetService.ORDER_QUERIES,
) -> ApiCallResult:
    """Call ``endpoint`` with configuration read from the environment now."""
    return await OrderApiClient().call(
        endpoint,
        method=method,
        body=body,
        query_params=query_params,
        service=service,
    )
