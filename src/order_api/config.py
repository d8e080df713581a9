"""Configuration for the order and product API tools.

Loads settings from environment variables or .env file. A fresh
``ApiConfig`` is built for every outbound call, so changing the
environment takes effect without restarting the host.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


class TargetService(Enum):
    """Upstream services reachable through the HTTP client."""

    ORDER_QUERIES = "order_queries"
    ORDER_COMMANDS = "order_commands"
    PRODUCT_QUERIES = "product_queries"

    @property
    def label(self) -> str:
        """Short name used in error messages, e.g. ``order``."""
        return "product" if self is TargetService.PRODUCT_QUERIES else "order"


_BASE_URL_ENV = {
    TargetService.ORDER_QUERIES: "ORDER_QUERIES_API_BASE_URL",
    TargetService.ORDER_COMMANDS: "ORDER_COMMANDS_API_BASE_URL",
    TargetService.PRODUCT_QUERIES: "PRODUCT_QUERIES_API_BASE_URL",
}


@dataclass
class ApiConfig:
    """Base URLs, bearer token and header overrides for the upstream APIs."""

    order_queries_base_url: str | None = field(
        default_factory=lambda: os.getenv("ORDER_QUERIES_API_BASE_URL")
    )
    order_commands_base_url: str | None = field(
        default_factory=lambda: os.getenv("ORDER_COMMANDS_API_BASE_URL")
    )
    product_queries_base_url: str | None = field(
        default_factory=lambda: os.getenv("PRODUCT_QUERIES_API_BASE_URL")
    )
    # One token is shared by all three services
    api_token: str | None = field(
        default_factory=lambda: (
            os.getenv("ORDER_API_TOKEN")
            or os.getenv("API_TOKEN")
        )
    )
    # Upstream allow-lists requests by Origin/Referer
    origin_url: str | None = field(
        default_factory=lambda: os.getenv("ORDER_ORIGIN_URL")
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("ORDER_API_USER_AGENT", "AI-Chatbot/1.0")
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )

    def base_url_for(self, service: TargetService) -> str | None:
        """Return the configured base URL of ``service`` (or None)."""
        return {
            TargetService.ORDER_QUERIES: self.order_queries_base_url,
            TargetService.ORDER_COMMANDS: self.order_commands_base_url,
            TargetService.PRODUCT_QUERIES: self.product_queries_base_url,
        }[service]

    def missing_settings(self, service: TargetService) -> list[str]:
        """Names of the environment variables ``service`` needs but lacks."""
        missing = []
        if not self.base_url_for(service):
            missing.append(_BASE_URL_ENV[service])
        if not self.api_token:
            missing.append("ORDER_API_TOKEN")
        return missing

    def build_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.origin_url:
            headers["Origin"] = self.origin_url
            headers["Referer"] = self.origin_url
        return headers
