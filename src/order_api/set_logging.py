"""Logging setup for entry points (MCP server, mock API, examples)."""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

from .config import ApiConfig

LOG_FORMAT = "%(asctime)s:%(name)s:%(levelname)s:%(message)s"


def configure_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> None:
    """Configure the root logger at ``level`` or ``ApiConfig.log_level``.

    The MCP server passes ``sys.stderr`` because stdout carries the MCP
    protocol.
    """
    log_level = (level or ApiConfig().log_level).upper()
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        stream=stream or sys.stderr,
        force=True,
    )
