"""
Structured logging utilities for the playlist service with correlation IDs.

Provides:
- get_logger: JSON structured logger
- correlation ID management for per-request tracing via contextvars
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from playlist_service.core.config import get_settings

_cid_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        settings = get_settings()
        base: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": settings.OBS_SERVICE_NAME,
            "environment": settings.OBS_ENVIRONMENT,
        }

        cid = get_correlation_id()
        if cid:
            base["correlation_id"] = cid

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in base:
                base[key] = value

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False, default=str)


def _configure_root_logger() -> None:
    """Configure root logger once."""
    root = logging.getLogger()
    if getattr(root, "_playlist_service_configured", False):
        return
    root.setLevel(get_settings().LOG_LEVEL.upper())
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers = [handler]
    setattr(root, "_playlist_service_configured", True)


# PUBLIC_INTERFACE
def get_logger(name: str = "playlist_service") -> logging.Logger:
    """Get a structured logger configured for the service."""
    _configure_root_logger()
    return logging.getLogger(name)


# PUBLIC_INTERFACE
def set_correlation_id(correlation_id: Optional[str]) -> str:
    """Set the current correlation ID in context, generating one if missing.

    Returns the correlation id that is set.
    """
    if not correlation_id:
        correlation_id = str(uuid.uuid4())
    _cid_ctx.set(correlation_id)
    return correlation_id


# PUBLIC_INTERFACE
def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context if set."""
    return _cid_ctx.get()


# PUBLIC_INTERFACE
def clear_correlation_id() -> None:
    """Clear correlation ID from context (set to None)."""
    _cid_ctx.set(None)
