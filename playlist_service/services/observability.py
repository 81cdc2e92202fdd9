"""
Observability client that forwards logs and metrics to the monitoring service.

Uses Settings:
- OBS_ENABLED (bool): enable/disable sending
- OBS_ENDPOINT (str): base URL of the monitoring service (e.g., http://monitoring:8000)
- OBS_API_KEY (str): bearer token for authentication
- OBS_SERVICE_NAME, OBS_ENVIRONMENT: metadata

Endpoints:
- POST {OBS_ENDPOINT}/logs/ingest
- POST {OBS_ENDPOINT}/metrics/ingest

Forwarding is best-effort: a failed POST is logged locally at DEBUG and never
reaches the request being served.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from playlist_service.core.config import get_settings
from playlist_service.core.logging import get_correlation_id, get_logger

logger = get_logger("playlist_service.observability")

_TIMEOUT_SECONDS = 3.0


def _auth_headers() -> Dict[str, str]:
    settings = get_settings()
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    if settings.OBS_API_KEY:
        headers["Authorization"] = f"Bearer {settings.OBS_API_KEY}"
    return headers


def _metadata(extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"environment": get_settings().OBS_ENVIRONMENT}
    if extra:
        meta.update(extra)
    cid = get_correlation_id()
    if cid:
        meta["correlation_id"] = cid
    return meta


async def _post(path: str, payload: Dict[str, Any]) -> None:
    settings = get_settings()
    if not settings.OBS_ENABLED or not settings.OBS_ENDPOINT:
        return
    url = settings.OBS_ENDPOINT.rstrip("/") + path
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
            await client.post(url, headers=_auth_headers(), json=payload)
    except httpx.HTTPError as exc:
        logger.debug("observability.forward_failed", extra={"url": url, "error": str(exc)})


# PUBLIC_INTERFACE
async def send_log(level: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Forward a log entry to the monitoring service."""
    await _post(
        "/logs/ingest",
        {
            "source": get_settings().OBS_SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "message": message,
            "metadata": _metadata(metadata),
        },
    )


# PUBLIC_INTERFACE
async def send_metric(name: str, metrics: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> None:
    """Forward a metrics sample to the monitoring service."""
    await _post(
        "/metrics/ingest",
        {
            "source": get_settings().OBS_SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "metrics": {"name": name, **metrics},
            "metadata": _metadata(metadata),
        },
    )
