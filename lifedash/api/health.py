"""
Health endpoint for observability.

Returns uptime, version and database connectivity. Requires no
authentication.
"""

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Start time for uptime calculation
_start_time: float = time.monotonic()


def set_start_time() -> None:
    """Reset the start time (called during app startup)."""
    global _start_time
    _start_time = time.monotonic()


def get_uptime_seconds() -> float:
    """Return seconds since the process started."""
    return time.monotonic() - _start_time


async def check_database_health() -> bool:
    """Check database connectivity.

    Returns True if database is reachable, False otherwise.
    """
    try:
        from ..core.database import health_check

        return await health_check()
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return False


def _get_version() -> str:
    try:
        from ..version import __version__

        return __version__
    except Exception:
        return "unknown"


async def build_health() -> Dict[str, Any]:
    database_ok = await check_database_health()
    return {
        "status": "ok" if database_ok else "degraded",
        "version": _get_version(),
        "uptime_seconds": round(get_uptime_seconds(), 1),
        "subsystems": [{"name": "database", "status": "ok" if database_ok else "error"}],
    }


@router.get("/health")
async def health() -> JSONResponse:
    payload = await build_health()
    status_code = 200 if payload["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=payload)
