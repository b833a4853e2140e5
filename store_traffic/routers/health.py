"""
System health check endpoint.
Returns status of backend + DB + persistence mode + process uptime.
"""

import time
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from store_traffic.database import get_db, ping
from store_traffic.config import settings
from store_traffic.utils.clock import as_utc, utc_now

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Event persistence mode (connected | degraded)
    - Process uptime in seconds
    """
    state = request.app.state
    result = {
        "status": "ok",
        "timestamp": as_utc(utc_now()).isoformat(),
        "backend": "ok",
        "database": "unknown",
        "storage_mode": state.sink.mode.value,
        "uptime_seconds": round(time.monotonic() - state.started_at, 1),
        "stores": settings.STORE_IDS,
    }

    # Check database
    try:
        ping(db)
        result["database"] = "ok"
    except SQLAlchemyError as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    if not state.sink.is_connected:
        result["status"] = "degraded"

    return result
