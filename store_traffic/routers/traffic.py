"""
Traffic query endpoints.
GET /traffic/hourly — last 24h rolled up per calendar hour.
GET /traffic/recent — newest events first.
A storage read error returns 503 with an empty, unsuccessful result.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from store_traffic.database import get_db
from store_traffic.schemas.traffic import (
    HourlyTrafficOut, HourlyTrafficResponse, RecentTrafficResponse, TrafficEventOut,
)
from store_traffic.services.traffic_queries import hourly_traffic, recent_traffic
from store_traffic.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _query_failed() -> JSONResponse:
    return JSONResponse(status_code=503, content={"success": False, "count": 0, "data": []})


@router.get("/traffic/hourly", response_model=HourlyTrafficResponse,
            summary="Hourly customer traffic for the last 24 hours")
def get_hourly_traffic(db: Session = Depends(get_db)):
    """Sparse hourly buckets, oldest first. Hours without events are omitted."""
    try:
        buckets = hourly_traffic(db)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching hourly traffic: {e}")
        return _query_failed()

    data = [
        HourlyTrafficOut(
            hour_label=b.hour_label,
            hour_start=b.hour_start,
            customers_in=b.customers_in,
            customers_out=b.customers_out,
            net_change=b.net_change,
        )
        for b in buckets
    ]
    return HourlyTrafficResponse(success=True, count=len(data), data=data)


@router.get("/traffic/recent", response_model=RecentTrafficResponse,
            summary="Most recent customer traffic events")
def get_recent_traffic(limit: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    """Newest first. limit defaults to 10 and is capped at RECENT_MAX_LIMIT."""
    try:
        events = recent_traffic(db, limit)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching recent traffic: {e}")
        return _query_failed()

    data = [TrafficEventOut.model_validate(e) for e in events]
    return RecentTrafficResponse(success=True, count=len(data), data=data)
