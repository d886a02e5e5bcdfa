"""
Metrics API endpoints for CampusDesk.

Provides Prometheus-format metrics export, a JSON summary and a
readiness probe.
"""

from fastapi import APIRouter, Response, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging

from campusdesk.core.database import get_db
from campusdesk.services.metrics_service import metrics_collector

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Export metrics in Prometheus text format for scraping",
    tags=["monitoring"]
)
async def get_prometheus_metrics():
    """
    Export metrics in Prometheus format.

    Includes HTTP request counts and durations, complaint counts per SLA
    band, the compliance rate, the average rating and uptime.
    """
    return Response(
        content=metrics_collector.get_prometheus_metrics(),
        media_type=metrics_collector.get_prometheus_content_type(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0"
        }
    )


@router.get(
    "/metrics/stats",
    summary="JSON Statistics Summary",
    tags=["monitoring"]
)
async def get_stats_summary():
    """Get a JSON summary of application and SLA metrics."""
    return metrics_collector.get_summary()


@router.get(
    "/metrics/ready",
    summary="Readiness Check",
    description="Simple readiness probe for container orchestration",
    tags=["monitoring"]
)
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness probe.

    Returns 200 if the database is reachable, 503 if not.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            content={"ready": False, "reason": "database unavailable"},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return {"ready": True}
