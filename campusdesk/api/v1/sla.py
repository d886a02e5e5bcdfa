"""
SLA API Endpoints

Provides REST API endpoints for the SLA dashboard, per-complaint badges,
category resolution windows and the reminder/gauge jobs.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from campusdesk.api.v1.complaints import to_response
from campusdesk.core.database import get_db
from campusdesk.jobs.reminder_batch import get_scheduler_status
from campusdesk.models.complaint import ComplaintCategory
from campusdesk.services import sla_service
from campusdesk.services.sla_service import SlaService
from campusdesk.services.reminder_service import ReminderService
from campusdesk.services.presentation import BAND_VARIANTS
from campusdesk.services.complaint_service import ComplaintNotFound
from campusdesk.services.sla_engine import InvalidTimestamp
from campusdesk.services.sla_policy import describe_policies
from campusdesk.schemas.complaint import ComplaintListResponse
from campusdesk.schemas.notification import ReminderRunResponse
from campusdesk.schemas.sla import (
    SlaStatisticsResponse,
    SlaComplaintStatusResponse,
    SlaPolicyInfo,
    SlaPolicyListResponse,
    SlaSchedulerStatusResponse,
)


logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# Dashboard Endpoints
# ============================================================================

@router.get("/statistics", response_model=SlaStatisticsResponse, response_model_by_alias=True)
async def get_sla_statistics(
    category: Optional[ComplaintCategory] = Query(None, description="Restrict to one category"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get SLA compliance and satisfaction statistics.

    Every complaint is evaluated against the same instant, returned as
    generated_at.
    """
    try:
        stats, now = await SlaService(db).get_statistics(category=category)
    except InvalidTimestamp as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return SlaStatisticsResponse(**stats.to_dict(), generated_at=now)


@router.get("/complaints/{complaint_id}", response_model=SlaComplaintStatusResponse)
async def get_complaint_sla_status(
    complaint_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get the SLA badge for a single complaint."""
    try:
        complaint, indicator = await SlaService(db).get_complaint_indicator(complaint_id)
    except InvalidTimestamp as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    except ComplaintNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return SlaComplaintStatusResponse(
        complaint_id=complaint.id,
        variant=BAND_VARIANTS[indicator.band],
        due_date=complaint.due_date,
        **indicator.to_dict()
    )


@router.get("/overdue", response_model=ComplaintListResponse)
async def list_overdue_complaints(
    db: AsyncSession = Depends(get_db)
):
    """List open complaints past their due date, earliest due first."""
    now = sla_service.utcnow()

    try:
        complaints = await SlaService(db).get_overdue_complaints(now=now)
        indicators = sla_service.indicators_for(complaints, now)
    except InvalidTimestamp as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return ComplaintListResponse(
        complaints=[to_response(c, i) for c, i in zip(complaints, indicators)],
        total=len(complaints)
    )


# ============================================================================
# Policy Endpoints
# ============================================================================

@router.get("/policies", response_model=SlaPolicyListResponse)
async def list_sla_policies():
    """List the resolution window for every complaint category."""
    policies = [SlaPolicyInfo(**policy) for policy in describe_policies()]
    return SlaPolicyListResponse(policies=policies, total=len(policies))


# ============================================================================
# Job Endpoints
# ============================================================================

@router.get("/scheduler/status", response_model=SlaSchedulerStatusResponse)
async def get_sla_scheduler_status():
    """
    Get the current status of the job scheduler.

    Lists the reminder and gauge jobs with their next run time.
    """
    return SlaSchedulerStatusResponse(**get_scheduler_status())


@router.post("/reminders/run", response_model=ReminderRunResponse)
async def run_reminders(
    db: AsyncSession = Depends(get_db)
):
    """
    Run the stale-complaint reminder job now.

    Notifies the handling admin and the assigned staff member of every open
    complaint that has not been updated within the stale window.
    """
    summary = await ReminderService(db).send_reminders(now=sla_service.utcnow())
    logger.info(f"Manual reminder run: {summary}")
    return ReminderRunResponse(**summary)
