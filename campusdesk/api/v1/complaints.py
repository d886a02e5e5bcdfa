"""
Complaint API Endpoints

Filing, listing, updating and rating complaints. Every response carries
the complaint's SLA badge.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Optional
import logging

from campusdesk.core.database import get_db
from campusdesk.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from campusdesk.services import sla_service
from campusdesk.services.complaint_service import (
    ComplaintService,
    ComplaintNotFound,
    FeedbackNotAllowed,
)
from campusdesk.services.presentation import BAND_VARIANTS, CATEGORY_ICONS, STATUS_COLORS
from campusdesk.services.sla_engine import InvalidTimestamp, SLAIndicator
from campusdesk.schemas.complaint import (
    ComplaintCreate,
    ComplaintUpdate,
    ComplaintFeedback,
    ComplaintResponse,
    ComplaintListResponse,
    SlaIndicatorInfo,
)


logger = logging.getLogger(__name__)
router = APIRouter()


def to_response(complaint: Complaint, indicator: SLAIndicator) -> ComplaintResponse:
    response = ComplaintResponse.model_validate(complaint)
    response.category_icon = CATEGORY_ICONS[complaint.category]
    response.status_color = STATUS_COLORS[complaint.status]
    response.sla = SlaIndicatorInfo(**indicator.to_dict(), variant=BAND_VARIANTS[indicator.band])
    return response


def _respond_one(complaint: Complaint, now: Optional[datetime] = None) -> ComplaintResponse:
    now = now or sla_service.utcnow()
    try:
        indicator = sla_service.indicators_for([complaint], now)[0]
    except InvalidTimestamp as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    return to_response(complaint, indicator)


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    complaint_data: ComplaintCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    File a new complaint.

    The due date is set from the category's resolution window.
    """
    complaint_service = ComplaintService(db)
    complaint = await complaint_service.create_complaint(
        student_id=complaint_data.student_id,
        title=complaint_data.title,
        description=complaint_data.description,
        category=complaint_data.category
    )
    return _respond_one(complaint)


@router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None, alias="status", description="Filter by status"),
    category: Optional[ComplaintCategory] = Query(None, description="Filter by category"),
    student_id: Optional[str] = Query(None, description="Only complaints filed by this student"),
    assigned_to: Optional[str] = Query(None, description="Only complaints assigned to this staff member"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """
    List complaints, newest first.

    All badges in one response are computed against the same instant.
    """
    complaint_service = ComplaintService(db)
    filters = dict(
        status=status_filter,
        category=category,
        student_id=student_id,
        assigned_to=assigned_to
    )
    complaints = await complaint_service.list_complaints(**filters, skip=skip, limit=limit)
    total = await complaint_service.count_complaints(**filters)

    now = sla_service.utcnow()
    try:
        indicators = sla_service.indicators_for(complaints, now)
    except InvalidTimestamp as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return ComplaintListResponse(
        complaints=[to_response(c, i) for c, i in zip(complaints, indicators)],
        total=total
    )


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a single complaint by ID."""
    complaint_service = ComplaintService(db)
    complaint = await complaint_service.get_complaint(complaint_id)

    if not complaint:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Complaint not found"
        )

    return _respond_one(complaint)


@router.patch("/{complaint_id}", response_model=ComplaintResponse)
async def update_complaint(
    complaint_id: str,
    complaint_update: ComplaintUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Update a complaint's status, resolution note, handling admin or assignee.

    A status change notifies the student who filed the complaint.
    """
    complaint_service = ComplaintService(db)

    try:
        complaint = await complaint_service.update_complaint(
            complaint_id,
            **complaint_update.model_dump(exclude_unset=True)
        )
    except ComplaintNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return _respond_one(complaint)


@router.post("/{complaint_id}/feedback", response_model=ComplaintResponse)
async def submit_feedback(
    complaint_id: str,
    feedback_data: ComplaintFeedback,
    db: AsyncSession = Depends(get_db)
):
    """
    Rate a resolved or closed complaint.

    Returns 409 if the complaint is still open or in progress.
    """
    complaint_service = ComplaintService(db)

    try:
        complaint = await complaint_service.submit_feedback(
            complaint_id,
            rating=feedback_data.rating,
            feedback=feedback_data.feedback
        )
    except ComplaintNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except FeedbackNotAllowed as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    return _respond_one(complaint)
