"""
Complaint Schemas Module

Pydantic schemas for complaint API requests and responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Union
from campusdesk.models.complaint import ComplaintCategory, ComplaintStatus


class ComplaintCreate(BaseModel):
    """Schema for filing a new complaint."""
    student_id: str = Field(..., min_length=1, description="ID of the student filing the complaint")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: ComplaintCategory


class ComplaintUpdate(BaseModel):
    """Schema for staff/admin updates to a complaint."""
    status: Optional[ComplaintStatus] = None
    resolution_note: Optional[str] = None
    admin_id: Optional[str] = Field(None, description="Admin user making the update")
    assigned_to: Optional[str] = Field(None, description="Staff ID to assign the complaint to")


class ComplaintFeedback(BaseModel):
    """Schema for student feedback on a completed complaint."""
    rating: int = Field(..., ge=1, le=5, description="Satisfaction rating from 1 to 5")
    feedback: Optional[str] = None


class SlaIndicatorInfo(BaseModel):
    """SLA badge for a complaint."""
    band: str
    label: Optional[str]
    urgency: str
    variant: Optional[str] = Field(None, description="Badge variant for the band")


class ComplaintResponse(BaseModel):
    """Schema for complaint response."""
    id: str
    student_id: str
    title: str
    description: str
    category: ComplaintCategory
    status: ComplaintStatus
    due_date: Optional[Union[datetime, str]] = Field(..., description="Raw stored text when it cannot be parsed")
    admin_id: Optional[str]
    assigned_to: Optional[str]
    resolution_note: Optional[str]
    rating: Optional[int]
    feedback: Optional[str]
    created_at: datetime
    updated_at: datetime

    # Presentation
    category_icon: Optional[str] = None
    status_color: Optional[str] = None
    sla: Optional[SlaIndicatorInfo] = None

    class Config:
        from_attributes = True


class ComplaintListResponse(BaseModel):
    """List of complaints."""
    complaints: List[ComplaintResponse]
    total: int
