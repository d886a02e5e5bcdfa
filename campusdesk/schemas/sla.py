"""
SLA Schemas Module

Pydantic schemas for SLA-related API responses.
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List, Union


# ============================================================================
# Dashboard Schemas
# ============================================================================

class SlaStatisticsResponse(BaseModel):
    """SLA and satisfaction statistics for the dashboard."""
    model_config = ConfigDict(populate_by_name=True)

    total: int
    completed: int
    overdue: int
    urgent: int
    warning: int
    on_track: int = Field(..., alias="onTrack")
    compliance_rate: int = Field(..., alias="complianceRate", ge=0, le=100)
    average_rating: float = Field(..., alias="averageRating")
    total_feedback: int = Field(..., alias="totalFeedback")
    generated_at: datetime


class SlaComplaintStatusResponse(BaseModel):
    """SLA badge for a single complaint."""
    complaint_id: str
    band: str
    label: Optional[str]
    urgency: str
    variant: Optional[str]
    due_date: Optional[Union[datetime, str]] = Field(..., description="Raw stored text when it cannot be parsed")


# ============================================================================
# Policy Schemas
# ============================================================================

class SlaPolicyInfo(BaseModel):
    """Resolution window for a category."""
    category: str
    hours: int
    label: str


class SlaPolicyListResponse(BaseModel):
    """All category resolution windows."""
    policies: List[SlaPolicyInfo]
    total: int


# ============================================================================
# Scheduler Schemas
# ============================================================================

class SlaJobInfo(BaseModel):
    id: str
    name: str
    next_run: Optional[str]
    trigger: str


class SlaSchedulerStatusResponse(BaseModel):
    """Status of the background scheduler."""
    status: str
    jobs: List[SlaJobInfo]
