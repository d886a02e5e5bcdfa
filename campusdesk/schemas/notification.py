"""
Notification Schemas

Pydantic schemas for notification API endpoints.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from campusdesk.models.notification import NotificationType


class NotificationResponse(BaseModel):
    """Schema for a notification."""
    id: str
    user_id: str
    complaint_id: Optional[str]
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ReminderRunResponse(BaseModel):
    """Result of a stale-complaint reminder run."""
    stale_count: int
    notifications_sent: int
    processed_at: str
