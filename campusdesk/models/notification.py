"""
Notification Models

In-app notifications raised for complaint reminders, status changes and SLA breaches.
"""

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum, Text
from sqlalchemy.orm import relationship
import uuid
import enum
from campusdesk.core.clock import utcnow_naive
from campusdesk.core.database import Base


class NotificationType(str, enum.Enum):
    """Kinds of events that produce a notification."""
    REMINDER = "reminder"
    STATUS_CHANGE = "status_change"
    SLA_BREACH = "sla_breach"


class Notification(Base):
    """A notification addressed to a single user."""
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    complaint_id = Column(String, ForeignKey("complaints.id"), index=True)

    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(SQLEnum(NotificationType), nullable=False, index=True)

    is_read = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False, index=True)

    # Relationships
    complaint = relationship("Complaint", back_populates="notifications")
