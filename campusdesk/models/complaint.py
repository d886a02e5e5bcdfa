from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum, Text, Integer, CheckConstraint
from sqlalchemy.orm import relationship
import uuid
import enum
from campusdesk.core.clock import utcnow_naive
from campusdesk.core.database import Base
from campusdesk.core.types import LenientDateTime


class ComplaintCategory(str, enum.Enum):
    ACADEMIC = "academic"
    TECHNICAL = "technical"
    HOSTEL = "hostel"
    INFRASTRUCTURE = "infrastructure"
    OTHER = "other"


class ComplaintStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def is_completed(self) -> bool:
        return self in (ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED)


class Complaint(Base):
    __tablename__ = "complaints"
    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_complaints_rating_range"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String, nullable=False, index=True)

    # Complaint info
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(ComplaintCategory), nullable=False, default=ComplaintCategory.OTHER, index=True)

    # Status
    status = Column(SQLEnum(ComplaintStatus), nullable=False, default=ComplaintStatus.OPEN, index=True)

    # SLA tracking (set from the category policy on creation)
    due_date = Column(LenientDateTime, index=True)

    # Handling
    admin_id = Column(String)  # Last admin user who updated the complaint
    assigned_to = Column(String, ForeignKey("staff.id"), index=True)
    resolution_note = Column(Text)

    # Student feedback
    rating = Column(Integer)
    feedback = Column(Text)

    # Timestamps
    created_at = Column(DateTime, default=utcnow_naive, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive, nullable=False)

    # Relationships
    assignee = relationship("Staff", back_populates="complaints")
    notifications = relationship("Notification", back_populates="complaint", cascade="all, delete-orphan")
