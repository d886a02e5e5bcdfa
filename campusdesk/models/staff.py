from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid
import enum
from campusdesk.core.clock import utcnow_naive
from campusdesk.core.database import Base


class StaffRole(str, enum.Enum):
    WARDEN = "warden"
    HOD = "hod"
    TRANSPORT_OFFICER = "transport_officer"
    ADMIN = "admin"


class Staff(Base):
    """Staff members who complaints can be assigned to."""
    __tablename__ = "staff"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)

    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(SQLEnum(StaffRole), nullable=False)
    department = Column(String)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow_naive, nullable=False)

    # Relationships
    complaints = relationship("Complaint", back_populates="assignee")
