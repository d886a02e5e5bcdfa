"""
Complaint Service Module

Repository-style access to complaints: filing, filtered listing, staff
updates and student feedback.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
import logging

from campusdesk.core.clock import utcnow_naive
from campusdesk.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from campusdesk.models.notification import Notification, NotificationType
from campusdesk.models.staff import Staff
from campusdesk.services.presentation import status_label
from campusdesk.services.sla_policy import compute_due_date


logger = logging.getLogger(__name__)


class ComplaintNotFound(ValueError):
    """Raised when a complaint or a referenced row does not exist."""


class FeedbackNotAllowed(ValueError):
    """Raised when feedback is submitted for a complaint that is still open."""


class ComplaintService:
    """
    Service for complaint persistence and workflow.

    Provides methods for:
    - Filing complaints with a category-based due date
    - Listing complaints with filters
    - Status, assignment and resolution updates
    - Recording student feedback
    """

    UPDATABLE_FIELDS = ("status", "resolution_note", "admin_id", "assigned_to")

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_complaint(
        self,
        student_id: str,
        title: str,
        description: str,
        category: ComplaintCategory
    ) -> Complaint:
        """
        File a new complaint.

        The due date is stamped from the category resolution window.

        Args:
            student_id: ID of the filing student
            title: Short summary
            description: Full description
            category: Complaint category

        Returns:
            Created Complaint object
        """
        created_at = utcnow_naive()
        category = ComplaintCategory(category)

        complaint = Complaint(
            student_id=student_id,
            title=title,
            description=description,
            category=category,
            status=ComplaintStatus.OPEN,
            due_date=compute_due_date(category, created_at),
            created_at=created_at,
            updated_at=created_at
        )

        self.db.add(complaint)
        await self.db.commit()
        await self.db.refresh(complaint)

        logger.info(
            f"Filed complaint {complaint.id}: category={category.value}, "
            f"due_date={complaint.due_date.isoformat()}"
        )

        return complaint

    async def get_complaint(self, complaint_id: str) -> Optional[Complaint]:
        """Get a complaint by ID."""
        result = await self.db.execute(
            select(Complaint).where(Complaint.id == complaint_id)
        )
        return result.scalar_one_or_none()

    async def list_complaints(
        self,
        status: Optional[ComplaintStatus] = None,
        category: Optional[ComplaintCategory] = None,
        student_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Complaint]:
        """
        List complaints, newest first.

        Args:
            status: Optional status filter
            category: Optional category filter
            student_id: Only complaints filed by this student
            assigned_to: Only complaints assigned to this staff member
            skip: Offset
            limit: Maximum rows

        Returns:
            List of complaints
        """
        query = self._apply_filters(select(Complaint), status, category, student_id, assigned_to)
        query = query.order_by(Complaint.created_at.desc()).offset(skip).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_complaints(
        self,
        status: Optional[ComplaintStatus] = None,
        category: Optional[ComplaintCategory] = None,
        student_id: Optional[str] = None,
        assigned_to: Optional[str] = None
    ) -> int:
        """Count complaints matching the same filters as list_complaints, ignoring paging."""
        query = self._apply_filters(
            select(func.count(Complaint.id)), status, category, student_id, assigned_to
        )
        result = await self.db.execute(query)
        return result.scalar_one()

    @staticmethod
    def _apply_filters(query, status, category, student_id, assigned_to):
        if status:
            query = query.where(Complaint.status == status)

        if category:
            query = query.where(Complaint.category == category)

        if student_id:
            query = query.where(Complaint.student_id == student_id)

        if assigned_to:
            query = query.where(Complaint.assigned_to == assigned_to)

        return query

    async def update_complaint(
        self,
        complaint_id: str,
        **updates
    ) -> Complaint:
        """
        Apply a staff/admin update to a complaint.

        Only status, resolution_note, admin_id and assigned_to can change.
        A status change notifies the filing student.

        Args:
            complaint_id: The complaint ID
            **updates: Fields to update

        Returns:
            Updated Complaint object

        Raises:
            ComplaintNotFound: If the complaint or the assignee does not exist
        """
        complaint = await self.get_complaint(complaint_id)

        if not complaint:
            raise ComplaintNotFound(f"Complaint not found: {complaint_id}")

        assignee_id = updates.get("assigned_to")
        if assignee_id:
            staff = await self.db.get(Staff, assignee_id)
            if not staff or not staff.is_active:
                raise ComplaintNotFound(f"Active staff member not found: {assignee_id}")

        previous_status = complaint.status

        for field, value in updates.items():
            if field in self.UPDATABLE_FIELDS and value is not None:
                setattr(complaint, field, value)

        complaint.updated_at = utcnow_naive()

        if complaint.status != previous_status:
            self.db.add(Notification(
                user_id=complaint.student_id,
                complaint_id=complaint.id,
                title="Complaint Status Updated",
                message=(
                    f'Your complaint "{complaint.title}" is now '
                    f"{status_label(complaint.status)}"
                ),
                type=NotificationType.STATUS_CHANGE
            ))
            logger.info(
                f"Complaint {complaint.id} status changed: "
                f"{previous_status.value} -> {complaint.status.value}"
            )

        await self.db.commit()
        await self.db.refresh(complaint)

        return complaint

    async def submit_feedback(
        self,
        complaint_id: str,
        rating: int,
        feedback: Optional[str] = None
    ) -> Complaint:
        """
        Record the student's rating for a completed complaint.

        Args:
            complaint_id: The complaint ID
            rating: Satisfaction rating, 1 to 5
            feedback: Optional free-text feedback

        Returns:
            Updated Complaint object

        Raises:
            ComplaintNotFound: If the complaint does not exist
            FeedbackNotAllowed: If the complaint is not resolved or closed
        """
        if not 1 <= rating <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {rating}")

        complaint = await self.get_complaint(complaint_id)

        if not complaint:
            raise ComplaintNotFound(f"Complaint not found: {complaint_id}")

        if not complaint.status.is_completed:
            raise FeedbackNotAllowed(
                f"Feedback can only be given once a complaint is resolved or closed "
                f"(current status: {complaint.status.value})"
            )

        complaint.rating = rating
        complaint.feedback = feedback

        await self.db.commit()
        await self.db.refresh(complaint)

        logger.info(f"Recorded feedback for complaint {complaint_id}: rating={rating}")

        return complaint
