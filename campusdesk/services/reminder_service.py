"""
Reminder Service Module

Finds open complaints nobody has touched for a while and reminds the
admin who last handled them and the assigned staff member.
"""

from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging

from campusdesk.core.clock import utcnow
from campusdesk.core.config import settings
from campusdesk.models.complaint import Complaint, ComplaintStatus
from campusdesk.models.notification import Notification, NotificationType


logger = logging.getLogger(__name__)


class ReminderService:
    """Service for stale-complaint reminders."""

    def __init__(self, db: AsyncSession, stale_days: Optional[int] = None):
        self.db = db
        self.stale_days = stale_days if stale_days is not None else settings.STALE_COMPLAINT_DAYS

    async def get_stale_complaints(self, now: datetime) -> List[Complaint]:
        """
        Get open complaints not updated within the stale window.

        Args:
            now: Reference instant

        Returns:
            Stale complaints with their assignee loaded
        """
        cutoff = now.replace(tzinfo=None) - timedelta(days=self.stale_days)

        result = await self.db.execute(
            select(Complaint)
            .options(selectinload(Complaint.assignee))
            .where(
                Complaint.status.in_([ComplaintStatus.OPEN, ComplaintStatus.IN_PROGRESS]),
                Complaint.updated_at <= cutoff
            )
            .order_by(Complaint.updated_at.asc())
        )
        return list(result.scalars().all())

    def _reminder(self, user_id: str, complaint: Complaint) -> Notification:
        return Notification(
            user_id=user_id,
            complaint_id=complaint.id,
            title="Complaint Needs Attention",
            message=f'Complaint "{complaint.title}" hasn\'t been updated in {self.stale_days}+ days',
            type=NotificationType.REMINDER
        )

    async def send_reminders(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Create reminder notifications for every stale complaint.

        Returns:
            Summary of the run:
            - stale_count: int
            - notifications_sent: int
            - processed_at: str
        """
        now = now or utcnow()
        stale = await self.get_stale_complaints(now)

        logger.info(f"Found {len(stale)} stale complaints")

        notifications = []

        for complaint in stale:
            if complaint.admin_id:
                notifications.append(self._reminder(complaint.admin_id, complaint))

            if complaint.assignee is not None:
                notifications.append(self._reminder(complaint.assignee.user_id, complaint))

        if notifications:
            self.db.add_all(notifications)
            await self.db.commit()
            logger.info(f"Created {len(notifications)} reminder notifications")

        return {
            "stale_count": len(stale),
            "notifications_sent": len(notifications),
            "processed_at": now.isoformat()
        }
