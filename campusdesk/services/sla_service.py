"""
SLA Service Module

Loads complaint snapshots from the database and runs them through the
SLA engine. Every call reads the clock once and evaluates the whole batch
against that instant.
"""

from datetime import datetime
from typing import Optional, List, Tuple, Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging

from campusdesk.core.clock import utcnow
from campusdesk.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from campusdesk.models.notification import Notification, NotificationType
from campusdesk.services.complaint_service import ComplaintNotFound
from campusdesk.services.metrics_service import metrics_collector
from campusdesk.services.sla_engine import (
    ComplaintSnapshot,
    SLABand,
    SLAIndicator,
    SLAStats,
    aggregate,
    indicate,
)


logger = logging.getLogger(__name__)


def indicators_for(complaints: Iterable[Complaint], now: datetime) -> List[SLAIndicator]:
    """Compute badges for a batch of complaints against one instant."""
    return [indicate(ComplaintSnapshot.from_record(c), now) for c in complaints]


class SlaService:
    """
    Service for SLA dashboard statistics and per-complaint badges.

    Provides methods for:
    - Aggregating compliance and satisfaction statistics
    - Computing the SLA badge for a single complaint
    - Listing overdue complaints
    - Notifying handlers of SLA breaches
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the SLA service.

        Args:
            db: Async database session
        """
        self.db = db

    async def load_snapshots(
        self,
        category: Optional[ComplaintCategory] = None
    ) -> List[ComplaintSnapshot]:
        """
        Read the status, due date and rating of every complaint.

        Args:
            category: Optional category filter

        Returns:
            List of snapshots, one per complaint
        """
        query = select(Complaint.id, Complaint.status, Complaint.due_date, Complaint.rating)

        if category:
            query = query.where(Complaint.category == category)

        result = await self.db.execute(query)
        return [
            ComplaintSnapshot(status=row.status, due_date=row.due_date, rating=row.rating)
            for row in result.all()
        ]

    async def get_statistics(
        self,
        category: Optional[ComplaintCategory] = None,
        now: Optional[datetime] = None
    ) -> Tuple[SLAStats, datetime]:
        """
        Compute SLA statistics over all complaints.

        Args:
            category: Optional category filter
            now: Evaluation instant; defaults to a single clock read

        Returns:
            Tuple of (SLAStats, the instant used)

        Raises:
            InvalidTimestamp: If a stored due date cannot be parsed
        """
        now = now or utcnow()
        snapshots = await self.load_snapshots(category)
        stats = aggregate(snapshots, now)

        # Gauges track the whole institution, not a filtered view
        if category is None:
            metrics_collector.record_sla_stats(stats)

        logger.info(
            f"SLA statistics computed: total={stats.total}, overdue={stats.overdue}, "
            f"compliance={stats.compliance_rate}%, category={category.value if category else 'all'}"
        )

        return stats, now

    async def get_complaint_indicator(
        self,
        complaint_id: str,
        now: Optional[datetime] = None
    ) -> Tuple[Complaint, SLAIndicator]:
        """
        Compute the SLA badge for one complaint.

        Args:
            complaint_id: The complaint ID
            now: Evaluation instant; defaults to a single clock read

        Returns:
            Tuple of (Complaint, SLAIndicator)

        Raises:
            ComplaintNotFound: If the complaint does not exist
        """
        complaint = await self.db.get(Complaint, complaint_id)

        if not complaint:
            raise ComplaintNotFound(f"Complaint not found: {complaint_id}")

        return complaint, indicate(ComplaintSnapshot.from_record(complaint), now or utcnow())

    async def get_overdue_complaints(
        self,
        now: Optional[datetime] = None
    ) -> List[Complaint]:
        """
        List open complaints whose due date has passed.

        Args:
            now: Evaluation instant; defaults to a single clock read

        Returns:
            Overdue complaints, earliest due first
        """
        now = now or utcnow()

        result = await self.db.execute(
            select(Complaint)
            .options(selectinload(Complaint.assignee))
            .where(
                Complaint.status.in_([ComplaintStatus.OPEN, ComplaintStatus.IN_PROGRESS]),
                Complaint.due_date.is_not(None)
            )
            .order_by(Complaint.due_date.asc())
        )
        complaints = result.scalars().all()

        return [
            complaint
            for complaint, indicator in zip(complaints, indicators_for(complaints, now))
            if indicator.band is SLABand.OVERDUE
        ]

    def _breach_notice(self, user_id: str, complaint: Complaint) -> Notification:
        return Notification(
            user_id=user_id,
            complaint_id=complaint.id,
            title="SLA Breached",
            message=f'Complaint "{complaint.title}" is past its due date',
            type=NotificationType.SLA_BREACH
        )

    async def notify_breaches(self, overdue: List[Complaint]) -> int:
        """
        Notify the handling admin and the assignee of each overdue complaint.

        A complaint is announced once: complaints that already carry an
        SLA breach notification are skipped on later runs.

        Args:
            overdue: Complaints from get_overdue_complaints

        Returns:
            Number of notifications created
        """
        if not overdue:
            return 0

        result = await self.db.execute(
            select(Notification.complaint_id)
            .where(
                Notification.type == NotificationType.SLA_BREACH,
                Notification.complaint_id.in_([c.id for c in overdue])
            )
            .distinct()
        )
        announced = set(result.scalars().all())

        notifications = []

        for complaint in overdue:
            if complaint.id in announced:
                continue

            if complaint.admin_id:
                notifications.append(self._breach_notice(complaint.admin_id, complaint))

            if complaint.assignee is not None and complaint.assignee.user_id != complaint.admin_id:
                notifications.append(self._breach_notice(complaint.assignee.user_id, complaint))

        if notifications:
            self.db.add_all(notifications)
            await self.db.commit()
            logger.info(f"Created {len(notifications)} SLA breach notifications")

        return len(notifications)
