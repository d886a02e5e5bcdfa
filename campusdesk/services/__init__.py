"""
CampusDesk Services Module

Business logic services and the SLA engine.
"""

from campusdesk.services.complaint_service import ComplaintService
from campusdesk.services.reminder_service import ReminderService
from campusdesk.services.sla_service import SlaService
from campusdesk.services.metrics_service import MetricsCollector, metrics_collector

__all__ = [
    "ComplaintService",
    "ReminderService",
    "SlaService",
    "MetricsCollector",
    "metrics_collector",
]
