"""
CampusDesk Jobs Module

Background jobs for stale-complaint reminders and SLA gauge refresh.
"""

from campusdesk.jobs.reminder_batch import (
    run_reminder_job,
    run_sla_gauge_job,
    setup_scheduler,
    shutdown_scheduler,
    get_scheduler_status,
)

__all__ = [
    "run_reminder_job",
    "run_sla_gauge_job",
    "setup_scheduler",
    "shutdown_scheduler",
    "get_scheduler_status",
]
