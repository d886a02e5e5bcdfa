"""
SLA Policy Module

Fixed resolution windows per complaint category, used to stamp a due date
on new complaints. The SLA engine treats the resulting due date as opaque
input and never consults this table.
"""

from datetime import datetime, timedelta
from typing import List, Dict, Any

from campusdesk.core.enums import exhaustive
from campusdesk.models.complaint import ComplaintCategory


RESOLUTION_WINDOWS = exhaustive(ComplaintCategory, {
    ComplaintCategory.ACADEMIC: timedelta(days=3),
    ComplaintCategory.HOSTEL: timedelta(days=2),
    ComplaintCategory.TECHNICAL: timedelta(hours=24),
    ComplaintCategory.INFRASTRUCTURE: timedelta(hours=24),
    ComplaintCategory.OTHER: timedelta(days=3),
})


def resolution_window(category: ComplaintCategory) -> timedelta:
    """Get the resolution window for a category."""
    return RESOLUTION_WINDOWS[ComplaintCategory(category)]


def compute_due_date(category: ComplaintCategory, created_at: datetime) -> datetime:
    """
    Compute the SLA due date for a complaint.

    Args:
        category: Complaint category
        created_at: When the complaint was filed

    Returns:
        created_at plus the category's resolution window
    """
    return created_at + resolution_window(category)


def _window_label(window: timedelta) -> str:
    hours = int(window.total_seconds() // 3600)
    if hours % 24 == 0 and hours > 24:
        return f"{hours // 24} days"
    return f"{hours} hours"


def describe_policies() -> List[Dict[str, Any]]:
    """List every category window for display."""
    return [
        {
            "category": category.value,
            "hours": int(window.total_seconds() // 3600),
            "label": _window_label(window),
        }
        for category, window in RESOLUTION_WINDOWS.items()
    ]
