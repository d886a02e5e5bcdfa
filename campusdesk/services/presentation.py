"""
Presentation lookup tables.

Closed-enum tables for complaint status, category, staff role and SLA band.
Each table is built with ``exhaustive`` so a new enum member without an
entry fails at import.
"""

from campusdesk.core.enums import exhaustive
from campusdesk.models.complaint import ComplaintCategory, ComplaintStatus
from campusdesk.models.staff import StaffRole
from campusdesk.services.sla_engine import SLABand


STATUS_COLORS = exhaustive(ComplaintStatus, {
    ComplaintStatus.OPEN: "warning",
    ComplaintStatus.IN_PROGRESS: "primary",
    ComplaintStatus.RESOLVED: "success",
    ComplaintStatus.CLOSED: "muted",
})

CATEGORY_ICONS = exhaustive(ComplaintCategory, {
    ComplaintCategory.ACADEMIC: "🎓",
    ComplaintCategory.TECHNICAL: "💻",
    ComplaintCategory.HOSTEL: "🏠",
    ComplaintCategory.INFRASTRUCTURE: "🏗️",
    ComplaintCategory.OTHER: "📋",
})

ROLE_LABELS = exhaustive(StaffRole, {
    StaffRole.WARDEN: "Warden",
    StaffRole.HOD: "Head of Department",
    StaffRole.TRANSPORT_OFFICER: "Transport Officer",
    StaffRole.ADMIN: "Admin",
})

# Categories each role is expected to handle
ROLE_CATEGORIES = exhaustive(StaffRole, {
    StaffRole.WARDEN: (ComplaintCategory.HOSTEL,),
    StaffRole.HOD: (ComplaintCategory.ACADEMIC,),
    StaffRole.TRANSPORT_OFFICER: (ComplaintCategory.TECHNICAL, ComplaintCategory.INFRASTRUCTURE),
    StaffRole.ADMIN: (ComplaintCategory.OTHER,),
})

BAND_VARIANTS = exhaustive(SLABand, {
    SLABand.COMPLETED: "secondary",
    SLABand.OVERDUE: "destructive",
    SLABand.URGENT: "destructive",
    SLABand.WARNING: "outline",
    SLABand.ON_TRACK: "default",
    SLABand.NONE: None,
})


def status_label(status: ComplaintStatus) -> str:
    return ComplaintStatus(status).value.replace("_", " ")
