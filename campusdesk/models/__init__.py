from campusdesk.core.database import Base
from campusdesk.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from campusdesk.models.staff import Staff, StaffRole
from campusdesk.models.notification import Notification, NotificationType

__all__ = [
    "Base",
    "Complaint",
    "ComplaintCategory",
    "ComplaintStatus",
    "Staff",
    "StaffRole",
    "Notification",
    "NotificationType",
]
