from fastapi import APIRouter
from campusdesk.api.v1 import complaints, sla, staff, notifications, metrics

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(complaints.router, prefix="/complaints", tags=["complaints"])
api_router.include_router(sla.router, prefix="/sla", tags=["sla"])
api_router.include_router(staff.router, prefix="/staff", tags=["staff"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(metrics.router, tags=["monitoring"])
