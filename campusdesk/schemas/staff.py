"""
Staff Schemas Module

Pydantic schemas for staff management endpoints.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from campusdesk.models.staff import StaffRole


class StaffCreate(BaseModel):
    """Schema for adding a staff member."""
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: StaffRole
    department: Optional[str] = None


class StaffUpdate(BaseModel):
    """Schema for updating a staff member."""
    is_active: Optional[bool] = None
    department: Optional[str] = None


class StaffResponse(BaseModel):
    """Schema for staff response."""
    id: str
    user_id: str
    name: str
    email: str
    role: StaffRole
    department: Optional[str]
    is_active: bool
    created_at: datetime
    role_label: Optional[str] = None

    class Config:
        from_attributes = True


class StaffRoleInfo(BaseModel):
    """Role description with the categories it handles."""
    role: StaffRole
    label: str
    categories: List[str]
