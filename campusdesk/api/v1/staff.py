from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List
import logging

from campusdesk.core.database import get_db
from campusdesk.models.staff import Staff, StaffRole
from campusdesk.services.presentation import ROLE_CATEGORIES, ROLE_LABELS
from campusdesk.schemas.staff import StaffCreate, StaffUpdate, StaffResponse, StaffRoleInfo

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_response(staff: Staff) -> StaffResponse:
    response = StaffResponse.model_validate(staff)
    response.role_label = ROLE_LABELS[staff.role]
    return response


@router.get("/roles", response_model=List[StaffRoleInfo])
async def list_roles():
    """List staff roles with the complaint categories each one handles."""
    return [
        StaffRoleInfo(
            role=role,
            label=ROLE_LABELS[role],
            categories=[category.value for category in ROLE_CATEGORIES[role]]
        )
        for role in StaffRole
    ]


@router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
async def create_staff(
    staff_data: StaffCreate,
    db: AsyncSession = Depends(get_db)
):
    """Add a staff member."""
    result = await db.execute(select(Staff).where(Staff.email == staff_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Staff member with email {staff_data.email} already exists"
        )

    staff = Staff(**staff_data.model_dump())
    db.add(staff)
    await db.commit()
    await db.refresh(staff)

    logger.info(f"Added staff member {staff.id}: role={staff.role.value}")

    return _to_response(staff)


@router.get("", response_model=List[StaffResponse])
async def list_staff(
    active_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """List staff members."""
    query = select(Staff)

    if active_only:
        query = query.where(Staff.is_active.is_(True))

    query = query.order_by(Staff.name).offset(skip).limit(limit)

    result = await db.execute(query)
    return [_to_response(staff) for staff in result.scalars().all()]


@router.patch("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: str,
    staff_update: StaffUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Activate/deactivate a staff member or change their department."""
    staff = await db.get(Staff, staff_id)

    if not staff:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Staff member not found"
        )

    for field, value in staff_update.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(staff, field, value)

    await db.commit()
    await db.refresh(staff)

    return _to_response(staff)
