"""
Admin API

- User directory, deletion and bulk import
- System activity feed
- Announcements, program cycles and branding

Announcements and branding can be read by any signed-in user.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional

from chronicle.api.deps import get_gateway
from chronicle.db.gateway import PersistenceGateway
from chronicle.models.admin import BrandingTheme
from chronicle.models.user import User, UserRole
from chronicle.modules.auth.dependencies import get_current_user, get_current_admin
from chronicle.schemas.admin import (
    SystemEventResponse, AnnouncementCreate, AnnouncementResponse,
    ProgramCycleCreate, ProgramCycleResponse, BrandingUpdate, BrandingResponse
)
from chronicle.schemas.user import UserResponse, BulkCreateRequest, BulkCreateResponse
from chronicle.services.admin_service import AdminService
from chronicle.services.user_service import UserService

router = APIRouter()


# ==================== Users ====================

@router.get("/users", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await UserService(gateway).list_users(role)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )
    deleted = await UserService(gateway).delete_user_and_data(user_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )


@router.post("/users/bulk", response_model=BulkCreateResponse)
async def bulk_create_users(
    data: BulkCreateRequest,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    rows = [row.model_dump() for row in data.users]
    return await UserService(gateway).bulk_create_profiles(rows)


# ==================== Events ====================

@router.get("/events", response_model=List[SystemEventResponse])
async def list_events(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await AdminService(gateway).get_system_events(limit)


# ==================== Announcements ====================

@router.get("/announcements", response_model=List[AnnouncementResponse])
async def list_announcements(
    active_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    # Non-admins only ever see what is currently published
    if current_user.role != UserRole.ADMIN:
        active_only = True
    return await AdminService(gateway).get_announcements(active_only=active_only)


@router.post("/announcements", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await AdminService(gateway).create_announcement(data.title, data.content)


@router.post("/announcements/{announcement_id}/toggle", response_model=AnnouncementResponse)
async def toggle_announcement(
    announcement_id: str,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    announcement = await AdminService(gateway).toggle_announcement(announcement_id)
    if not announcement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Announcement not found"
        )
    return announcement


@router.delete("/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: str,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    if not await AdminService(gateway).delete_announcement(announcement_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Announcement not found"
        )


# ==================== Program cycles ====================

@router.get("/program-cycles", response_model=List[ProgramCycleResponse])
async def list_program_cycles(
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await AdminService(gateway).get_program_cycles()


@router.post("/program-cycles", response_model=ProgramCycleResponse, status_code=status.HTTP_201_CREATED)
async def create_program_cycle(
    data: ProgramCycleCreate,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await AdminService(gateway).create_program_cycle(data.name, data.start_date, data.end_date)


@router.delete("/program-cycles/{cycle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_program_cycle(
    cycle_id: str,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    if not await AdminService(gateway).delete_program_cycle(cycle_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Program cycle not found"
        )


# ==================== Branding ====================

@router.get("/branding", response_model=BrandingResponse)
async def get_branding(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    branding = await AdminService(gateway).get_branding()
    if branding is None:
        return BrandingResponse(logo_url=None, theme=BrandingTheme.DEFAULT)
    return branding


@router.put("/branding", response_model=BrandingResponse)
async def update_branding(
    data: BrandingUpdate,
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await AdminService(gateway).update_branding(data.logo_url, data.theme)
