"""
User profile endpoints

- Register the profile of an authenticated account
- Current user, login bookkeeping, avatar
- Link a student to a supervisor by code
"""
from fastapi import APIRouter, Depends, HTTPException, status

from chronicle.api.deps import get_gateway
from chronicle.core.logging_config import logger
from chronicle.db.gateway import PersistenceGateway
from chronicle.models.user import User, UserRole
from chronicle.modules.auth.dependencies import get_current_user, get_current_student, get_token_subject
from chronicle.schemas.user import (
    UserRegister, UserResponse, AvatarUpdate, SupervisorLinkRequest, SupervisorLinkResponse
)
from chronicle.services.policies import ensure_can_view_student
from chronicle.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    user_id: str = Depends(get_token_subject),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Create the profile for the account in the bearer token"""
    if data.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin accounts cannot self-register"
        )

    service = UserService(gateway)
    user = await service.create_profile(
        user_id,
        data.model_dump(exclude={"supervisor_code"}),
        supervisor_code=data.supervisor_code
    )
    logger.info(f"Registered {user.role.value} {user.id}")
    return user


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/me/login", response_model=UserResponse)
async def record_login(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await UserService(gateway).record_login(current_user.id)


@router.patch("/me/avatar", response_model=UserResponse)
async def update_avatar(
    data: AvatarUpdate,
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await UserService(gateway).update_avatar(current_user.id, data.avatar_url)


@router.post("/me/supervisor", response_model=SupervisorLinkResponse)
async def link_supervisor(
    data: SupervisorLinkRequest,
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Link the calling student to the supervisor owning the code"""
    return await UserService(gateway).link_student_to_supervisor(
        current_user.id, data.supervisor_code.strip()
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    user = await UserService(gateway).get_user(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    # A student's supervisor is visible to the student
    if user.role == UserRole.STUDENT:
        ensure_can_view_student(current_user, user)
    elif current_user.role == UserRole.STUDENT and current_user.supervisor_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this user"
        )
    return user
