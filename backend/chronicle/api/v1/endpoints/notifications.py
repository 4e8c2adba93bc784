from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from chronicle.api.deps import get_gateway
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.user import User
from chronicle.modules.auth.dependencies import get_current_user
from chronicle.schemas.workflow import NotificationResponse, CountResponse
from chronicle.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await NotificationService(gateway).list_for_user(current_user.id)


@router.post("/read-all", response_model=CountResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    count = await NotificationService(gateway).mark_all_read(current_user.id)
    return {"count": count}


@router.delete("/read", response_model=CountResponse)
async def clear_read(
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    count = await NotificationService(gateway).clear_read(current_user.id)
    return {"count": count}


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    notification = await gateway.get(make_key("notifications", notification_id))
    if not notification or notification.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    await NotificationService(gateway).mark_read(notification_id)
