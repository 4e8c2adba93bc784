"""
Notification Service - per-user in-app notifications

Notifications may carry a log_id back-reference. It is never used to join
data, only to find and retract notifications that went stale once a log
left the pending state or was deleted.
"""

from datetime import datetime
from typing import List, Optional

from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.notification import Notification
from chronicle.core.logging_config import logger


class NotificationService:
    """Creates, lists and retracts notifications"""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def notify(
        self,
        user_id: str,
        message: str,
        log_id: Optional[str] = None,
        student_id: Optional[str] = None,
        type: Optional[str] = None
    ) -> Notification:
        """
        Append an unread notification timestamped now.

        Retried calls are not deduplicated; each call creates a new record.
        """
        notification = await self.gateway.push("notifications", {
            "user_id": user_id,
            "message": message,
            "read": False,
            "created_at": datetime.utcnow(),
            "log_id": log_id,
            "student_id": student_id,
            "type": type,
        })
        logger.debug(f"Notified {user_id}: {message}")
        return notification

    async def list_for_user(self, user_id: str) -> List[Notification]:
        """Notifications for a user, newest first"""
        notifications = await self.gateway.query("notifications", "user_id", user_id)
        return sorted(notifications, key=lambda n: n.created_at, reverse=True)

    async def retract_by_log_ref(self, log_id: str, user_id: Optional[str] = None) -> int:
        """
        Delete notifications referencing log_id.

        Args:
            log_id: Log the notifications point at
            user_id: Only retract notifications addressed to this user (None = everyone)

        Returns:
            Number of notifications removed
        """
        referencing = await self.gateway.query("notifications", "log_id", log_id)
        updates = {
            make_key("notifications", n.id): None
            for n in referencing
            if user_id is None or n.user_id == user_id
        }
        await self.gateway.update_paths(updates)
        if updates:
            logger.debug(f"Retracted {len(updates)} notification(s) for log {log_id}")
        return len(updates)

    async def mark_read(self, notification_id: str) -> bool:
        notification = await self.gateway.update(
            make_key("notifications", notification_id), {"read": True}
        )
        return notification is not None

    async def mark_all_read(self, user_id: str) -> int:
        notifications = await self.gateway.query("notifications", "user_id", user_id)
        updates = {
            make_key("notifications", n.id, "read"): True
            for n in notifications
            if not n.read
        }
        await self.gateway.update_paths(updates)
        return len(updates)

    async def clear_read(self, user_id: str) -> int:
        """Delete every read notification of a user"""
        notifications = await self.gateway.query("notifications", "user_id", user_id)
        updates = {
            make_key("notifications", n.id): None
            for n in notifications
            if n.read
        }
        await self.gateway.update_paths(updates)
        return len(updates)
