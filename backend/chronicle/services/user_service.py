"""
User Service
Profiles, supervisor codes, linking, and account removal
"""

import secrets
import string
from datetime import datetime
from typing import Any, Dict, List, Optional

from chronicle.core.config import settings
from chronicle.core.exceptions import ValidationError, PersistenceError
from chronicle.core.logging_config import logger
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.admin import SystemEventType
from chronicle.models.user import User, UserRole, ItStatus
from chronicle.services.admin_service import AdminService
from chronicle.services.log_service import run_side_effect
from chronicle.services.notification_service import NotificationService


STUDENT_FIELDS = ("gender", "school", "faculty", "department", "level")
SUPERVISOR_FIELDS = ("company_name", "company_role")
BULK_ROLES = (UserRole.STUDENT.value, UserRole.SUPERVISOR.value)
DEFAULT_LEVEL = 100

CODE_ALPHABET = string.ascii_uppercase + string.digits


class UserService:
    """Service for user profiles"""

    def __init__(
        self,
        gateway: PersistenceGateway,
        notifications: Optional[NotificationService] = None,
        admin: Optional[AdminService] = None
    ):
        self.gateway = gateway
        self.notifications = notifications or NotificationService(gateway)
        self.admin = admin or AdminService(gateway)

    # =====================================================
    # READS
    # =====================================================

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.gateway.get(make_key("users", user_id))

    async def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        """All users, newest first"""
        if role is not None:
            users = await self.gateway.query("users", "role", role)
        else:
            users = await self.gateway.all("users")
        return sorted(users, key=lambda u: u.created_at, reverse=True)

    async def list_students_of(self, supervisor_id: str) -> List[User]:
        students = await self.gateway.query("users", "supervisor_id", supervisor_id)
        return [s for s in students if s.role == UserRole.STUDENT]

    async def find_supervisor_by_code(self, code: str) -> Optional[User]:
        code = (code or "").strip()
        if not code:
            return None
        matches = await self.gateway.query("users", "supervisor_code", code)
        return matches[0] if matches else None

    # =====================================================
    # PROFILES
    # =====================================================

    async def generate_supervisor_code(self) -> str:
        """SUPER-XXXXXX, unique among existing supervisors"""
        while True:
            suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(settings.SUPERVISOR_CODE_LENGTH))
            code = f"{settings.SUPERVISOR_CODE_PREFIX}{suffix}"
            if await self.find_supervisor_by_code(code) is None:
                return code

    async def create_profile(
        self,
        user_id: str,
        data: Dict[str, Any],
        supervisor_code: Optional[str] = None
    ) -> User:
        """
        Create the profile for an authenticated account.

        Students start with it_status ongoing and may pass a supervisor code
        to be linked right away. Supervisors get a generated code.

        Raises:
            ValidationError: profile already exists, email taken, or invalid supervisor code
        """
        if await self.get_user(user_id) is not None:
            raise ValidationError("This email is already associated with an active account.", field="email")

        email = (data.get("email") or "").strip().lower()
        if await self.gateway.query("users", "email", email):
            raise ValidationError("This email is already associated with an active account.", field="email")

        role = UserRole(data["role"])
        profile: Dict[str, Any] = {
            "first_name": data["first_name"].strip(),
            "surname": data["surname"].strip(),
            "email": email,
            "role": role,
            "avatar_url": data.get("avatar_url"),
            "created_at": datetime.utcnow(),
        }

        if role == UserRole.STUDENT:
            if supervisor_code:
                supervisor = await self.find_supervisor_by_code(supervisor_code)
                if supervisor is None:
                    raise ValidationError(
                        "Invalid supervisor code provided. You can leave this field blank and add it later.",
                        field="supervisor_code"
                    )
                profile["supervisor_id"] = supervisor.id
            profile["it_status"] = ItStatus.ONGOING
            profile.update({f: data.get(f) for f in STUDENT_FIELDS})
        elif role == UserRole.SUPERVISOR:
            profile["supervisor_code"] = await self.generate_supervisor_code()
            profile.update({f: data.get(f) for f in SUPERVISOR_FIELDS})

        user = await self.gateway.set(make_key("users", user_id), profile)
        logger.info(f"[Users] Created {role.value} profile {user_id}")

        await run_side_effect("user_registered event", self.admin.log_event(
            SystemEventType.USER_REGISTERED,
            f"New user registered: {user.first_name} {user.surname} ({role.value})."
        ))
        return user

    async def record_login(self, user_id: str) -> Optional[User]:
        return await self.gateway.update(make_key("users", user_id), {"last_login": datetime.utcnow()})

    async def update_avatar(self, user_id: str, avatar_url: Optional[str]) -> Optional[User]:
        return await self.gateway.update(make_key("users", user_id), {"avatar_url": avatar_url})

    # =====================================================
    # SUPERVISOR LINKING
    # =====================================================

    async def link_student_to_supervisor(self, student_id: str, supervisor_code: str) -> Dict[str, Any]:
        """
        Attach a student to the supervisor owning supervisor_code.

        Returns:
            {"success": bool, "message": str, "user": User | None}
        """
        supervisor = await self.find_supervisor_by_code(supervisor_code)
        if supervisor is None:
            return {"success": False, "message": "Invalid supervisor code. Please check and try again.", "user": None}

        try:
            student = await self.gateway.update(make_key("users", student_id), {"supervisor_id": supervisor.id})
        except PersistenceError as e:
            logger.log_error_with_context(e, context="link_student_to_supervisor", student_id=student_id)
            return {"success": False, "message": "An error occurred while linking the supervisor.", "user": None}

        if student is None:
            return {"success": False, "message": "An error occurred while linking the supervisor.", "user": None}

        await run_side_effect("supervisor link notification", self.notifications.notify(
            supervisor.id,
            f"{student.first_name} {student.surname} has added you as their supervisor."
        ))
        logger.info(f"[Users] Student {student_id} linked to supervisor {supervisor.id}")
        return {"success": True, "message": "Supervisor linked successfully!", "user": student}

    # =====================================================
    # ADMIN OPERATIONS
    # =====================================================

    async def delete_user_and_data(self, user_id: str) -> bool:
        """
        Remove a user together with the data that only makes sense with them.

        Students lose their logs and every notification referencing them,
        supervisors are unlinked from their students, and the user's own
        notifications are removed. Skills are kept.
        Everything is applied in one atomic write.
        """
        user = await self.get_user(user_id)
        if user is None:
            return False

        updates: Dict[str, Any] = {make_key("users", user_id): None}

        if user.role == UserRole.STUDENT:
            for log in await self.gateway.query("logs", "student_id", user_id):
                updates[make_key("logs", log.id)] = None
                # Notifications about the log go too, whoever they were sent to
                for notification in await self.gateway.query("notifications", "log_id", log.id):
                    updates[make_key("notifications", notification.id)] = None
        elif user.role == UserRole.SUPERVISOR:
            for student in await self.gateway.query("users", "supervisor_id", user_id):
                updates[make_key("users", student.id, "supervisor_id")] = None

        for notification in await self.gateway.query("notifications", "user_id", user_id):
            updates[make_key("notifications", notification.id)] = None

        await self.gateway.update_paths(updates)
        logger.info(f"[Users] Deleted {user.role.value} {user_id} ({len(updates)} paths)")
        return True

    async def bulk_create_profiles(self, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Create profiles from imported rows.

        Each row is validated on its own; failures are collected and do not
        stop the import.

        Returns:
            {"success_count": int, "errors": [{"data": row, "error": str}]}
        """
        success_count = 0
        errors: List[Dict[str, Any]] = []
        seen_emails = set()

        for row in rows:
            email = (row.get("email") or "").strip().lower()
            try:
                if not email or not row.get("first_name") or not row.get("surname") or not row.get("role"):
                    raise ValidationError("Row is missing required fields (firstName, surname, email, role).")
                if email in seen_emails:
                    raise ValidationError(f"Duplicate email in CSV file: {email}")
                seen_emails.add(email)

                role = str(row["role"]).strip().lower()
                if role not in BULK_ROLES:
                    raise ValidationError(f"Invalid role: '{row['role']}'. Must be 'student' or 'supervisor'.")
                if await self.gateway.query("users", "email", email):
                    raise ValidationError(f"An account for {email} already exists.")

                await self.gateway.push("users", await self._bulk_profile(row, email, role))
                success_count += 1
            except ValidationError as e:
                errors.append({"data": row, "error": e.message})

        logger.info(f"[Users] Bulk import: {success_count} created, {len(errors)} failed")
        return {"success_count": success_count, "errors": errors}

    async def _bulk_profile(self, row: Dict[str, Any], email: str, role: str) -> Dict[str, Any]:
        profile: Dict[str, Any] = {
            "first_name": str(row["first_name"]).strip(),
            "surname": str(row["surname"]).strip(),
            "email": email,
            "role": UserRole(role),
            "created_at": datetime.utcnow(),
        }
        if role == UserRole.STUDENT.value:
            profile["it_status"] = ItStatus.ONGOING
            for field in ("gender", "school", "faculty", "department"):
                profile[field] = row.get(field) or ""
            try:
                profile["level"] = int(row.get("level") or DEFAULT_LEVEL)
            except (TypeError, ValueError):
                profile["level"] = DEFAULT_LEVEL
        else:
            code = (row.get("supervisor_code") or "").strip()
            if code and await self.find_supervisor_by_code(code) is not None:
                raise ValidationError(f"Supervisor code already in use: {code}")
            profile["supervisor_code"] = code or await self.generate_supervisor_code()
            for field in SUPERVISOR_FIELDS:
                profile[field] = row.get(field) or ""
        return profile
