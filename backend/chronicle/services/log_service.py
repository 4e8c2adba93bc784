"""
Log Lifecycle Engine

Create, edit, review and delete weekly logs. Status changes go through
next_log_status; nothing here assigns LogEntry.status directly.

The primary write of each operation propagates its errors. Follow-up effects
(notifications, retraction, activity feed, skill derivation) are independent
writes: each one is attempted on its own and a failure is logged without
undoing the primary write.
"""

from datetime import date, datetime
from typing import Any, Awaitable, Dict, List, Optional

from chronicle.core.config import settings
from chronicle.core.exceptions import ValidationError, UserNotFoundError
from chronicle.core.logging_config import logger
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.admin import SystemEventType
from chronicle.models.log_entry import LogEntry, LogStatus
from chronicle.models.user import User
from chronicle.services.admin_service import AdminService
from chronicle.services.notification_service import NotificationService
from chronicle.services.transitions import LogEvent, next_log_status


EDITABLE_FIELDS = ("week", "title", "content", "attachments", "date")

REVIEW_EVENTS = {
    LogStatus.APPROVED: LogEvent.APPROVE,
    LogStatus.REJECTED: LogEvent.REJECT,
}


async def run_side_effect(name: str, effect: Awaitable[Any]) -> Optional[Any]:
    """Await a follow-up write, logging instead of raising on failure"""
    try:
        return await effect
    except Exception as e:
        logger.log_error_with_context(e, context=f"side effect {name}")
        return None


class LogService:
    """Service for weekly log entries"""

    def __init__(
        self,
        gateway: PersistenceGateway,
        notifications: Optional[NotificationService] = None,
        admin: Optional[AdminService] = None,
        skill_scheduler: Optional[Any] = None
    ):
        self.gateway = gateway
        self.notifications = notifications or NotificationService(gateway)
        self.admin = admin or AdminService(gateway)
        self.skill_scheduler = skill_scheduler

    # =====================================================
    # READS
    # =====================================================

    async def get_log(self, log_id: str) -> Optional[LogEntry]:
        return await self.gateway.get(make_key("logs", log_id))

    async def list_for_student(self, student_id: str) -> List[LogEntry]:
        """Logs of a student, most recent date first"""
        logs = await self.gateway.query("logs", "student_id", student_id)
        return sorted(logs, key=lambda l: (l.date, l.created_at), reverse=True)

    async def _get_user(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        return await self.gateway.get(make_key("users", user_id))

    # =====================================================
    # CREATE
    # =====================================================

    async def create(
        self,
        student_id: str,
        week: int,
        title: str,
        content: str,
        attachments: Optional[List[Dict[str, str]]] = None,
        log_date: Optional[date] = None
    ) -> LogEntry:
        """
        Submit a new log in pending state.

        Raises:
            UserNotFoundError: student profile does not exist
            ValidationError: missing title/content, bad week, duplicate week
        """
        self._validate_content(week, title, content)

        student = await self._get_user(student_id)
        if student is None:
            raise UserNotFoundError(student_id)

        if not settings.ALLOW_DUPLICATE_WEEKS:
            existing = await self.gateway.query("logs", "student_id", student_id)
            if any(l.week == week for l in existing):
                raise ValidationError(f"A log for week {week} already exists", field="week")

        now = datetime.utcnow()
        log = await self.gateway.push("logs", {
            "student_id": student_id,
            "date": log_date or date.today(),
            "week": week,
            "title": title.strip(),
            "content": content,
            "attachments": list(attachments or []),
            "status": LogStatus.PENDING,
            "feedback": None,
            "created_at": now,
            "updated_at": now,
        })
        logger.log_workflow_event("log", log.id, "create", new_state=LogStatus.PENDING.value)

        await run_side_effect("log_submitted event", self.admin.log_event(
            SystemEventType.LOG_SUBMITTED,
            f"{student.full_name} submitted a log for week {week}."
        ))
        if student.supervisor_id:
            await run_side_effect("supervisor notification", self.notifications.notify(
                student.supervisor_id,
                f"{student.first_name} {student.surname} submitted a log for week {week}.",
                log_id=log.id
            ))
        return log

    # =====================================================
    # UPDATE / DELETE
    # =====================================================

    async def update(self, log_id: str, fields: Dict[str, Any]) -> Optional[LogEntry]:
        """
        Edit a pending or rejected log.

        A rejected log goes back to pending with its feedback cleared, and
        the supervisor's stale notifications for it are replaced by an
        "updated" notification.

        Returns:
            Updated log, or None when it does not exist

        Raises:
            IllegalTransitionError: the log is approved
            ValidationError: invalid field values
        """
        log = await self.get_log(log_id)
        if log is None:
            return None

        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}
        self._validate_content(
            changes.get("week", log.week),
            changes.get("title", log.title),
            changes.get("content", log.content)
        )
        if "title" in changes:
            changes["title"] = changes["title"].strip()

        old_status = LogStatus(log.status)
        new_status = next_log_status(old_status, LogEvent.EDIT)
        changes["status"] = new_status
        changes["updated_at"] = datetime.utcnow()
        if old_status == LogStatus.REJECTED:
            changes["feedback"] = None

        updated = await self.gateway.update(make_key("logs", log_id), changes)
        logger.log_workflow_event("log", log_id, LogEvent.EDIT.value, old_status.value, new_status.value)

        if old_status == LogStatus.REJECTED:
            student = await run_side_effect("student lookup", self._get_user(updated.student_id))
            if student is not None and student.supervisor_id:
                await run_side_effect("stale notification retraction", self.notifications.retract_by_log_ref(
                    log_id, user_id=student.supervisor_id
                ))
                await run_side_effect("supervisor notification", self.notifications.notify(
                    student.supervisor_id,
                    f"{student.full_name} has updated their rejected log for week {updated.week}.",
                    log_id=log_id
                ))
        return updated

    async def delete(self, log_id: str) -> bool:
        """Delete a log and every notification pointing at it"""
        removed = await self.gateway.remove(make_key("logs", log_id))
        if not removed:
            return False
        logger.log_workflow_event("log", log_id, "delete")
        await run_side_effect("notification retraction", self.notifications.retract_by_log_ref(log_id))
        return True

    # =====================================================
    # REVIEW
    # =====================================================

    async def set_status(
        self,
        log_id: str,
        status: LogStatus,
        feedback: Optional[str] = None,
        reviewer_id: Optional[str] = None
    ) -> Optional[LogEntry]:
        """
        Approve or reject a pending log.

        Args:
            log_id: Log to review
            status: approved or rejected
            feedback: Rejection reason (required) or optional approval comment
            reviewer_id: Supervisor doing the review; defaults to the student's supervisor

        Raises:
            ValidationError: unsupported status or rejection without feedback
            IllegalTransitionError: the log is not pending
        """
        status = LogStatus(status)
        event = REVIEW_EVENTS.get(status)
        if event is None:
            raise ValidationError(f"Cannot set log status to '{status.value}'", field="status")

        feedback = feedback.strip() if feedback else None
        if status == LogStatus.REJECTED and not feedback:
            raise ValidationError("A reason is required when rejecting a log", field="feedback")

        log = await self.get_log(log_id)
        if log is None:
            return None

        old_status = LogStatus(log.status)
        new_status = next_log_status(old_status, event)
        updated = await self.gateway.update(make_key("logs", log_id), {
            "status": new_status,
            "feedback": feedback,
            "updated_at": datetime.utcnow(),
        })
        logger.log_workflow_event("log", log_id, event.value, old_status.value, new_status.value)

        await run_side_effect("student notification", self.notifications.notify(
            updated.student_id,
            f"Your log for week {updated.week} has been {new_status.value}.",
            log_id=log_id
        ))

        student = await run_side_effect("student lookup", self._get_user(updated.student_id))
        reviewer = reviewer_id or (student.supervisor_id if student is not None else None)
        if reviewer:
            await run_side_effect("stale notification retraction", self.notifications.retract_by_log_ref(
                log_id, user_id=reviewer
            ))

        if new_status == LogStatus.APPROVED:
            name = student.full_name if student is not None else "a student"
            await run_side_effect("log_approved event", self.admin.log_event(
                SystemEventType.LOG_APPROVED,
                f"Log for week {updated.week} for {name} was approved."
            ))
            if self.skill_scheduler is not None:
                try:
                    self.skill_scheduler.schedule(log_id)
                except Exception as e:
                    logger.log_error_with_context(e, context="skill derivation dispatch")
        return updated

    async def add_comment(self, log_id: str, comment: Optional[str]) -> Optional[LogEntry]:
        """
        Set or clear the supervisor comment on an approved log.

        Raises:
            IllegalTransitionError: the log is not approved
        """
        log = await self.get_log(log_id)
        if log is None:
            return None

        status = next_log_status(LogStatus(log.status), LogEvent.COMMENT)
        comment = comment.strip() if comment else None
        updated = await self.gateway.update(make_key("logs", log_id), {
            "status": status,
            "feedback": comment or None,
            "updated_at": datetime.utcnow(),
        })
        logger.log_workflow_event("log", log_id, LogEvent.COMMENT.value)

        if comment:
            await run_side_effect("student notification", self.notifications.notify(
                updated.student_id,
                f"Your supervisor commented on your log for week {updated.week}.",
                log_id=log_id
            ))
        return updated

    # =====================================================
    # VALIDATION
    # =====================================================

    def _validate_content(self, week: Any, title: Optional[str], content: Optional[str]) -> None:
        if not isinstance(week, int) or isinstance(week, bool) or week < 1:
            raise ValidationError("Week must be a positive number", field="week")
        if not title or not title.strip():
            raise ValidationError("Title is required", field="title")
        if not content or not content.strip():
            raise ValidationError("Content is required", field="content")
