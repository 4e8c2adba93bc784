"""
IT Completion Workflow

A student submits the whole logbook for final review, may withdraw it, and
the supervisor signs it off either as completed or back to ongoing with
requested changes.
"""

from typing import Optional

from chronicle.core.config import settings
from chronicle.core.exceptions import ValidationError
from chronicle.core.logging_config import logger
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.admin import SystemEventType
from chronicle.models.notification import NotificationType
from chronicle.models.user import User, ItStatus
from chronicle.services.admin_service import AdminService
from chronicle.services.log_service import run_side_effect
from chronicle.services.notification_service import NotificationService
from chronicle.services.transitions import ItEvent, next_it_status


SIGNOFF_EVENTS = {
    "approve": ItEvent.APPROVE,
    "request_changes": ItEvent.REQUEST_CHANGES,
}

SIGNOFF_MESSAGES = {
    ItEvent.APPROVE: "Congratulations! Your supervisor has approved your final logbook submission.",
    ItEvent.REQUEST_CHANGES: (
        "Your supervisor has requested changes to your logbook. "
        "Please review their evaluation and your logs."
    ),
}


class CompletionService:
    """Drives a student's it_status"""

    def __init__(
        self,
        gateway: PersistenceGateway,
        notifications: Optional[NotificationService] = None,
        admin: Optional[AdminService] = None,
        strict_signoff: Optional[bool] = None
    ):
        self.gateway = gateway
        self.notifications = notifications or NotificationService(gateway)
        self.admin = admin or AdminService(gateway)
        self.strict_signoff = settings.STRICT_FINAL_SIGNOFF if strict_signoff is None else strict_signoff

    async def request_final_review(self, student_id: str, final_summary: str) -> Optional[User]:
        """
        Submit the logbook for final review.

        Returns:
            Updated student, or None when the student does not exist
        """
        key = make_key("users", student_id)
        student = await self.gateway.get(key)
        if student is None:
            return None

        old_status = student.it_status
        new_status = next_it_status(old_status, ItEvent.REQUEST_REVIEW, self.strict_signoff)
        student = await self.gateway.update(key, {
            "it_status": new_status,
            "final_summary": final_summary,
        })
        self._log_transition(student_id, ItEvent.REQUEST_REVIEW, old_status, new_status)

        if student.supervisor_id:
            await run_side_effect("final review notification", self.notifications.notify(
                student.supervisor_id,
                f"{student.full_name} has submitted their logbook for final review.",
                student_id=student_id,
                type=NotificationType.FINAL_REVIEW_REQUEST
            ))
        await run_side_effect("logbook_finalized event", self.admin.log_event(
            SystemEventType.LOGBOOK_FINALIZED,
            f"{student.full_name} submitted their logbook for final review."
        ))
        return student

    async def cancel_final_review(self, student_id: str) -> Optional[User]:
        """Withdraw a final review request; final_summary is kept"""
        key = make_key("users", student_id)
        student = await self.gateway.get(key)
        if student is None:
            return None

        old_status = student.it_status
        new_status = next_it_status(old_status, ItEvent.CANCEL_REVIEW, self.strict_signoff)
        student = await self.gateway.update(key, {"it_status": new_status})
        self._log_transition(student_id, ItEvent.CANCEL_REVIEW, old_status, new_status)
        return student

    async def handle_final_signoff(
        self,
        student_id: str,
        evaluation: str,
        decision: str
    ) -> Optional[User]:
        """
        Record the supervisor's evaluation and decision.

        Args:
            decision: "approve" or "request_changes"

        Raises:
            ValidationError: unknown decision
            IllegalTransitionError: strict sign-off and the logbook is not awaiting approval
        """
        event = SIGNOFF_EVENTS.get(getattr(decision, "value", decision))
        if event is None:
            raise ValidationError(f"Unknown sign-off decision: '{decision}'", field="decision")

        key = make_key("users", student_id)
        student = await self.gateway.get(key)
        if student is None:
            return None

        old_status = student.it_status
        new_status = next_it_status(old_status, event, self.strict_signoff)
        student = await self.gateway.update(key, {
            "it_status": new_status,
            "supervisor_evaluation": evaluation,
        })
        self._log_transition(student_id, event, old_status, new_status)

        await run_side_effect("sign-off notification", self.notifications.notify(
            student_id, SIGNOFF_MESSAGES[event]
        ))
        return student

    def _log_transition(self, student_id: str, event: ItEvent, old_status, new_status: ItStatus) -> None:
        logger.log_workflow_event(
            "it_status", student_id, event.value,
            old_status.value if old_status else ItStatus.ONGOING.value,
            new_status.value
        )
