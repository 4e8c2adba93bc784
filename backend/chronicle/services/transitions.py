"""
Logbook state machines

Two machines, each with a single transition function:

Log status (per LogEntry)
    pending  --edit-->    pending
    rejected --edit-->    pending   (feedback is cleared by the caller)
    pending  --approve--> approved
    pending  --reject-->  rejected
    approved --comment--> approved

IT status (per student)
    ongoing           --request_review--> awaiting_approval
    awaiting_approval --cancel_review-->  ongoing
    ongoing           --cancel_review-->  ongoing
    awaiting_approval --approve-->        completed
    awaiting_approval --request_changes--> ongoing

Sign-off (approve / request_changes) is accepted from any state unless
``strict_signoff`` is set, in which case only awaiting_approval may be
signed off.
"""
import enum
from typing import Dict, Optional, Tuple

from chronicle.core.exceptions import IllegalTransitionError
from chronicle.models.log_entry import LogStatus
from chronicle.models.user import ItStatus


class LogEvent(str, enum.Enum):
    EDIT = "edit"
    APPROVE = "approve"
    REJECT = "reject"
    COMMENT = "comment"


class ItEvent(str, enum.Enum):
    REQUEST_REVIEW = "request_review"
    CANCEL_REVIEW = "cancel_review"
    APPROVE = "approve"
    REQUEST_CHANGES = "request_changes"


LOG_TRANSITIONS: Dict[Tuple[LogStatus, LogEvent], LogStatus] = {
    (LogStatus.PENDING, LogEvent.EDIT): LogStatus.PENDING,
    (LogStatus.REJECTED, LogEvent.EDIT): LogStatus.PENDING,
    (LogStatus.PENDING, LogEvent.APPROVE): LogStatus.APPROVED,
    (LogStatus.PENDING, LogEvent.REJECT): LogStatus.REJECTED,
    (LogStatus.APPROVED, LogEvent.COMMENT): LogStatus.APPROVED,
}

IT_TRANSITIONS: Dict[Tuple[ItStatus, ItEvent], ItStatus] = {
    (ItStatus.ONGOING, ItEvent.REQUEST_REVIEW): ItStatus.AWAITING_APPROVAL,
    (ItStatus.AWAITING_APPROVAL, ItEvent.CANCEL_REVIEW): ItStatus.ONGOING,
    (ItStatus.ONGOING, ItEvent.CANCEL_REVIEW): ItStatus.ONGOING,
    (ItStatus.AWAITING_APPROVAL, ItEvent.APPROVE): ItStatus.COMPLETED,
    (ItStatus.AWAITING_APPROVAL, ItEvent.REQUEST_CHANGES): ItStatus.ONGOING,
}

SIGNOFF_TARGETS: Dict[ItEvent, ItStatus] = {
    ItEvent.APPROVE: ItStatus.COMPLETED,
    ItEvent.REQUEST_CHANGES: ItStatus.ONGOING,
}


def next_log_status(current: LogStatus, event: LogEvent) -> LogStatus:
    """Resolve a log transition or raise IllegalTransitionError"""
    current = LogStatus(current)
    target = LOG_TRANSITIONS.get((current, event))
    if target is None:
        raise IllegalTransitionError("log", current.value, event.value)
    return target


def next_it_status(
    current: Optional[ItStatus],
    event: ItEvent,
    strict_signoff: bool = False
) -> ItStatus:
    """Resolve an IT status transition or raise IllegalTransitionError"""
    # Profiles created before the workflow existed have no status yet
    current = ItStatus(current) if current else ItStatus.ONGOING

    target = IT_TRANSITIONS.get((current, event))
    if target is None and event in SIGNOFF_TARGETS and not strict_signoff:
        target = SIGNOFF_TARGETS[event]
    if target is None:
        raise IllegalTransitionError("IT status", current.value, event.value)
    return target


def is_logbook_locked(it_status: Optional[ItStatus]) -> bool:
    """Logs cannot be created, edited or deleted while under final review or completed"""
    return it_status in (ItStatus.AWAITING_APPROVAL, ItStatus.COMPLETED)
