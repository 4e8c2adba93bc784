"""
Access and lock policies applied by the API before calling the engines.

The engines themselves only guard their state machines; who may act on which
record, and whether a logbook is frozen, is decided here.
"""
from typing import Iterable, Optional

from chronicle.core.exceptions import AuthorizationError, LogbookLockedError, ValidationError
from chronicle.models.log_entry import LogEntry, LogStatus
from chronicle.models.user import User, UserRole, ItStatus
from chronicle.services.transitions import is_logbook_locked


def _status_value(it_status: Optional[ItStatus]) -> str:
    return it_status.value if it_status else ItStatus.ONGOING.value


def ensure_logbook_unlocked(student: User) -> None:
    """Students cannot create, edit or delete logs under final review or once completed"""
    if is_logbook_locked(student.it_status):
        raise LogbookLockedError(student.id, _status_value(student.it_status))


def ensure_logbook_reviewable(student: User) -> None:
    """A completed logbook is frozen for supervisors too"""
    if student.it_status == ItStatus.COMPLETED:
        raise LogbookLockedError(student.id, _status_value(student.it_status))


def ensure_log_owner(user: User, log: LogEntry) -> None:
    if log.student_id != user.id:
        raise AuthorizationError("You can only modify your own logs")


def supervises(supervisor: User, student: User) -> bool:
    return (
        supervisor.role == UserRole.SUPERVISOR
        and student.supervisor_id is not None
        and student.supervisor_id == supervisor.id
    )


def ensure_supervises(supervisor: User, student: User) -> None:
    if not supervises(supervisor, student):
        raise AuthorizationError("This student is not linked to you")


def can_view_student(user: User, student: User) -> bool:
    """Self, the linked supervisor, or an admin"""
    return user.role == UserRole.ADMIN or user.id == student.id or supervises(user, student)


def ensure_can_view_student(user: User, student: User) -> None:
    if not can_view_student(user, student):
        raise AuthorizationError("Not authorized to view this student's data")


def ensure_ready_for_final_review(logs: Iterable[LogEntry]) -> None:
    """At least one log, and every log approved"""
    logs = list(logs)
    if not logs:
        raise ValidationError("Submit at least one log before requesting final review")
    if any(LogStatus(l.status) != LogStatus.APPROVED for l in logs):
        raise ValidationError("All logs must be approved before requesting final review")
