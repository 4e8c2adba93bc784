"""
Log endpoints

Students create, edit and delete their own logs while the logbook is
unlocked. Linked supervisors review them. Ownership and lock checks happen
here before the lifecycle engine is called.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from chronicle.api.deps import get_gateway, get_skill_scheduler
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.log_entry import LogEntry
from chronicle.models.user import User, UserRole
from chronicle.modules.auth.dependencies import (
    get_current_user, get_current_student, get_current_supervisor
)
from chronicle.schemas.log import LogCreate, LogUpdate, LogStatusUpdate, LogComment, LogResponse
from chronicle.services import policies
from chronicle.services.log_service import LogService
from chronicle.services.skill_service import SkillDerivationScheduler

router = APIRouter()


async def _load_log(service: LogService, log_id: str) -> LogEntry:
    log = await service.get_log(log_id)
    if not log:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Log not found"
        )
    return log


async def _load_student(gateway: PersistenceGateway, student_id: str) -> User:
    student = await gateway.get(make_key("users", student_id))
    if not student or student.role != UserRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )
    return student


# ==================== Student ====================

@router.get("", response_model=List[LogResponse])
async def list_my_logs(
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await LogService(gateway).list_for_student(current_user.id)


@router.post("", response_model=LogResponse, status_code=status.HTTP_201_CREATED)
async def create_log(
    data: LogCreate,
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    policies.ensure_logbook_unlocked(current_user)
    return await LogService(gateway).create(
        current_user.id,
        week=data.week,
        title=data.title,
        content=data.content,
        attachments=[a.model_dump() for a in data.attachments],
        log_date=data.date
    )


@router.patch("/{log_id}", response_model=LogResponse)
async def update_log(
    log_id: str,
    data: LogUpdate,
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    service = LogService(gateway)
    log = await _load_log(service, log_id)
    policies.ensure_log_owner(current_user, log)
    policies.ensure_logbook_unlocked(current_user)

    fields = data.model_dump(exclude_unset=True)
    if data.attachments is not None:
        fields["attachments"] = [a.model_dump() for a in data.attachments]
    return await service.update(log_id, fields)


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(
    log_id: str,
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    service = LogService(gateway)
    log = await _load_log(service, log_id)
    policies.ensure_log_owner(current_user, log)
    policies.ensure_logbook_unlocked(current_user)
    await service.delete(log_id)


# ==================== Shared ====================

@router.get("/student/{student_id}", response_model=List[LogResponse])
async def list_student_logs(
    student_id: str,
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    student = await _load_student(gateway, student_id)
    policies.ensure_can_view_student(current_user, student)
    return await LogService(gateway).list_for_student(student_id)


@router.get("/{log_id}", response_model=LogResponse)
async def get_log(
    log_id: str,
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    log = await _load_log(LogService(gateway), log_id)
    student = await _load_student(gateway, log.student_id)
    policies.ensure_can_view_student(current_user, student)
    return log


# ==================== Supervisor ====================

@router.post("/{log_id}/status", response_model=LogResponse)
async def review_log(
    log_id: str,
    data: LogStatusUpdate,
    current_user: User = Depends(get_current_supervisor),
    gateway: PersistenceGateway = Depends(get_gateway),
    scheduler: SkillDerivationScheduler = Depends(get_skill_scheduler)
):
    """Approve or reject a pending log"""
    service = LogService(gateway, skill_scheduler=scheduler)
    log = await _load_log(service, log_id)
    student = await _load_student(gateway, log.student_id)
    policies.ensure_supervises(current_user, student)
    policies.ensure_logbook_reviewable(student)

    return await service.set_status(
        log_id, data.status, feedback=data.feedback, reviewer_id=current_user.id
    )


@router.post("/{log_id}/comment", response_model=LogResponse)
async def comment_on_log(
    log_id: str,
    data: LogComment,
    current_user: User = Depends(get_current_supervisor),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    service = LogService(gateway)
    log = await _load_log(service, log_id)
    student = await _load_student(gateway, log.student_id)
    policies.ensure_supervises(current_user, student)
    policies.ensure_logbook_reviewable(student)

    return await service.add_comment(log_id, data.comment)
