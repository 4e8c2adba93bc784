"""
Final review endpoints

Student: request / cancel final review of the whole logbook.
Supervisor: sign off a linked student's logbook.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from chronicle.api.deps import get_gateway
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.user import User, UserRole
from chronicle.modules.auth.dependencies import get_current_student, get_current_supervisor
from chronicle.schemas.user import UserResponse
from chronicle.schemas.workflow import FinalReviewRequest, SignoffRequest
from chronicle.services import policies
from chronicle.services.completion_service import CompletionService
from chronicle.services.log_service import LogService

router = APIRouter()


@router.post("/request", response_model=UserResponse)
async def request_final_review(
    data: FinalReviewRequest,
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    logs = await LogService(gateway).list_for_student(current_user.id)
    policies.ensure_ready_for_final_review(logs)
    return await CompletionService(gateway).request_final_review(current_user.id, data.final_summary)


@router.post("/cancel", response_model=UserResponse)
async def cancel_final_review(
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await CompletionService(gateway).cancel_final_review(current_user.id)


@router.post("/{student_id}/sign-off", response_model=UserResponse)
async def sign_off(
    student_id: str,
    data: SignoffRequest,
    current_user: User = Depends(get_current_supervisor),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    student = await gateway.get(make_key("users", student_id))
    if not student or student.role != UserRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )
    policies.ensure_supervises(current_user, student)

    return await CompletionService(gateway).handle_final_signoff(
        student_id, data.evaluation, data.decision.value
    )
