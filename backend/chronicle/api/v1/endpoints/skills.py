from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from chronicle.api.deps import get_gateway
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.user import User, UserRole
from chronicle.modules.auth.dependencies import get_current_user, get_current_student
from chronicle.schemas.workflow import SkillResponse
from chronicle.services.policies import ensure_can_view_student
from chronicle.services.skill_service import SkillService

router = APIRouter()


@router.get("", response_model=List[SkillResponse])
async def list_my_skills(
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await SkillService(gateway).list_for_student(current_user.id)


@router.get("/student/{student_id}", response_model=List[SkillResponse])
async def list_student_skills(
    student_id: str,
    current_user: User = Depends(get_current_user),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    student = await gateway.get(make_key("users", student_id))
    if not student or student.role != UserRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )
    ensure_can_view_student(current_user, student)
    return await SkillService(gateway).list_for_student(student_id)
