from fastapi import APIRouter, Depends

from chronicle.api.deps import get_gateway
from chronicle.db.gateway import PersistenceGateway
from chronicle.models.user import User
from chronicle.modules.auth.dependencies import (
    get_current_student, get_current_supervisor, get_current_admin
)
from chronicle.schemas.workflow import (
    StudentSummaryResponse, SupervisorDashboardResponse, AdminStatsResponse
)
from chronicle.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/student", response_model=StudentSummaryResponse)
async def student_dashboard(
    current_user: User = Depends(get_current_student),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await DashboardService(gateway).student_summary(current_user)


@router.get("/supervisor", response_model=SupervisorDashboardResponse)
async def supervisor_dashboard(
    current_user: User = Depends(get_current_supervisor),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await DashboardService(gateway).supervisor_dashboard(current_user)


@router.get("/admin", response_model=AdminStatsResponse)
async def admin_dashboard(
    current_user: User = Depends(get_current_admin),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return await DashboardService(gateway).admin_stats()
