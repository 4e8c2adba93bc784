"""Schemas for completion, notifications, skills and dashboards"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime
import enum

from chronicle.models.skill import SkillCategory
from chronicle.schemas.log import LogResponse
from chronicle.schemas.user import UserResponse
from chronicle.schemas.admin import SystemEventResponse


class SignoffDecision(str, enum.Enum):
    APPROVE = "approve"
    REQUEST_CHANGES = "request_changes"


class FinalReviewRequest(BaseModel):
    final_summary: str = Field(..., min_length=1)


class SignoffRequest(BaseModel):
    evaluation: str = Field(..., min_length=1)
    decision: SignoffDecision


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    message: str
    read: bool
    created_at: datetime
    log_id: Optional[str] = None
    student_id: Optional[str] = None
    type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CountResponse(BaseModel):
    count: int


class SkillResponse(BaseModel):
    id: str
    student_id: str
    name: str
    category: SkillCategory
    log_ids: List[str] = []

    model_config = ConfigDict(from_attributes=True)


class StudentSummaryResponse(BaseModel):
    student_id: str
    it_status: str
    locked: bool
    log_counts: Dict[str, int]
    can_request_final_review: bool
    skill_count: int


class SupervisorDashboardResponse(BaseModel):
    students: List[UserResponse]
    logs: List[LogResponse]
    log_counts: Dict[str, int]
    awaiting_final_review: List[str]


class AdminStatsResponse(BaseModel):
    total_users: int
    users_by_role: Dict[str, int]
    log_counts: Dict[str, int]
    students_by_it_status: Dict[str, int]
    at_risk_students: List[str]
    avg_logs_per_supervisor: float
    recent_events: List[SystemEventResponse]
