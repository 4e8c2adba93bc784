from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import Optional, List, Dict, Any
from datetime import datetime

from chronicle.models.user import UserRole, ItStatus


class UserRegister(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: UserRole
    avatar_url: Optional[str] = None

    # Student
    supervisor_code: Optional[str] = None
    gender: Optional[str] = None
    school: Optional[str] = None
    faculty: Optional[str] = None
    department: Optional[str] = None
    level: Optional[int] = Field(None, ge=100, le=900)

    # Supervisor
    company_name: Optional[str] = None
    company_role: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    first_name: str
    surname: str
    email: str
    role: UserRole
    avatar_url: Optional[str] = None
    supervisor_id: Optional[str] = None
    gender: Optional[str] = None
    school: Optional[str] = None
    faculty: Optional[str] = None
    department: Optional[str] = None
    level: Optional[int] = None
    it_status: Optional[ItStatus] = None
    final_summary: Optional[str] = None
    supervisor_evaluation: Optional[str] = None
    supervisor_code: Optional[str] = None
    company_name: Optional[str] = None
    company_role: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AvatarUpdate(BaseModel):
    avatar_url: Optional[str] = None


class SupervisorLinkRequest(BaseModel):
    supervisor_code: str = Field(..., min_length=1)


class SupervisorLinkResponse(BaseModel):
    success: bool
    message: str
    user: Optional[UserResponse] = None


class BulkUserRow(BaseModel):
    """One imported row; validated by the service so bad rows are reported, not rejected"""
    first_name: Optional[str] = Field(None, alias="firstName")
    surname: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    gender: Optional[str] = None
    school: Optional[str] = None
    faculty: Optional[str] = None
    department: Optional[str] = None
    level: Optional[Any] = None
    supervisor_code: Optional[str] = Field(None, alias="supervisorCode")
    company_name: Optional[str] = Field(None, alias="companyName")
    company_role: Optional[str] = Field(None, alias="companyRole")

    model_config = ConfigDict(populate_by_name=True)


class BulkCreateRequest(BaseModel):
    users: List[BulkUserRow]


class BulkCreateError(BaseModel):
    data: Dict[str, Any]
    error: str


class BulkCreateResponse(BaseModel):
    success_count: int
    errors: List[BulkCreateError]
