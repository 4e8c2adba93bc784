from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text
from datetime import datetime
import enum

from chronicle.core.database import Base
from chronicle.core.types import GUID, new_record_id


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    SUPERVISOR = "supervisor"
    ADMIN = "admin"


class ItStatus(str, enum.Enum):
    """Industrial training lifecycle of a student"""
    ONGOING = "ongoing"
    AWAITING_APPROVAL = "awaiting_approval"
    COMPLETED = "completed"


class User(Base):
    """User model - students, supervisors and admins share one table"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=new_record_id)
    first_name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(SQLEnum(UserRole, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    avatar_url = Column(Text, nullable=True)

    # Student fields
    supervisor_id = Column(GUID, index=True, nullable=True)  # weak reference, never cascaded
    gender = Column(String(20), nullable=True)
    school = Column(String(255), nullable=True)
    faculty = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    level = Column(Integer, nullable=True)
    it_status = Column(SQLEnum(ItStatus, values_callable=lambda obj: [e.value for e in obj]), nullable=True)
    final_summary = Column(Text, nullable=True)
    supervisor_evaluation = Column(Text, nullable=True)

    # Supervisor fields
    supervisor_code = Column(String(50), unique=True, index=True, nullable=True)
    company_name = Column(String(255), nullable=True)
    company_role = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}"

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
