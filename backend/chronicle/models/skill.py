from sqlalchemy import Column, String, JSON, Enum as SQLEnum
import enum

from chronicle.core.database import Base
from chronicle.core.types import GUID, new_record_id


class SkillCategory(str, enum.Enum):
    TECHNICAL = "technical"
    SOFT = "soft"


class Skill(Base):
    """Skill derived from a student's approved logs"""
    __tablename__ = "skills"

    id = Column(GUID, primary_key=True, default=new_record_id)
    student_id = Column(GUID, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    category = Column(SQLEnum(SkillCategory, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    log_ids = Column(JSON, default=list)  # evidence, set semantics

    def __repr__(self):
        return f"<Skill {self.name} ({self.category})>"
