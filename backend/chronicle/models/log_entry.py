from sqlalchemy import Column, String, Integer, Text, Date, DateTime, JSON, Enum as SQLEnum
from datetime import datetime, date as date_type
import enum

from chronicle.core.database import Base
from chronicle.core.types import GUID, new_record_id


class LogStatus(str, enum.Enum):
    """Review status of a weekly log"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LogEntry(Base):
    """One weekly journal submission by a student"""
    __tablename__ = "log_entries"

    id = Column(GUID, primary_key=True, default=new_record_id)
    student_id = Column(GUID, index=True, nullable=False)
    date = Column(Date, default=date_type.today, nullable=False)
    week = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)  # markdown
    attachments = Column(JSON, default=list)  # [{"name": ..., "url": ...}]
    status = Column(
        SQLEnum(LogStatus, values_callable=lambda obj: [e.value for e in obj]),
        default=LogStatus.PENDING,
        nullable=False
    )
    # Rejection reason, or optional supervisor comment on an approved log
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<LogEntry week={self.week} {self.status}>"
