from sqlalchemy import Column, String, Boolean, Text, DateTime
from datetime import datetime

from chronicle.core.database import Base
from chronicle.core.types import GUID, new_record_id


class NotificationType:
    """Known values for Notification.type"""
    FINAL_REVIEW_REQUEST = "final_review_request"


class Notification(Base):
    """In-app notification addressed to a single user"""
    __tablename__ = "notifications"

    id = Column(GUID, primary_key=True, default=new_record_id)
    user_id = Column(GUID, index=True, nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    # Back-references, only used to find and retract stale notifications
    log_id = Column(GUID, index=True, nullable=True)
    student_id = Column(GUID, nullable=True)
    type = Column(String(50), nullable=True)

    def __repr__(self):
        return f"<Notification to={self.user_id} read={self.read}>"
