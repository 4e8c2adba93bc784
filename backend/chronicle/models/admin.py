"""
Admin-managed records: system activity feed, announcements,
program cycles and branding.
"""
from sqlalchemy import Column, String, Boolean, Text, Date, DateTime, Enum as SQLEnum
from datetime import datetime
import enum

from chronicle.core.database import Base
from chronicle.core.types import GUID, new_record_id


class SystemEventType(str, enum.Enum):
    USER_REGISTERED = "user_registered"
    LOG_SUBMITTED = "log_submitted"
    LOGBOOK_FINALIZED = "logbook_finalized"
    LOG_APPROVED = "log_approved"


class BrandingTheme(str, enum.Enum):
    DEFAULT = "default"
    TEAL = "teal"
    ROSE = "rose"
    INDIGO = "indigo"
    EMERALD = "emerald"
    AMBER = "amber"


class SystemEvent(Base):
    """Activity feed entry shown on the admin dashboard"""
    __tablename__ = "system_events"

    id = Column(GUID, primary_key=True, default=new_record_id)
    type = Column(SQLEnum(SystemEventType, values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(GUID, primary_key=True, default=new_record_id)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    active = Column(Boolean, default=True, nullable=False)


class ProgramCycle(Base):
    """An internship period (e.g. "2025 SIWES")"""
    __tablename__ = "program_cycles"

    id = Column(GUID, primary_key=True, default=new_record_id)
    name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)


class BrandingSetting(Base):
    """Single-row table keyed by BRANDING_KEY"""
    __tablename__ = "branding_settings"

    id = Column(String(36), primary_key=True)
    logo_url = Column(Text, nullable=True)  # base64 data URL
    theme = Column(SQLEnum(BrandingTheme, values_callable=lambda obj: [e.value for e in obj]), default=BrandingTheme.DEFAULT)


BRANDING_KEY = "settings"
