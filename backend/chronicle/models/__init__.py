from chronicle.models.user import User, UserRole, ItStatus
from chronicle.models.log_entry import LogEntry, LogStatus
from chronicle.models.notification import Notification, NotificationType
from chronicle.models.skill import Skill, SkillCategory
from chronicle.models.admin import (
    SystemEvent, SystemEventType, Announcement, ProgramCycle,
    BrandingSetting, BrandingTheme, BRANDING_KEY
)

__all__ = [
    "User", "UserRole", "ItStatus",
    "LogEntry", "LogStatus",
    "Notification", "NotificationType",
    "Skill", "SkillCategory",
    "SystemEvent", "SystemEventType",
    "Announcement", "ProgramCycle",
    "BrandingSetting", "BrandingTheme", "BRANDING_KEY",
]
