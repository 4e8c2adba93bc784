from chronicle.services.notification_service import NotificationService
from chronicle.services.admin_service import AdminService
from chronicle.services.log_service import LogService
from chronicle.services.completion_service import CompletionService
from chronicle.services.user_service import UserService
from chronicle.services.dashboard_service import DashboardService

# Skill aggregation and its background runner
from chronicle.services.skill_service import SkillService, SkillDerivationScheduler
from chronicle.services.task_runner import BackgroundTaskRunner, runner

__all__ = [
    "NotificationService",
    "AdminService",
    "LogService",
    "CompletionService",
    "UserService",
    "DashboardService",
    "SkillService",
    "SkillDerivationScheduler",
    "BackgroundTaskRunner",
    "runner",
]
