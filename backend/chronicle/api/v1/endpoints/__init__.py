# API endpoints
from . import users, logs, completion, notifications, skills, dashboard, admin, ai, health

__all__ = ["users", "logs", "completion", "notifications", "skills", "dashboard", "admin", "ai", "health"]
