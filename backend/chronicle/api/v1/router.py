from fastapi import APIRouter
from chronicle.api.v1.endpoints import users, logs, completion, notifications, skills, dashboard, admin, ai, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(logs.router, prefix="/logs", tags=["Logs"])
api_router.include_router(completion.router, prefix="/completion", tags=["Final Review"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(skills.router, prefix="/skills", tags=["Skills"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(ai.router, prefix="/ai", tags=["AI"])
