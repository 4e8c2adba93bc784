"""Detailed health: database reachability and background task backlog"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.core.database import get_db
from chronicle.core.logging_config import logger
from chronicle.services.task_runner import runner

router = APIRouter()


@router.get("/health")
async def detailed_health(db: AsyncSession = Depends(get_db)):
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"[Health] Database check failed: {e}")
        database = "unreachable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "background_tasks": runner.pending,
        "recent_task_failures": len(runner.recent_failures()),
    }
