"""
Shared FastAPI dependencies

Endpoints build their services from these, so tests can swap the gateway,
the skill scheduler or the AI client through app.dependency_overrides.
"""
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.core.database import get_db
from chronicle.db.gateway import PersistenceGateway, SQLAlchemyGateway
from chronicle.services.skill_service import SkillDerivationScheduler
from chronicle.services.task_runner import runner
from chronicle.utils.ai_client import LogbookAIClient

_ai_client: Optional[LogbookAIClient] = None


async def get_gateway(db: AsyncSession = Depends(get_db)) -> PersistenceGateway:
    return SQLAlchemyGateway(db)


def get_ai_client() -> LogbookAIClient:
    """Process-wide AI client, created on first use"""
    global _ai_client
    if _ai_client is None:
        _ai_client = LogbookAIClient()
    return _ai_client


def get_skill_scheduler(
    ai_client: LogbookAIClient = Depends(get_ai_client)
) -> SkillDerivationScheduler:
    return SkillDerivationScheduler(runner, ai_client)
