"""
Persistence Gateway - key-based access to the logbook data set

Components never talk to the database directly. They receive a
PersistenceGateway and address records with keys of the form
``collection/id`` (or ``collection/id/field`` inside a multi-path write):

    log = await gateway.get("logs/3f1c...")
    pending = await gateway.query("logs", "student_id", student_id)
    await gateway.update_paths({
        "notifications/ab12...": None,          # delete the record
        "skills/9e0d.../log_ids": [log_id],     # overwrite one field
    })

Every call is an independent write committed on its own; only
update_paths applies several changes atomically.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Type

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chronicle.core.database import Base, session_factory as default_session_factory
from chronicle.core.exceptions import PersistenceError
from chronicle.core.logging_config import logger
from chronicle.core.types import new_record_id
from chronicle.models import (
    User, LogEntry, Notification, Skill, SystemEvent,
    Announcement, ProgramCycle, BrandingSetting
)


COLLECTIONS: Dict[str, Type[Base]] = {
    "users": User,
    "logs": LogEntry,
    "notifications": Notification,
    "skills": Skill,
    "system_events": SystemEvent,
    "announcements": Announcement,
    "program_cycles": ProgramCycle,
    "branding": BrandingSetting,
}


def make_key(collection: str, record_id: str, field: Optional[str] = None) -> str:
    """Build a gateway key"""
    key = f"{collection}/{record_id}"
    return f"{key}/{field}" if field else key


def parse_key(key: str) -> Tuple[str, str, Optional[str]]:
    """Split ``collection/id[/field]`` into its parts"""
    parts = [p for p in key.strip("/").split("/") if p]
    if len(parts) == 2:
        return parts[0], parts[1], None
    if len(parts) == 3:
        return parts[0], parts[1], parts[2]
    raise ValueError(f"Invalid gateway key: '{key}'")


class PersistenceGateway(ABC):
    """Capability set the workflow components depend on"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Point read. Returns None when nothing is stored at key."""

    @abstractmethod
    async def query(self, collection: str, field: str, value: Any) -> List[Any]:
        """All records of collection whose field equals value"""

    @abstractmethod
    async def all(self, collection: str) -> List[Any]:
        """Every record of a collection"""

    @abstractmethod
    async def set(self, key: str, value: Dict[str, Any]) -> Any:
        """Create or overwrite the record at key with the given fields"""

    @abstractmethod
    async def push(self, collection: str, value: Dict[str, Any]) -> Any:
        """Create a record under a freshly generated id"""

    @abstractmethod
    async def update(self, key: str, fields: Dict[str, Any]) -> Optional[Any]:
        """Partial update. Returns None when the record does not exist."""

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """Delete the record at key. Returns False when it did not exist."""

    @abstractmethod
    async def update_paths(self, updates: Dict[str, Any]) -> None:
        if not updates:
            return

        # Resolve and validate every path before touching the session, so a
        # bad path leaves nothing pending for the next commit to pick up
        planned = []
        for path, value in updates.items():
            collection, record_id, field = parse_key(path)
            model = self._model(collection)
            if field is not None:
                self._check_field(model, field)
            elif value is not None:
                for name in value:
                    if name != "id":
                        self._check_field(model, name)
            record = await self._load(model, record_id, path)
            planned.append((path, model, record_id, field, value, record))

        try:
            for path, model, record_id, field, value, record in planned:
                if field is None:
                    if value is None:
                        if record is not None:
                            await self.db.delete(record)
                    elif record is None:
                        record = model(id=record_id)
                        self._assign(record, value)
                        self.db.add(record)
                    else:
                        self._assign(record, value)
                elif record is None:
                    logger.debug(f"update_paths: skipping field write on missing record {path}")
                else:
                    setattr(record, field, value)
        except Exception:
            await self.db.rollback()
            raise

        await self._commit("update_paths", f"{len(updates)} paths")


@asynccontextmanager
async def gateway_scope(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None
) -> AsyncIterator[PersistenceGateway]:
    """Gateway on a private session, for work that outlives a request"""
    factory = session_factory or default_session_factory()
    async with factory() as session:
        yield SQLAlchemyGateway(session)
