"""
Admin Service
Activity feed, announcements, program cycles and branding
"""

from datetime import datetime, date
from typing import List, Optional

from chronicle.core.config import settings
from chronicle.core.exceptions import ValidationError
from chronicle.core.logging_config import logger
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.admin import (
    SystemEvent, SystemEventType, Announcement, ProgramCycle,
    BrandingSetting, BrandingTheme, BRANDING_KEY
)


class AdminService:
    """Service for admin-managed records"""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    # =====================================================
    # SYSTEM EVENTS
    # =====================================================

    async def log_event(self, type: SystemEventType, message: str) -> SystemEvent:
        """Append an entry to the admin activity feed"""
        event = await self.gateway.push("system_events", {
            "type": type,
            "message": message,
            "timestamp": datetime.utcnow(),
        })
        logger.info(f"[Event] {type.value}: {message}")
        return event

    async def get_system_events(self, limit: Optional[int] = None) -> List[SystemEvent]:
        """Most recent events first"""
        limit = limit or settings.SYSTEM_EVENTS_LIMIT
        events = await self.gateway.all("system_events")
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

    # =====================================================
    # ANNOUNCEMENTS
    # =====================================================

    async def create_announcement(self, title: str, content: str) -> Announcement:
        if not title.strip() or not content.strip():
            raise ValidationError("Announcement title and content are required")
        return await self.gateway.push("announcements", {
            "title": title.strip(),
            "content": content,
            "created_at": datetime.utcnow(),
            "active": True,
        })

    async def get_announcements(self, active_only: bool = False) -> List[Announcement]:
        announcements = await self.gateway.all("announcements")
        if active_only:
            announcements = [a for a in announcements if a.active]
        return sorted(announcements, key=lambda a: a.created_at, reverse=True)

    async def toggle_announcement(self, announcement_id: str) -> Optional[Announcement]:
        key = make_key("announcements", announcement_id)
        announcement = await self.gateway.get(key)
        if announcement is None:
            return None
        return await self.gateway.update(key, {"active": not announcement.active})

    async def delete_announcement(self, announcement_id: str) -> bool:
        return await self.gateway.remove(make_key("announcements", announcement_id))

    # =====================================================
    # PROGRAM CYCLES
    # =====================================================

    async def create_program_cycle(self, name: str, start_date: date, end_date: date) -> ProgramCycle:
        if not name.strip():
            raise ValidationError("Program cycle name is required", field="name")
        if end_date < start_date:
            raise ValidationError("Program cycle cannot end before it starts", field="end_date")
        return await self.gateway.push("program_cycles", {
            "name": name.strip(),
            "start_date": start_date,
            "end_date": end_date,
        })

    async def get_program_cycles(self) -> List[ProgramCycle]:
        """Latest cycle first"""
        cycles = await self.gateway.all("program_cycles")
        return sorted(cycles, key=lambda c: c.start_date, reverse=True)

    async def delete_program_cycle(self, cycle_id: str) -> bool:
        return await self.gateway.remove(make_key("program_cycles", cycle_id))

    # =====================================================
    # BRANDING
    # =====================================================

    async def get_branding(self) -> Optional[BrandingSetting]:
        return await self.gateway.get(make_key("branding", BRANDING_KEY))

    async def update_branding(
        self,
        logo_url: Optional[str] = None,
        theme: Optional[BrandingTheme] = None
    ) -> BrandingSetting:
        return await self.gateway.set(make_key("branding", BRANDING_KEY), {
            "logo_url": logo_url,
            "theme": theme or BrandingTheme.DEFAULT,
        })
