"""
Unit Tests for NotificationService
"""
import pytest
import asyncio

from chronicle.services.notification_service import NotificationService


class TestNotificationService:

    @pytest.mark.asyncio
    async def test_notify_creates_unread(self, gateway):
        service = NotificationService(gateway)
        user_id = gateway.new_id()

        notification = await service.notify(user_id, "Hello", log_id=gateway.new_id())

        assert notification.read is False
        assert notification.user_id == user_id
        assert notification.created_at is not None

    @pytest.mark.asyncio
    async def test_repeated_notify_is_not_deduplicated(self, gateway):
        service = NotificationService(gateway)
        user_id = gateway.new_id()
        await service.notify(user_id, "Same")
        await service.notify(user_id, "Same")
        assert len(await service.list_for_user(user_id)) == 2

    @pytest.mark.asyncio
    async def test_list_newest_first(self, gateway):
        service = NotificationService(gateway)
        user_id = gateway.new_id()
        await service.notify(user_id, "first")
        await asyncio.sleep(0.01)
        await service.notify(user_id, "second")

        messages = [n.message for n in await service.list_for_user(user_id)]
        assert messages == ["second", "first"]

    @pytest.mark.asyncio
    async def test_retract_all_addressees(self, gateway):
        service = NotificationService(gateway)
        log_id = gateway.new_id()
        await service.notify(gateway.new_id(), "to supervisor", log_id=log_id)
        await service.notify(gateway.new_id(), "to student", log_id=log_id)
        await service.notify(gateway.new_id(), "unrelated", log_id=gateway.new_id())

        assert await service.retract_by_log_ref(log_id) == 2
        assert await gateway.query("notifications", "log_id", log_id) == []
        assert len(await gateway.all("notifications")) == 1

    @pytest.mark.asyncio
    async def test_retract_scoped_to_user(self, gateway):
        service = NotificationService(gateway)
        log_id = gateway.new_id()
        reviewer, other = gateway.new_id(), gateway.new_id()
        await service.notify(reviewer, "a", log_id=log_id)
        await service.notify(other, "b", log_id=log_id)

        assert await service.retract_by_log_ref(log_id, user_id=reviewer) == 1
        remaining = await gateway.query("notifications", "log_id", log_id)
        assert [n.user_id for n in remaining] == [other]

    @pytest.mark.asyncio
    async def test_retract_nothing(self, gateway):
        assert await NotificationService(gateway).retract_by_log_ref(gateway.new_id()) == 0

    @pytest.mark.asyncio
    async def test_mark_read(self, gateway):
        service = NotificationService(gateway)
        notification = await service.notify(gateway.new_id(), "x")

        assert await service.mark_read(notification.id) is True
        assert await service.mark_read(gateway.new_id()) is False

    @pytest.mark.asyncio
    async def test_mark_all_read_and_clear_read(self, gateway):
        service = NotificationService(gateway)
        user_id = gateway.new_id()
        for i in range(3):
            await service.notify(user_id, f"n{i}")
        other = await service.notify(gateway.new_id(), "other user")

        assert await service.mark_all_read(user_id) == 3
        assert await service.mark_all_read(user_id) == 0
        assert all(n.read for n in await service.list_for_user(user_id))

        assert await service.clear_read(user_id) == 3
        assert await service.list_for_user(user_id) == []
        assert (await service.list_for_user(other.user_id))[0].read is False
