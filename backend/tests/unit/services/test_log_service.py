"""
Unit Tests for the Log Lifecycle Engine
"""
import pytest
from faker import Faker

from chronicle.core.config import settings
from chronicle.core.exceptions import (
    ValidationError, IllegalTransitionError, UserNotFoundError, PersistenceError
)
from chronicle.db.gateway import make_key
from chronicle.models.admin import SystemEventType
from chronicle.models.log_entry import LogStatus
from chronicle.models.user import UserRole
from chronicle.services.log_service import LogService
from chronicle.services.notification_service import NotificationService

fake = Faker()


class FailingNotificationService(NotificationService):
    async def notify(self, *args, **kwargs):
        raise PersistenceError("push", "notifications", "connection lost")


@pytest.fixture
async def log_service(gateway, skill_scheduler, task_runner):
    yield LogService(gateway, skill_scheduler=skill_scheduler)
    await task_runner.drain()


async def _create(service, student, week=1, **kwargs):
    return await service.create(
        student.id,
        week=week,
        title=kwargs.pop("title", fake.sentence(nb_words=4)),
        content=kwargs.pop("content", fake.paragraph()),
        **kwargs
    )


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_pending_and_notifies_supervisor(self, log_service, gateway, student, supervisor):
        log = await _create(log_service, student, week=3)

        assert log.status == LogStatus.PENDING
        assert log.feedback is None
        assert log.attachments == []

        notifications = await gateway.query("notifications", "user_id", supervisor.id)
        assert len(notifications) == 1
        assert notifications[0].log_id == log.id
        assert notifications[0].message == (
            f"{student.first_name} {student.surname} submitted a log for week 3."
        )

        events = await gateway.all("system_events")
        assert [e.type for e in events] == [SystemEventType.LOG_SUBMITTED]

    @pytest.mark.asyncio
    async def test_create_without_supervisor(self, log_service, gateway, make_user):
        loner = await make_user(UserRole.STUDENT)
        await _create(log_service, loner)
        assert await gateway.all("notifications") == []

    @pytest.mark.asyncio
    async def test_create_requires_title_and_content(self, log_service, student):
        with pytest.raises(ValidationError):
            await _create(log_service, student, title="   ")
        with pytest.raises(ValidationError):
            await _create(log_service, student, content="")
        with pytest.raises(ValidationError):
            await _create(log_service, student, week=0)

    @pytest.mark.asyncio
    async def test_create_for_unknown_student(self, log_service, gateway):
        with pytest.raises(UserNotFoundError):
            await log_service.create(gateway.new_id(), 1, "Title", "Content")

    @pytest.mark.asyncio
    async def test_duplicate_weeks_allowed_by_default(self, log_service, student):
        await _create(log_service, student, week=2)
        await _create(log_service, student, week=2)
        assert len(await log_service.list_for_student(student.id)) == 2

    @pytest.mark.asyncio
    async def test_duplicate_weeks_refused_when_disabled(self, log_service, student, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_DUPLICATE_WEEKS", False)
        await _create(log_service, student, week=2)
        with pytest.raises(ValidationError):
            await _create(log_service, student, week=2)

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_undo_create(self, gateway, student):
        service = LogService(gateway, notifications=FailingNotificationService(gateway))
        log = await _create(service, student)
        assert await gateway.get(make_key("logs", log.id)) is not None


class TestReview:

    @pytest.mark.asyncio
    async def test_reject_requires_feedback(self, log_service, student):
        log = await _create(log_service, student)
        with pytest.raises(ValidationError):
            await log_service.set_status(log.id, LogStatus.REJECTED, feedback="  ")

    @pytest.mark.asyncio
    async def test_cannot_set_pending(self, log_service, student):
        log = await _create(log_service, student)
        with pytest.raises(ValidationError):
            await log_service.set_status(log.id, LogStatus.PENDING)

    @pytest.mark.asyncio
    async def test_reject_notifies_student_and_retracts_supervisor(self, log_service, gateway, student, supervisor):
        log = await _create(log_service, student, week=4)

        rejected = await log_service.set_status(log.id, LogStatus.REJECTED, feedback="Too short")

        assert rejected.status == LogStatus.REJECTED
        assert rejected.feedback == "Too short"
        assert await gateway.query("notifications", "user_id", supervisor.id) == []
        student_notes = await gateway.query("notifications", "user_id", student.id)
        assert [n.message for n in student_notes] == ["Your log for week 4 has been rejected."]

    @pytest.mark.asyncio
    async def test_retraction_scoped_to_reviewer(self, log_service, gateway, student, supervisor):
        log = await _create(log_service, student)
        bystander = gateway.new_id()
        await NotificationService(gateway).notify(bystander, "FYI", log_id=log.id)

        await log_service.set_status(log.id, LogStatus.APPROVED, reviewer_id=supervisor.id)

        referencing = await gateway.query("notifications", "log_id", log.id)
        assert {n.user_id for n in referencing} == {bystander, student.id}

    @pytest.mark.asyncio
    async def test_approve_twice_is_illegal(self, log_service, student, task_runner):
        log = await _create(log_service, student)
        await log_service.set_status(log.id, LogStatus.APPROVED)
        await task_runner.drain()

        with pytest.raises(IllegalTransitionError):
            await log_service.set_status(log.id, LogStatus.APPROVED)
        with pytest.raises(IllegalTransitionError):
            await log_service.set_status(log.id, LogStatus.REJECTED, feedback="late")

    @pytest.mark.asyncio
    async def test_approve_logs_event_and_derives_skills(self, log_service, gateway, student, task_runner, ai_client):
        log = await _create(log_service, student, week=5)

        await log_service.set_status(log.id, LogStatus.APPROVED)
        await task_runner.drain()

        assert ai_client.call_count == 1
        skills = await gateway.query("skills", "student_id", student.id)
        assert sorted(s.name for s in skills) == ["Communication", "Python", "SQL"]
        assert all(s.log_ids == [log.id] for s in skills)

        event_types = {e.type for e in await gateway.all("system_events")}
        assert SystemEventType.LOG_APPROVED in event_types

    @pytest.mark.asyncio
    async def test_classifier_failure_does_not_block_approval(self, log_service, gateway, student, task_runner, ai_client):
        ai_client.fail = True
        log = await _create(log_service, student)

        approved = await log_service.set_status(log.id, LogStatus.APPROVED)
        await task_runner.drain()

        assert approved.status == LogStatus.APPROVED
        assert await gateway.query("skills", "student_id", student.id) == []
        assert task_runner.recent_failures()[0]["error_type"] == "ClassifierError"

    @pytest.mark.asyncio
    async def test_missing_log(self, log_service, gateway):
        assert await log_service.set_status(gateway.new_id(), LogStatus.APPROVED) is None


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_rejected_resets_to_pending(self, log_service, gateway, student, supervisor):
        log = await _create(log_service, student, week=6)
        await log_service.set_status(log.id, LogStatus.REJECTED, feedback="Add detail")
        await NotificationService(gateway).notify(supervisor.id, "stale", log_id=log.id)

        updated = await log_service.update(log.id, {"content": "Much more detail"})

        assert updated.status == LogStatus.PENDING
        assert updated.feedback is None
        assert updated.content == "Much more detail"

        supervisor_notes = await gateway.query("notifications", "user_id", supervisor.id)
        assert [n.message for n in supervisor_notes] == [
            f"{student.full_name} has updated their rejected log for week 6."
        ]

    @pytest.mark.asyncio
    async def test_update_pending_keeps_notifications(self, log_service, gateway, student, supervisor):
        log = await _create(log_service, student)
        updated = await log_service.update(log.id, {"title": "  New title  ", "status": "approved"})

        assert updated.title == "New title"
        assert updated.status == LogStatus.PENDING
        assert len(await gateway.query("notifications", "user_id", supervisor.id)) == 1

    @pytest.mark.asyncio
    async def test_update_approved_is_illegal(self, log_service, student):
        log = await _create(log_service, student)
        await log_service.set_status(log.id, LogStatus.APPROVED)
        with pytest.raises(IllegalTransitionError):
            await log_service.update(log.id, {"title": "Rewrite"})

    @pytest.mark.asyncio
    async def test_update_missing(self, log_service, gateway):
        assert await log_service.update(gateway.new_id(), {"title": "x"}) is None


class TestCommentAndDelete:

    @pytest.mark.asyncio
    async def test_comment_requires_approved(self, log_service, student):
        log = await _create(log_service, student)
        with pytest.raises(IllegalTransitionError):
            await log_service.add_comment(log.id, "Nice")

    @pytest.mark.asyncio
    async def test_comment_sets_and_clears(self, log_service, gateway, student):
        log = await _create(log_service, student, week=7)
        await log_service.set_status(log.id, LogStatus.APPROVED)

        commented = await log_service.add_comment(log.id, "Great work")
        assert commented.feedback == "Great work"
        assert commented.status == LogStatus.APPROVED

        cleared = await log_service.add_comment(log.id, "   ")
        assert cleared.feedback is None

        messages = [n.message for n in await gateway.query("notifications", "user_id", student.id)]
        assert messages.count("Your supervisor commented on your log for week 7.") == 1

    @pytest.mark.asyncio
    async def test_delete_retracts_everything(self, log_service, gateway, student):
        log = await _create(log_service, student)
        await log_service.set_status(log.id, LogStatus.REJECTED, feedback="No")
        assert await gateway.query("notifications", "log_id", log.id)

        assert await log_service.delete(log.id) is True
        assert await gateway.query("notifications", "log_id", log.id) == []
        assert await log_service.get_log(log.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, log_service, gateway):
        assert await log_service.delete(gateway.new_id()) is False
