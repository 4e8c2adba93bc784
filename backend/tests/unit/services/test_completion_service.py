"""
Unit Tests for the IT Completion Workflow
"""
import pytest

from chronicle.core.exceptions import IllegalTransitionError, ValidationError
from chronicle.models.admin import SystemEventType
from chronicle.models.notification import NotificationType
from chronicle.models.user import ItStatus
from chronicle.services.completion_service import CompletionService


class TestFinalReview:

    @pytest.mark.asyncio
    async def test_request_final_review(self, gateway, student, supervisor):
        service = CompletionService(gateway)

        updated = await service.request_final_review(student.id, "It was a great placement")

        assert updated.it_status == ItStatus.AWAITING_APPROVAL
        assert updated.final_summary == "It was a great placement"

        notes = await gateway.query("notifications", "user_id", supervisor.id)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.FINAL_REVIEW_REQUEST
        assert notes[0].student_id == student.id
        assert notes[0].message == f"{student.full_name} has submitted their logbook for final review."

        events = await gateway.all("system_events")
        assert [e.type for e in events] == [SystemEventType.LOGBOOK_FINALIZED]

    @pytest.mark.asyncio
    async def test_request_for_missing_student(self, gateway):
        assert await CompletionService(gateway).request_final_review(gateway.new_id(), "x") is None

    @pytest.mark.asyncio
    async def test_request_twice_is_illegal(self, gateway, student):
        service = CompletionService(gateway)
        await service.request_final_review(student.id, "summary")
        with pytest.raises(IllegalTransitionError):
            await service.request_final_review(student.id, "again")

    @pytest.mark.asyncio
    async def test_cancel_keeps_summary_and_is_silent(self, gateway, student, supervisor):
        service = CompletionService(gateway)
        await service.request_final_review(student.id, "summary")
        before = len(await gateway.all("notifications"))

        updated = await service.cancel_final_review(student.id)

        assert updated.it_status == ItStatus.ONGOING
        assert updated.final_summary == "summary"
        assert len(await gateway.all("notifications")) == before

    @pytest.mark.asyncio
    async def test_cancel_when_ongoing_is_noop(self, gateway, student):
        updated = await CompletionService(gateway).cancel_final_review(student.id)
        assert updated.it_status == ItStatus.ONGOING


class TestSignoff:

    @pytest.mark.asyncio
    async def test_approve(self, gateway, student):
        service = CompletionService(gateway)
        await service.request_final_review(student.id, "summary")

        updated = await service.handle_final_signoff(student.id, "Excellent intern", "approve")

        assert updated.it_status == ItStatus.COMPLETED
        assert updated.supervisor_evaluation == "Excellent intern"
        notes = await gateway.query("notifications", "user_id", student.id)
        assert [n.message for n in notes] == [
            "Congratulations! Your supervisor has approved your final logbook submission."
        ]

    @pytest.mark.asyncio
    async def test_request_changes(self, gateway, student):
        service = CompletionService(gateway)
        await service.request_final_review(student.id, "summary")

        updated = await service.handle_final_signoff(student.id, "Week 3 needs work", "request_changes")

        assert updated.it_status == ItStatus.ONGOING
        assert updated.supervisor_evaluation == "Week 3 needs work"
        notes = await gateway.query("notifications", "user_id", student.id)
        assert "requested changes" in notes[0].message

    @pytest.mark.asyncio
    async def test_lenient_signoff_from_ongoing(self, gateway, student):
        updated = await CompletionService(gateway, strict_signoff=False).handle_final_signoff(
            student.id, "ok", "approve"
        )
        assert updated.it_status == ItStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_strict_signoff_from_ongoing(self, gateway, student):
        service = CompletionService(gateway, strict_signoff=True)
        with pytest.raises(IllegalTransitionError):
            await service.handle_final_signoff(student.id, "ok", "approve")

    @pytest.mark.asyncio
    async def test_unknown_decision(self, gateway, student):
        with pytest.raises(ValidationError):
            await CompletionService(gateway).handle_final_signoff(student.id, "ok", "maybe")

    @pytest.mark.asyncio
    async def test_missing_student(self, gateway):
        assert await CompletionService(gateway).handle_final_signoff(gateway.new_id(), "ok", "approve") is None
