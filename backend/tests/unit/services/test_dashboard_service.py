"""
Unit Tests for the dashboard aggregators
"""
import pytest
from datetime import datetime, timedelta

from chronicle.models.log_entry import LogStatus
from chronicle.models.user import UserRole, ItStatus
from chronicle.services.dashboard_service import DashboardService


async def _log(gateway, student_id, status, week=1):
    return await gateway.push("logs", {
        "student_id": student_id, "week": week, "title": "t", "content": "c", "status": status
    })


class TestStudentSummary:

    @pytest.mark.asyncio
    async def test_counts_and_lock(self, gateway, make_user):
        student = await make_user(UserRole.STUDENT, it_status=ItStatus.AWAITING_APPROVAL)
        await _log(gateway, student.id, LogStatus.APPROVED)
        await _log(gateway, student.id, LogStatus.APPROVED, week=2)

        summary = await DashboardService(gateway).student_summary(student)

        assert summary["log_counts"] == {"pending": 0, "approved": 2, "rejected": 0, "total": 2}
        assert summary["locked"] is True
        assert summary["it_status"] == "awaiting_approval"
        assert summary["can_request_final_review"] is True

    @pytest.mark.asyncio
    async def test_empty_logbook_cannot_request_review(self, gateway, student):
        summary = await DashboardService(gateway).student_summary(student)
        assert summary["can_request_final_review"] is False
        assert summary["locked"] is False


class TestSupervisorDashboard:

    @pytest.mark.asyncio
    async def test_linked_students_only(self, gateway, make_user, supervisor, student):
        other = await make_user(UserRole.STUDENT)
        await _log(gateway, student.id, LogStatus.PENDING)
        await _log(gateway, student.id, LogStatus.REJECTED, week=2)
        await _log(gateway, other.id, LogStatus.PENDING)

        dashboard = await DashboardService(gateway).supervisor_dashboard(supervisor)

        assert [s.id for s in dashboard["students"]] == [student.id]
        assert len(dashboard["logs"]) == 2
        assert dashboard["log_counts"]["pending"] == 1
        assert dashboard["log_counts"]["rejected"] == 1
        assert dashboard["awaiting_final_review"] == []


class TestAdminStats:

    @pytest.mark.asyncio
    async def test_stats(self, gateway, make_user, supervisor, student, admin_user):
        await make_user(UserRole.STUDENT, it_status=ItStatus.COMPLETED, last_login=datetime.utcnow())
        await make_user(UserRole.STUDENT, last_login=datetime.utcnow() - timedelta(days=30))
        await _log(gateway, student.id, LogStatus.APPROVED)
        await _log(gateway, student.id, LogStatus.PENDING, week=2)

        stats = await DashboardService(gateway).admin_stats()

        assert stats["total_users"] == 5
        assert stats["users_by_role"] == {"student": 3, "supervisor": 1, "admin": 1}
        assert stats["students_by_it_status"] == {"ongoing": 2, "awaiting_approval": 0, "completed": 1}
        assert stats["log_counts"]["total"] == 2
        assert len(stats["at_risk_students"]) == 2
        assert stats["avg_logs_per_supervisor"] == 2.0
