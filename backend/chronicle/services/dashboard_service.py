"""
Dashboard Service - read-only aggregates for the three dashboards
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List

from chronicle.db.gateway import PersistenceGateway
from chronicle.models.log_entry import LogEntry, LogStatus
from chronicle.models.user import User, UserRole, ItStatus
from chronicle.services.admin_service import AdminService
from chronicle.services.transitions import is_logbook_locked


AT_RISK_AFTER = timedelta(days=14)


def count_by_status(logs: List[LogEntry]) -> Dict[str, int]:
    counts = Counter(LogStatus(l.status).value for l in logs)
    result = {status.value: counts.get(status.value, 0) for status in LogStatus}
    result["total"] = len(logs)
    return result


class DashboardService:
    """Aggregates for student, supervisor and admin dashboards"""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def student_summary(self, student: User) -> Dict[str, Any]:
        logs = await self.gateway.query("logs", "student_id", student.id)
        counts = count_by_status(logs)
        skills = await self.gateway.query("skills", "student_id", student.id)
        return {
            "student_id": student.id,
            "it_status": (student.it_status or ItStatus.ONGOING).value,
            "locked": is_logbook_locked(student.it_status),
            "log_counts": counts,
            "can_request_final_review": counts["total"] > 0 and counts["total"] == counts[LogStatus.APPROVED.value],
            "skill_count": len(skills),
        }

    async def supervisor_dashboard(self, supervisor: User) -> Dict[str, Any]:
        """Linked students, their logs (newest first) and per-status counts"""
        linked = await self.gateway.query("users", "supervisor_id", supervisor.id)
        students = sorted(
            [s for s in linked if s.role == UserRole.STUDENT],
            key=lambda s: (s.surname.lower(), s.first_name.lower())
        )

        logs: List[LogEntry] = []
        for student in students:
            logs.extend(await self.gateway.query("logs", "student_id", student.id))
        logs.sort(key=lambda l: (l.date, l.created_at), reverse=True)

        return {
            "students": students,
            "logs": logs,
            "log_counts": count_by_status(logs),
            "awaiting_final_review": [
                s.id for s in students if s.it_status == ItStatus.AWAITING_APPROVAL
            ],
        }

    async def admin_stats(self) -> Dict[str, Any]:
        users = await self.gateway.all("users")
        logs = await self.gateway.all("logs")

        roles = Counter(UserRole(u.role).value for u in users)
        students = [u for u in users if u.role == UserRole.STUDENT]
        it_counts = Counter((s.it_status or ItStatus.ONGOING).value for s in students)

        cutoff = datetime.utcnow() - AT_RISK_AFTER
        at_risk = [s.id for s in students if s.last_login is None or s.last_login < cutoff]

        # Logs reviewed per supervisor that has at least one linked student with logs
        by_student = {s.id: s.supervisor_id for s in students}
        active_supervisors = {by_student.get(l.student_id) for l in logs} - {None}
        avg_reviews = round(len(logs) / len(active_supervisors), 1) if active_supervisors else 0.0

        return {
            "total_users": len(users),
            "users_by_role": {role.value: roles.get(role.value, 0) for role in UserRole},
            "log_counts": count_by_status(logs),
            "students_by_it_status": {status.value: it_counts.get(status.value, 0) for status in ItStatus},
            "at_risk_students": at_risk,
            "avg_logs_per_supervisor": avg_reviews,
            "recent_events": await AdminService(self.gateway).get_system_events(limit=10),
        }
