"""
Skill Aggregation

Turns an approved log into skill evidence. For every skill name the
classifier returns, the student's skill of the same category and the same
name (case-insensitive) gains the log id; unknown names become new skills
with this log as their only evidence. All changes land in one update_paths
write, so a log never contributes twice to the same skill.
"""
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chronicle.core.exceptions import ClassifierError
from chronicle.core.logging_config import logger
from chronicle.db.gateway import PersistenceGateway, gateway_scope, make_key
from chronicle.models.log_entry import LogEntry
from chronicle.models.skill import Skill, SkillCategory
from chronicle.services.task_runner import BackgroundTaskRunner


class SkillClassifier(Protocol):
    async def classify_skills(self, log_content: str) -> Optional[Dict[str, List[str]]]:
        ...


class SkillService:
    """Derives and lists skills for students"""

    def __init__(self, gateway: PersistenceGateway, classifier: Optional[SkillClassifier] = None):
        self.gateway = gateway
        self.classifier = classifier

    async def list_for_student(self, student_id: str) -> List[Skill]:
        skills = await self.gateway.query("skills", "student_id", student_id)
        return sorted(skills, key=lambda s: (s.category.value, s.name.lower()))

    async def derive_from_log(self, log: LogEntry) -> int:
        """
        Attribute the skills found in an approved log.

        Returns:
            Number of paths written (0 when nothing changed)

        Raises:
            ClassifierError: classifier unavailable or failed
            PersistenceError: the batched write failed
        """
        if self.classifier is None:
            raise ClassifierError("No skill classifier configured")

        result = await self.classifier.classify_skills(log.content)
        if not result:
            logger.info(f"[Skills] No skills returned for log {log.id}")
            return 0

        existing = await self.gateway.query("skills", "student_id", log.student_id)
        index: Dict[tuple, Any] = {
            (s.category.value, s.name.strip().lower()): s for s in existing
        }

        updates: Dict[str, Any] = {}
        created: Dict[tuple, str] = {}

        for category in SkillCategory:
            for raw_name in result.get(category.value) or []:
                name = raw_name.strip() if isinstance(raw_name, str) else ""
                if not name:
                    continue
                lookup = (category.value, name.lower())

                if lookup in created:
                    continue

                skill = index.get(lookup)
                if skill is not None:
                    log_ids = list(skill.log_ids or [])
                    if log.id in log_ids:
                        continue
                    log_ids.append(log.id)
                    updates[make_key("skills", skill.id, "log_ids")] = log_ids
                    # Same name repeated in one reply must not append twice
                    created[lookup] = skill.id
                    continue

                skill_id = self.gateway.new_id()
                updates[make_key("skills", skill_id)] = {
                    "student_id": log.student_id,
                    "name": name,
                    "category": category,
                    "log_ids": [log.id],
                }
                created[lookup] = skill_id

        if not updates:
            logger.info(f"[Skills] Log {log.id} added no new evidence")
            return 0

        await self.gateway.update_paths(updates)
        logger.info(f"[Skills] Log {log.id}: {len(updates)} skill write(s) for student {log.student_id}")
        return len(updates)


class SkillDerivationScheduler:
    """
    Runs skill derivation off the request path.

    Each derivation opens its own session, so it never shares the request's
    session and the request never waits for the classifier. Derivations for
    the same student run one after another.
    """

    def __init__(
        self,
        runner: BackgroundTaskRunner,
        classifier: Optional[SkillClassifier],
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    ):
        self.runner = runner
        self.classifier = classifier
        self.session_factory = session_factory

    def schedule(self, log_id: str) -> None:
        self.runner.dispatch(f"derive_skills:{log_id}", lambda: self._derive(log_id))

    async def _derive(self, log_id: str) -> None:
        async with gateway_scope(self.session_factory) as gateway:
            log = await gateway.get(make_key("logs", log_id))
            if log is None:
                logger.warning(f"[Skills] Log {log_id} vanished before derivation")
                return
            student_id = log.student_id

        # Derivations for one student read, classify and write as a unit;
        # interleaved runs would each create the same new skill
        async with self.runner.exclusive(f"skills:{student_id}"):
            async with gateway_scope(self.session_factory) as gateway:
                log = await gateway.get(make_key("logs", log_id))
                if log is None:
                    logger.warning(f"[Skills] Log {log_id} vanished before derivation")
                    return
                await SkillService(gateway, self.classifier).derive_from_log(log)
