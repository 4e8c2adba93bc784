"""
Background task runner

Fire-and-forget work that must not delay or fail the request that started it
(skill derivation after an approval). Task references are held until the
task finishes; failures go to their own error channel and a bounded history
instead of propagating.
"""
import asyncio
from collections import deque
from datetime import datetime
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Deque, Dict, List, Optional, Set

from chronicle.core.config import settings
from chronicle.core.logging_config import logger, set_task_name


class BackgroundTaskRunner:
    """Schedules coroutines on the running loop and tracks their outcome"""

    def __init__(self, failure_history: Optional[int] = None):
        self._tasks: Set[asyncio.Task] = set()
        self.failures: Deque[Dict[str, Any]] = deque(
            maxlen=failure_history or settings.TASK_FAILURE_HISTORY
        )
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_holders: Dict[str, int] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, name: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Start factory() as a task named name and return immediately"""
        task = asyncio.create_task(self._run(name, factory), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, name: str, factory: Callable[[], Awaitable[Any]]) -> None:
        set_task_name(name)
        try:
            await factory()
        except asyncio.CancelledError:
            logger.warning(f"[Task] {name} cancelled")
            raise
        except Exception as e:
            self.failures.append({
                "task": name,
                "error_type": type(e).__name__,
                "error": str(e),
                "failed_at": datetime.utcnow().isoformat(),
            })
            logger.log_task_failure(name, e)

    async def drain(self) -> None:
        """Wait for every outstanding task, including ones scheduled meanwhile"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @asynccontextmanager
    async def exclusive(self, key: str) -> AsyncIterator[None]:
        """
        Run one task at a time per key.

        Locks exist only while someone holds or waits for them.
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_holders[key] = self._lock_holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[key] -= 1
            if not self._lock_holders[key]:
                del self._lock_holders[key]
                del self._locks[key]

    def recent_failures(self) -> List[Dict[str, Any]]:
        return list(self.failures)


# Process-wide runner used by the API
runner = BackgroundTaskRunner()
