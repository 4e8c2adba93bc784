"""
IT Chronicle - Logging

One named logger, ``chronicle``, shared by the API, the workflow services and
the background task runner.

Every record is tagged with the request id, the authenticated user and, for
skill derivations, the background task name. Production writes JSON lines
for aggregation. Other environments write short readable lines to stdout and
a detailed format to the optional rotating file.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from chronicle.core.config import settings


LOGGER_NAME = "chronicle"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
task_name_var: ContextVar[str] = ContextVar("task_name", default="")

# Attributes every LogRecord carries; anything else came in through extra=
_STANDARD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def set_task_name(name: str) -> None:
    task_name_var.set(name)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def current_context() -> Dict[str, str]:
    """Non-empty context values for the running request or task"""
    context = {
        "request_id": request_id_var.get(),
        "user_id": user_id_var.get(),
        "task": task_name_var.get(),
    }
    return {k: v for k, v in context.items() if v}


class JSONFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(current_context())

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry.update({
            key: value for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        })
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Readable lines with a ``[req user task]`` prefix"""

    def format(self, record: logging.LogRecord) -> str:
        context = current_context()
        record.context = " ".join(
            context.get(key, "-") for key in ("request_id", "user_id", "task")
        )
        return super().format(record)


class ChronicleLogger(logging.Logger):
    """Logger with helpers for the events this service cares about"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.log(
            level,
            f"{method} {path} -> {status_code} ({duration_ms:.1f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 1),
                **kwargs
            }
        )

    def log_workflow_event(self, machine: str, entity_id: str, event: str,
                           old_state: Optional[str] = None, new_state: Optional[str] = None,
                           **kwargs) -> None:
        """A log or logbook moved through its state machine"""
        message = f"{machine} {entity_id}: {event}"
        if old_state and new_state:
            message += f" ({old_state} -> {new_state})"
        self.info(
            message,
            extra={
                "event_type": "workflow",
                "machine": machine,
                "entity_id": entity_id,
                "workflow_event": event,
                "old_state": old_state,
                "new_state": new_state,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )

    def log_task_failure(self, task_name: str, error: Exception) -> None:
        """Failure of fire-and-forget work; reported here and nowhere else"""
        self.error(
            f"Background task {task_name} failed: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "task_failure",
                "task_name": task_name,
                "error_type": type(error).__name__,
            }
        )


def setup_logging(
    level: Optional[str] = None,
    environment: Optional[str] = None,
    log_file: Optional[str] = None
) -> ChronicleLogger:
    """(Re)configure the chronicle logger; defaults come from settings"""
    level = level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT
    log_file = settings.LOG_FILE if log_file is None else log_file

    logging.setLoggerClass(ChronicleLogger)
    logger = logging.getLogger(LOGGER_NAME)
    logger.__class__ = ChronicleLogger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    logger.handlers.clear()

    if environment == "production":
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s [%(context)s] %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(context)s] | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
        )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(console_formatter)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=5)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    for noisy in ("httpx", "httpcore", "anthropic", "uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


logger: ChronicleLogger = setup_logging()


__all__ = [
    "logger",
    "setup_logging",
    "current_context",
    "set_request_id",
    "set_user_id",
    "set_task_name",
    "generate_request_id",
    "ChronicleLogger",
]
