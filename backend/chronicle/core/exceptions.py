"""
Custom Exceptions for IT Chronicle
==================================

Services raise these instead of generic Exception so the API layer can map
each failure to a status code and a stable error code.

Usage:
    from chronicle.core.exceptions import ValidationError, LogbookLockedError

    if not feedback:
        raise ValidationError("A reason is required when rejecting a log", field="feedback")

"Not found" is normally reported by returning None/False from a service;
ResourceNotFoundError is used where the caller has already checked existence.
"""

from typing import Optional, Any, Dict


class ChronicleError(Exception):
    """Base exception for all IT Chronicle errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authorization Errors
# ============================================

class AuthorizationError(ChronicleError):
    """User not authorized for this action"""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class LogbookLockedError(AuthorizationError):
    """Student logbook is submitted for final review or completed"""

    def __init__(self, student_id: str, it_status: str):
        super().__init__(
            "You cannot add or edit logs while your logbook is submitted for final review or completed."
        )
        self.code = "LOGBOOK_LOCKED"
        self.details = {"student_id": student_id, "it_status": it_status}


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ChronicleError):
    """Base class for not found errors"""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class LogNotFoundError(ResourceNotFoundError):
    """Log entry not found"""

    def __init__(self, log_id: str):
        super().__init__("Log", log_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(ChronicleError):
    """Input validation failed"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class IllegalTransitionError(ChronicleError):
    """A state machine was asked for a transition it does not allow"""

    def __init__(self, machine: str, current: str, event: str):
        super().__init__(
            f"Cannot apply '{event}' to a {machine} in state '{current}'",
            code="ILLEGAL_TRANSITION",
            details={"machine": machine, "current": current, "event": event}
        )


# ============================================
# Collaborator Errors (502-type)
# ============================================

class CollaboratorError(ChronicleError):
    """An external collaborator (database, AI endpoint) failed"""

    def __init__(self, collaborator: str, message: str):
        super().__init__(
            f"{collaborator} failed: {message}",
            code="COLLABORATOR_FAILURE",
            details={"collaborator": collaborator}
        )


class PersistenceError(CollaboratorError):
    """Persistence gateway call failed"""

    def __init__(self, operation: str, key: str, message: str):
        super().__init__("Persistence gateway", message)
        self.code = "PERSISTENCE_FAILURE"
        self.details.update({"operation": operation, "key": key})


class ClassifierError(CollaboratorError):
    """AI text endpoint failed or returned an unusable result"""

    def __init__(self, message: str):
        super().__init__("Text classifier", message)
        self.code = "CLASSIFIER_FAILURE"
