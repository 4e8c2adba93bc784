# Authentication module

from chronicle.modules.auth.dependencies import (
    get_token_payload,
    get_token_subject,
    get_current_user,
    get_current_student,
    get_current_supervisor,
    get_current_admin,
)

__all__ = [
    "get_token_payload",
    "get_token_subject",
    "get_current_user",
    "get_current_student",
    "get_current_supervisor",
    "get_current_admin",
]
