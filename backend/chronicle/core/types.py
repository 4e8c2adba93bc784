"""Column types shared by the logbook tables"""
import uuid

from sqlalchemy import TypeDecorator, String


def new_record_id() -> str:
    """Fresh record id in canonical 36-char form"""
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """
    Record ids as VARCHAR(36) on every backend.

    Ids arrive from the identity provider (user ids) or from new_record_id().
    uuid.UUID values and upper-case strings are stored in canonical lower-case
    form so lookups by either spelling hit the same row. Anything that is not
    a UUID is stored as given; it simply matches nothing.
    """
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return str(value)
        try:
            return str(uuid.UUID(str(value)))
        except ValueError:
            return str(value)

    def process_result_value(self, value, dialect):
        return value if value is None else str(value)
