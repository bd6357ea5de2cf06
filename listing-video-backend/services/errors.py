"""
Turns store and service errors into short messages fit for the wizard UI.
"""

import logging

from sqlalchemy.exc import IntegrityError, NoResultFound, ProgrammingError

# Postgres SQLSTATE codes we know how to explain
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"

FRIENDLY_MESSAGES = {
    UNIQUE_VIOLATION: "This record already exists",
    FOREIGN_KEY_VIOLATION: "Referenced record not found",
    INSUFFICIENT_PRIVILEGE: "You don't have permission to perform this action",
}


def _error_code(error):
    orig = getattr(error, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(error, "code", None)
    if code in FRIENDLY_MESSAGES:
        return code

    # SQLite has no SQLSTATE, fall back to the driver message
    text = str(orig or error).lower()
    if "unique constraint" in text:
        return UNIQUE_VIOLATION
    if "foreign key constraint" in text:
        return FOREIGN_KEY_VIOLATION
    if "permission denied" in text:
        return INSUFFICIENT_PRIVILEGE
    return None


def describe_error(error, fallback: str = "An unexpected error occurred", log_error: bool = True) -> str:
    """Returns the message to show for ``error``, logging it first."""
    if log_error:
        logging.error(f"Error caught by error handler: {error!r}")

    if isinstance(error, NoResultFound):
        return "No data found"

    if isinstance(error, (IntegrityError, ProgrammingError)):
        code = _error_code(error)
        return FRIENDLY_MESSAGES.get(code, fallback)

    if isinstance(error, str):
        return error or fallback

    message = str(error) if error is not None else ""
    return message or fallback
