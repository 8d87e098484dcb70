"""
Backend error translation.

Supabase query errors arrive as postgrest APIError (code/message/details/hint).
Services wrap them into HTTPException with a human-readable detail so the
frontend can show it as-is.
"""

from fastapi import HTTPException, status
from postgrest.exceptions import APIError
import logging

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
NO_ROWS = "PGRST116"


def describe_error(error: Exception) -> str:
    """'<message> (<hint>)' for APIError, str(error) otherwise."""
    if isinstance(error, APIError):
        message = error.message or str(error)
        if error.hint:
            return f"{message} ({error.hint})"
        return message
    return str(error)


def backend_error(action: str, error: Exception) -> HTTPException:
    """Build the HTTPException for a failed backend call, e.g. backend_error("create repository", e)."""
    if isinstance(error, APIError):
        logger.error(
            "Error details: code=%s message=%s details=%s hint=%s",
            error.code, error.message, error.details, error.hint,
        )
        if error.code == UNIQUE_VIOLATION:
            return HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Failed to {action}: {describe_error(error)}",
            )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {describe_error(error)}",
    )
