"""Error codes dictionary for the logging API.

This is the single source of truth for all error codes, their retryability,
and suggested recovery actions. Used by exception handlers to generate
machine-readable error responses.
"""

from typing import Any, TypedDict


class ErrorCodeSpec(TypedDict, total=False):
    """Specification for an error code."""

    retryable: bool
    suggested_fix: str
    suggested_action: str
    parameters: dict[str, Any]


# Error codes dictionary - single source of truth
ERROR_CODES: dict[str, ErrorCodeSpec] = {
    # ==========================================================================
    # Resource errors (retryable after refresh)
    # ==========================================================================
    "NOT_FOUND": {
        "retryable": False,
    },
    "ENTRY_NOT_FOUND": {
        "retryable": False,
        "suggested_fix": "The entry was removed. Refresh the log feed.",
        "suggested_action": "refresh_snapshot",
    },
    "REFERENCE_NOT_FOUND": {
        "retryable": False,
        "suggested_action": "refresh_snapshot",
    },
    "USER_NOT_FOUND": {
        "retryable": False,
    },
    "SESSION_NOT_FOUND": {
        "retryable": False,
        "suggested_fix": "Open a new logging session.",
        "suggested_action": "create_session",
    },
    # ==========================================================================
    # Validation errors (not retryable, fix input)
    # ==========================================================================
    "VALIDATION_ERROR": {
        "retryable": False,
    },
    "MISSING_SELECTION": {
        "retryable": False,
        "suggested_fix": "Select a location and an action before submitting.",
    },
    "EMPTY_NOTES": {
        "retryable": False,
        "suggested_fix": "Write a note describing what happened.",
    },
    "INVALID_TIMECODE": {
        "retryable": False,
        "suggested_fix": "Use HH:MM:SS:FF with two digits per field.",
    },
    "INVALID_FIELD_VALUE": {
        "retryable": False,
    },
    # ==========================================================================
    # Conflict errors
    # ==========================================================================
    "CONFLICT": {
        "retryable": False,
    },
    "SUBMISSION_IN_FLIGHT": {
        "retryable": True,
        "suggested_action": "wait_and_retry",
        "parameters": {"delay_ms": 500},
    },
    # ==========================================================================
    # Authentication/Authorization errors
    # ==========================================================================
    "UNAUTHORIZED": {
        "retryable": False,
    },
    "FORBIDDEN": {
        "retryable": False,
    },
    # ==========================================================================
    # System errors (retryable with backoff)
    # ==========================================================================
    "CONNECTIVITY_ERROR": {
        "retryable": True,
        "suggested_fix": "The data store is unreachable. Your notes were kept; retry shortly.",
        "suggested_action": "retry_with_backoff",
        "parameters": {"delay_ms": 2000, "max_retries": 3},
    },
    "UNKNOWN_ERROR": {
        "retryable": False,
    },
    "INTERNAL_ERROR": {
        "retryable": True,
        "suggested_action": "retry_with_backoff",
        "parameters": {"delay_ms": 2000, "max_retries": 2},
    },
}


def get_error_spec(code: str) -> ErrorCodeSpec:
    """Get error specification by code.

    Args:
        code: The error code

    Returns:
        ErrorCodeSpec with retryable flag and suggested actions
    """
    return ERROR_CODES.get(code, {"retryable": False})


def is_retryable(code: str) -> bool:
    """Check if an error code is retryable."""
    spec = get_error_spec(code)
    return spec.get("retryable", False)
