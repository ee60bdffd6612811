"""Custom exceptions for the reality log backend.

Every failure the core raises is one of these typed errors. The API layer
turns them into structured JSON responses; user-facing wording is the UI's
job, never the core's.
"""

from realitylog.constants.error_codes import get_error_spec
from realitylog.schemas.envelope import ErrorInfo, ErrorLocation, SuggestedAction


class LoggerError(Exception):
    """Base exception for all reality log application errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        location: ErrorLocation | None = None,
        suggested_fix: str | None = None,
    ):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.location = location
        self.suggested_fix = suggested_fix
        super().__init__(self.message)

    def to_error_info(self) -> ErrorInfo:
        """Convert exception to ErrorInfo for API response."""
        spec = get_error_spec(self.code)
        retryable = spec.get("retryable", False)

        suggested_actions: list[SuggestedAction] = []
        if "suggested_action" in spec:
            suggested_actions.append(
                SuggestedAction(
                    action=spec["suggested_action"],
                    parameters=spec.get("parameters", {}),
                )
            )

        return ErrorInfo(
            code=self.code,
            message=self.message,
            location=self.location,
            retryable=retryable,
            suggested_fix=self.suggested_fix or spec.get("suggested_fix"),
            suggested_actions=suggested_actions,
        )


# =============================================================================
# Authentication / Authorization Errors (401, 403)
# =============================================================================


class AuthenticationError(LoggerError):
    """Missing or invalid credentials."""

    code = "UNAUTHORIZED"
    status_code = 401
    message = "Authentication required"


class PermissionDeniedError(LoggerError):
    """The requester's role or ownership does not allow the operation."""

    code = "FORBIDDEN"
    status_code = 403
    message = "You do not have permission to perform this action"


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class ResourceNotFoundError(LoggerError):
    """Base class for resource not found errors."""

    code = "NOT_FOUND"
    status_code = 404
    message = "Resource not found"


class EntryNotFoundError(ResourceNotFoundError):
    """Log entry not found."""

    code = "ENTRY_NOT_FOUND"
    message = "Log entry not found"

    def __init__(self, entry_id: str | None = None):
        message = f"Log entry not found: {entry_id}" if entry_id else self.message
        location = ErrorLocation(entry_id=str(entry_id)) if entry_id else None
        super().__init__(message, location=location)


class ReferenceNotFoundError(ResourceNotFoundError):
    """Participant, location, action category or tag not found."""

    code = "REFERENCE_NOT_FOUND"
    message = "Reference record not found"

    def __init__(self, kind: str, record_id: str | None = None):
        message = f"{kind} not found: {record_id}" if record_id else f"{kind} not found"
        super().__init__(message)


class UserNotFoundError(ResourceNotFoundError):
    """User profile not found."""

    code = "USER_NOT_FOUND"
    message = "User not found"

    def __init__(self, user_id: str | None = None):
        message = f"User not found: {user_id}" if user_id else self.message
        super().__init__(message)


class SessionNotFoundError(ResourceNotFoundError):
    """Logging session not found (closed, expired or never opened)."""

    code = "SESSION_NOT_FOUND"
    message = "Logging session not found"

    def __init__(self, session_id: str | None = None):
        message = f"Logging session not found: {session_id}" if session_id else self.message
        super().__init__(message)


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(LoggerError):
    """Base class for validation errors. Never reaches the data store."""

    code = "VALIDATION_ERROR"
    status_code = 400
    message = "Validation failed"


class MissingSelectionError(ValidationError):
    """Location and/or action category not selected."""

    code = "MISSING_SELECTION"
    message = "Missing required selection"

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        message = f"Missing required selection: {', '.join(self.missing)}"
        location = ErrorLocation(field=self.missing[0]) if self.missing else None
        super().__init__(message, location=location)


class EmptyNotesError(ValidationError):
    """Notes are empty after trimming whitespace."""

    code = "EMPTY_NOTES"
    message = "Notes must not be empty"

    def __init__(self):
        super().__init__(location=ErrorLocation(field="notes"))


class InvalidTimecodeError(ValidationError):
    """Manual timecode does not match HH:MM:SS:FF within bounds."""

    code = "INVALID_TIMECODE"
    message = "Invalid timecode"

    def __init__(self, value: str, fps: int):
        self.value = value
        message = f"Invalid timecode {value!r}: expected HH:MM:SS:FF with frames 00-{fps - 1:02d}"
        super().__init__(message, location=ErrorLocation(field="timecode"))


class InvalidFieldValueError(ValidationError):
    """A field holds a value the operation cannot accept."""

    code = "INVALID_FIELD_VALUE"
    message = "Invalid field value"

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid value for {field}: {reason}", location=ErrorLocation(field=field))


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(LoggerError):
    """Base class for conflict errors."""

    code = "CONFLICT"
    status_code = 409
    message = "Conflict"


class SubmissionInFlightError(ConflictError):
    """A submission from the same session has not settled yet."""

    code = "SUBMISSION_IN_FLIGHT"
    message = "A submission is already in progress for this session"


# =============================================================================
# System Errors (500, 503)
# =============================================================================


class ConnectivityError(LoggerError):
    """Data store or identity provider unreachable. Safe to retry."""

    code = "CONNECTIVITY_ERROR"
    status_code = 503
    message = "Service temporarily unavailable"


class UnknownError(LoggerError):
    """Catch-all carrying the underlying message."""

    code = "UNKNOWN_ERROR"
    status_code = 500
    message = "Unknown error"
