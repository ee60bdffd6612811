"""Tests for error codes and their machine-readable rendering."""

import pytest

from realitylog.constants.error_codes import ERROR_CODES, is_retryable
from realitylog.exceptions import (
    AuthenticationError,
    ConnectivityError,
    EmptyNotesError,
    EntryNotFoundError,
    InvalidTimecodeError,
    LoggerError,
    MissingSelectionError,
    PermissionDeniedError,
    SessionNotFoundError,
    SubmissionInFlightError,
    UnknownError,
)


@pytest.mark.parametrize(
    "error, status_code",
    [
        (MissingSelectionError(["location"]), 400),
        (EmptyNotesError(), 400),
        (InvalidTimecodeError("99:00:00:00", 30), 400),
        (AuthenticationError(), 401),
        (PermissionDeniedError(), 403),
        (EntryNotFoundError("abc"), 404),
        (SessionNotFoundError("abc"), 404),
        (SubmissionInFlightError(), 409),
        (UnknownError("boom"), 500),
        (ConnectivityError(), 503),
    ],
)
def test_status_codes_and_registered_codes(error, status_code):
    assert isinstance(error, LoggerError)
    assert error.status_code == status_code
    assert error.code in ERROR_CODES


def test_connectivity_is_retryable_and_keeps_notes_hint():
    info = ConnectivityError("Data store unreachable").to_error_info()

    assert info.retryable is True
    assert info.suggested_actions[0].action == "retry_with_backoff"
    assert "notes were kept" in info.suggested_fix


def test_validation_errors_are_not_retryable():
    assert not is_retryable("MISSING_SELECTION")
    assert not is_retryable("EMPTY_NOTES")
    assert not is_retryable("SOMETHING_UNREGISTERED")


def test_entry_not_found_carries_location():
    info = EntryNotFoundError("1234").to_error_info()

    assert info.location.entry_id == "1234"
    assert info.message == "Log entry not found: 1234"


def test_unknown_error_keeps_underlying_message():
    assert UnknownError("disk I/O error").to_error_info().message == "disk I/O error"
