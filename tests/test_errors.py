"""Tests for the reportable error types."""

from __future__ import annotations

from classlens.errors import (
    ClasslensError,
    ErrorCode,
    InvalidClassFileError,
    MalformedSessionError,
    StorageFailureError,
)


def test_defaults_and_string_form() -> None:
    error = MalformedSessionError()

    assert isinstance(error, ClasslensError)
    assert error.error_code == ErrorCode.MALFORMED_SESSION
    assert str(error) == "[malformed_session] The workspace document is malformed"


def test_to_dict_includes_path_and_details() -> None:
    error = StorageFailureError(message="disk full", details={"reason": "ENOSPC"}, path="/w.clw")

    assert error.to_dict() == {
        "error": ErrorCode.STORAGE_FAILURE,
        "message": "disk full",
        "details": {"reason": "ENOSPC"},
        "path": "/w.clw",
    }


def test_invalid_class_file_omits_empty_details() -> None:
    assert InvalidClassFileError().to_dict() == {
        "error": ErrorCode.INVALID_CLASS_FILE,
        "message": "Not a valid class file",
    }
