"""Error types reported across the classlens model boundary.

Only malformed persisted data and I/O failures are raised. Expected
resolution outcomes (a class that cannot be found, a file whose directory
layout does not mirror its package) are returned as ``None`` by the
resolver instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ErrorCode:
    """Constants for the error codes carried by :class:`ClasslensError`."""

    MALFORMED_SESSION = "malformed_session"
    STORAGE_FAILURE = "storage_failure"
    INVALID_CLASS_FILE = "invalid_class_file"


@dataclass
class ClasslensError(Exception):
    """Base exception for reportable classlens failures.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary suitable for notices and logs."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


@dataclass
class MalformedSessionError(ClasslensError):
    """A workspace document is missing mandatory containers or is unreadable."""

    error_code: str = field(default=ErrorCode.MALFORMED_SESSION)
    message: str = field(default="The workspace document is malformed")
    details: dict[str, Any] = field(default_factory=dict)

    path: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.path is not None:
            result["path"] = self.path
        return result


@dataclass
class StorageFailureError(ClasslensError):
    """Reading or writing a workspace document failed at the I/O level."""

    error_code: str = field(default=ErrorCode.STORAGE_FAILURE)
    message: str = field(default="The workspace document could not be accessed")
    details: dict[str, Any] = field(default_factory=dict)

    path: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.path is not None:
            result["path"] = self.path
        return result


@dataclass
class InvalidClassFileError(ClasslensError):
    """The bytes handed to the class-file reader are not a class file."""

    error_code: str = field(default=ErrorCode.INVALID_CLASS_FILE)
    message: str = field(default="Not a valid class file")
    details: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "ErrorCode",
    "ClasslensError",
    "MalformedSessionError",
    "StorageFailureError",
    "InvalidClassFileError",
]
