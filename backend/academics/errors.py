"""Service-level errors with user-facing messages."""
from __future__ import annotations


class ValidationFailure(Exception):
    """Input rejected before it reaches the backend."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AttendanceAlreadyRecorded(ValidationFailure):
    def __init__(self, message: str = "Anda sudah mengisi absensi hari ini."):
        super().__init__(message)


__all__ = ["ValidationFailure", "AttendanceAlreadyRecorded"]
