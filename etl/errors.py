"""
Pipeline Errors

Every error aborts the current run; none of them is retried.
"""

from typing import Optional, Sequence


class SyncError(Exception):
    """Base class for store sync failures."""


class RemoteServiceError(SyncError):
    """The spreadsheet service answered with a non-success status or was unreachable."""

    def __init__(self, status_code: Optional[int], body: str = ""):
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        message = f"Google Sheets API error: {status}"
        if body:
            message = f"{message} - {body}"
        super().__init__(message)


class EmptyDataError(SyncError):
    """The fetch succeeded but returned no rows, not even a header."""


class WriteError(SyncError):
    """An artifact could not be persisted."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class SchemaError(SyncError):
    """The header row does not support the requested operation."""


class DuplicateHeaderError(SchemaError):
    def __init__(self, duplicates: Sequence[str]):
        self.duplicates = list(duplicates)
        super().__init__(f"Duplicate column headers: {', '.join(self.duplicates)}")


class MissingColumnError(SchemaError):
    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")
