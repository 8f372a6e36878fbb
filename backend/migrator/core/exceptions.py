"""
Migrator exception hierarchy.

Every error raised deliberately by the profiling engine or its upload
adapters derives from ``MigratorError``. Each class carries the HTTP status
the error middleware answers with, so routes can simply let them propagate.
"""

from typing import Any, Dict, Optional


class MigratorError(Exception):
    """Base class for expected, reportable failures."""

    status_code: int = 400
    error_code: str = "migrator_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class EmptyDatasetError(MigratorError):
    """Raised when a dataset with no records is handed to the profiler."""

    status_code = 422
    error_code = "empty_dataset"

    def __init__(self, message: str = "No data to analyze", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UnsupportedFormatError(MigratorError):
    """Raised for uploads whose extension has no reader."""

    status_code = 400
    error_code = "unsupported_format"


class FileParseError(MigratorError):
    """Raised when the CSV/Excel reader cannot make sense of a file."""

    status_code = 400
    error_code = "file_parse_error"


class FileTooLargeError(MigratorError):
    status_code = 413
    error_code = "file_too_large"


class DatasetNotFoundError(MigratorError):
    status_code = 404
    error_code = "dataset_not_found"

    def __init__(self, dataset_id: str):
        super().__init__(f"Dataset not found: {dataset_id}", {"dataset_id": dataset_id})
