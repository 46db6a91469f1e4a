"""Exception types shared by the import engine, storage adapter and surfaces.

File-level failures derive from :class:`ImportFileError` and are raised before
any row is processed, so nothing is persisted when one surfaces. Row-level
problems are never raised; they are reported in the import result instead.
"""

from __future__ import annotations


class ImportFileError(ValueError):
    """The uploaded file cannot be imported at all."""


class NoFileError(ImportFileError):
    def __init__(self) -> None:
        super().__init__("No file uploaded")


class CsvParseError(ImportFileError):
    """The file could not be tokenized into header + rows."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to parse CSV: {reason}")
        self.reason = reason


class MissingColumnMappingError(ImportFileError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "amount and date column mappings are required (missing: " + ", ".join(missing) + ")"
        )
        self.missing = missing


class UploadTooLargeError(ImportFileError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"File exceeds the maximum upload size of {limit} bytes")
        self.limit = limit


class StorageError(RuntimeError):
    """A storage operation failed; carries the underlying driver message."""


__all__ = [
    "CsvParseError",
    "ImportFileError",
    "MissingColumnMappingError",
    "NoFileError",
    "StorageError",
    "UploadTooLargeError",
]
