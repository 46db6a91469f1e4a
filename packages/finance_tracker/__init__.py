"""Public interface for the ``finance_tracker`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import import_csv_file, preview_csv_file
from .errors import (
    CsvParseError,
    ImportFileError,
    MissingColumnMappingError,
    NoFileError,
    StorageError,
    UploadTooLargeError,
)
from .ingest.importer import import_csv, preview_csv
from .ingest.normalizers import detect_delimiter, parse_amount, parse_date
from .models import (
    CategoryKind,
    CategoryRecord,
    ColumnMapping,
    CsvPreview,
    ImportResult,
    NewTransaction,
    RowError,
    TransactionRecord,
)
from .storage import SqlStorage, Storage

__all__ = [
    # API
    "import_csv",
    "import_csv_file",
    "preview_csv",
    "preview_csv_file",
    # Normalizers
    "detect_delimiter",
    "parse_amount",
    "parse_date",
    # Storage
    "SqlStorage",
    "Storage",
    # Models / types
    "CategoryKind",
    "CategoryRecord",
    "ColumnMapping",
    "CsvPreview",
    "ImportResult",
    "NewTransaction",
    "RowError",
    "TransactionRecord",
    # Errors
    "CsvParseError",
    "ImportFileError",
    "MissingColumnMappingError",
    "NoFileError",
    "StorageError",
    "UploadTooLargeError",
]
