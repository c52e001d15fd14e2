"""Public interface for the ``statement_ingest`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only re-exports.
"""

from .api import parse_bank_export, parse_content
from .dates import is_valid_date, parse_date
from .detect import detect_format, read_file_content, sniff_format
from .errors import (
    FileAccessError,
    IngestError,
    ParseError,
    StructuredError,
    UnsupportedFormatError,
    to_structured_error,
)
from .import_id import IMPORT_ID_PREFIX, OccurrenceCounter, generate_import_id
from .ingest import (
    KNOWN_PROFILES,
    BankProfile,
    detect_profile,
    infer_mapping,
    parse_csv_content,
    parse_ofx_content,
)
from .models import (
    ColumnMapping,
    CsvParseOptions,
    DateFormatHint,
    FileFormat,
    NormalizedTransaction,
    ParseResult,
    RowSkip,
)
from .money import describe_amount, format_amount, parse_amount
from .reconcile import ReconciliationReport, reconcile_import
from .suggest import CategorySuggestion, build_payee_index, suggest_categories, suggest_category

__all__ = [
    # API
    "parse_bank_export",
    "parse_content",
    "parse_csv_content",
    "parse_ofx_content",
    "detect_format",
    "sniff_format",
    "read_file_content",
    "reconcile_import",
    "suggest_categories",
    "suggest_category",
    "build_payee_index",
    # Normalization primitives
    "parse_amount",
    "format_amount",
    "describe_amount",
    "parse_date",
    "is_valid_date",
    "generate_import_id",
    "OccurrenceCounter",
    "IMPORT_ID_PREFIX",
    # CSV profiles
    "KNOWN_PROFILES",
    "BankProfile",
    "detect_profile",
    "infer_mapping",
    # Models / types
    "NormalizedTransaction",
    "ParseResult",
    "RowSkip",
    "ColumnMapping",
    "CsvParseOptions",
    "DateFormatHint",
    "FileFormat",
    "ReconciliationReport",
    "CategorySuggestion",
    # Errors
    "IngestError",
    "ParseError",
    "FileAccessError",
    "UnsupportedFormatError",
    "StructuredError",
    "to_structured_error",
]
