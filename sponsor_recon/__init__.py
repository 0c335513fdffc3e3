"""Public interface for the ``sponsor_recon`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .config import MergeOptions, ReconcileOptions
from .csv_io import read_table, read_tables, write_table
from .errors import (
    AnnotationConfigError,
    ColumnMissingInRowError,
    CsvFormatError,
    DateParseError,
    InvalidDateEncodingError,
    InvalidDelimiterError,
    MissingColumnError,
    NoInputError,
    ReconError,
    SchemaChangeError,
)
from .merge import MergeOutcome, merge, merge_csv
from .models import ColumnSelector, Row, Table
from .notes import Annotator, Engine, Rule, Statement, load_engine
from .numbers import normalize_number, normalize_row
from .reconcile import LookupEntry, LookupTable, Match, merge_accounts, reconcile

__all__ = [
    # API
    "merge",
    "merge_csv",
    "merge_accounts",
    "reconcile",
    "normalize_number",
    "normalize_row",
    "load_engine",
    "read_table",
    "read_tables",
    "write_table",
    # Models / types
    "ColumnSelector",
    "Row",
    "Table",
    "MergeOutcome",
    "MergeOptions",
    "ReconcileOptions",
    "LookupEntry",
    "LookupTable",
    "Match",
    "Annotator",
    "Engine",
    "Rule",
    "Statement",
    # Errors
    "ReconError",
    "NoInputError",
    "InvalidDelimiterError",
    "CsvFormatError",
    "MissingColumnError",
    "SchemaChangeError",
    "ColumnMissingInRowError",
    "InvalidDateEncodingError",
    "DateParseError",
    "AnnotationConfigError",
]
