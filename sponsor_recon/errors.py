"""Error taxonomy shared by the merger, the reconciler and the rule engine.

Every error aborts the whole operation; nothing in the library recovers from
one. Each class keeps its context as attributes so callers can inspect the
offending source, line, column or raw value, and renders a message a person
can act on without reading a traceback.
"""

from __future__ import annotations


class ReconError(Exception):
    """Base class for all errors raised by ``sponsor_recon``."""


class NoInputError(ReconError):
    def __init__(self) -> None:
        super().__init__("No input was provided")


class InvalidDelimiterError(ReconError):
    def __init__(self, delimiter: str) -> None:
        self.delimiter = delimiter
        super().__init__(f"Cannot use {delimiter!r} as delimiter")


class CsvFormatError(ReconError):
    """The delimited input could not be parsed at all."""

    def __init__(self, source: str, line: int, reason: str) -> None:
        self.source = source
        self.line = line
        self.reason = reason
        super().__init__(f"Failed to parse CSV {source} near line {line}: {reason}")


class MissingColumnError(ReconError):
    """A configured column selector does not resolve against the header."""

    def __init__(self, name: str, kind: str) -> None:
        self.name = name
        self.kind = kind
        super().__init__(
            f"A {kind} column of index or name {name!r} could not be found "
            "in first line of CSV file"
        )


class SchemaChangeError(ReconError):
    """A later file's header differs from the first file's header."""

    def __init__(self, previous: str, current: str, source: str) -> None:
        self.previous = previous
        self.current = current
        self.source = source
        super().__init__(
            "The schema changed between files as seen in change in the head line "
            f"of {source}: {previous} != {current}"
        )


class ColumnMissingInRowError(ReconError):
    """A specific row lacks a field at a required index."""

    def __init__(self, line: int, index: int, kind: str, source: str) -> None:
        self.line = line
        self.index = index
        self.kind = kind
        self.source = source
        super().__init__(
            f"Row in line {line} of {source} did not have a {kind} column at index {index}"
        )


class InvalidDateEncodingError(ReconError):
    def __init__(self, date: str, line: int = 0, source: str = "") -> None:
        self.date = date
        self.line = line
        self.source = source
        where = f" (line {line} of {source})" if source else ""
        super().__init__(f"Date {date!r} contained invalid UTF-8{where}")


class DateParseError(ReconError):
    """Date text did not match the grammar expected for its stream.

    ``grammar`` is ``"ledger"`` for the flexible ledger date grammar and
    ``"payment"`` for the fixed payment date+time format.
    """

    def __init__(self, date_time: str, grammar: str, line: int = 0, source: str = "") -> None:
        self.date_time = date_time
        self.grammar = grammar
        self.line = line
        self.source = source
        where = f" in line {line} of {source}" if source else ""
        super().__init__(f"Failed to parse {grammar} time {date_time!r}{where}")


class AnnotationConfigError(ReconError):
    """The annotation rule file could not be opened or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not load notes rules from {path!r}: {reason}")


__all__ = [
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
