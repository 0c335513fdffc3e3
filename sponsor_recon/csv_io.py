"""Delimited-text reading and writing with byte-exact fields.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module (quoted fields
with embedded delimiters and newlines, doubled quotes). Input bytes are
decoded as UTF-8 with ``surrogateescape`` so that every field can be turned
back into precisely the bytes it was read from, including bytes that are not
valid UTF-8. Output is always comma-delimited.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from os import PathLike
from pathlib import Path
from typing import BinaryIO

from .errors import CsvFormatError, InvalidDelimiterError
from .logging_setup import get_logger
from .models import Row, Table

type InputSource = bytes | BinaryIO | str | PathLike[str]
"""Raw bytes, an open binary stream, or a filesystem path."""

OUTPUT_DELIMITER = ","

_log = get_logger(__name__)

# csv cannot use these as field delimiters even though they are one byte.
_RESERVED_DELIMITERS = frozenset({'"', "\r", "\n"})


def _decode(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def validate_delimiter(delimiter: str) -> str:
    """Return ``delimiter`` if it can serve as a single-byte field delimiter."""

    if (
        len(delimiter) != 1
        or len(delimiter.encode("utf-8")) != 1
        or delimiter in _RESERVED_DELIMITERS
    ):
        raise InvalidDelimiterError(delimiter)
    return delimiter


def read_table(data: bytes | BinaryIO, *, delimiter: str = ",", source: str = "<input>") -> Table:
    """Parse delimited ``data`` into a :class:`Table`.

    The first record is the header. Blank lines are skipped. Each row keeps
    the 1-based line number on which its record ended. Input with no records
    at all yields a table with an empty header.

    Raises :class:`CsvFormatError` for malformed input, including a record
    whose field count differs from the header's.
    """

    validate_delimiter(delimiter)
    raw = data if isinstance(data, bytes) else data.read()
    reader = csv.reader(io.StringIO(_decode(raw), newline=""), delimiter=delimiter)

    header: tuple[bytes, ...] | None = None
    rows: list[Row] = []
    try:
        for record in reader:
            if not record:
                continue
            fields = tuple(_encode(f) for f in record)
            if header is None:
                header = fields
                continue
            if len(fields) != len(header):
                raise CsvFormatError(
                    source,
                    reader.line_num,
                    f"found record with {len(fields)} fields, but the header has {len(header)}",
                )
            rows.append(Row(fields, reader.line_num, source))
    except csv.Error as e:
        raise CsvFormatError(source, reader.line_num, str(e)) from e

    _log.debug("read %d rows from %s", len(rows), source)
    return Table(header=header or (), rows=rows, source=source)


def read_tables(sources: Iterable[InputSource], *, delimiter: str = ",") -> list[Table]:
    """Read every source into a :class:`Table`, in argument order.

    Paths are read from disk (``OSError`` propagates to the caller); streams
    and raw bytes are named ``<input N>`` in error messages.
    """

    tables: list[Table] = []
    for n, src in enumerate(sources):
        if isinstance(src, bytes):
            tables.append(read_table(src, delimiter=delimiter, source=f"<input {n}>"))
        elif isinstance(src, (str, PathLike)):
            path = Path(src)
            tables.append(read_table(path.read_bytes(), delimiter=delimiter, source=str(path)))
        else:
            name = getattr(src, "name", None)
            label = name if isinstance(name, str) else f"<input {n}>"
            tables.append(read_table(src, delimiter=delimiter, source=label))
    return tables


def render_line(fields: Sequence[bytes]) -> str:
    """Render ``fields`` as one comma-delimited CSV line (without terminator)."""

    buf = io.StringIO()
    csv.writer(buf, delimiter=OUTPUT_DELIMITER, lineterminator="").writerow(
        [_decode(f) for f in fields]
    )
    return buf.getvalue()


def table_to_bytes(table: Table) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=OUTPUT_DELIMITER, lineterminator="\n")
    writer.writerow([_decode(f) for f in table.header])
    for row in table.rows:
        writer.writerow([_decode(f) for f in row.fields])
    return _encode(buf.getvalue())


def write_table(table: Table, sink: BinaryIO) -> None:
    """Write ``table`` comma-delimited to the binary ``sink``."""

    sink.write(table_to_bytes(table))


__all__ = [
    "InputSource",
    "OUTPUT_DELIMITER",
    "read_table",
    "read_tables",
    "render_line",
    "table_to_bytes",
    "validate_delimiter",
    "write_table",
]
