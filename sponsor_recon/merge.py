"""Merge overlapping exports of the same table into one key-unique stream.

Exports downloaded at different times overlap: the same transaction appears in
several files, sometimes with updated values. :func:`merge` collapses them by
a composite key, keeping the version seen last, and orders the survivors by
the raw bytes of a sort column.

Ordering contract
-----------------
Survivors are first ordered by key bytes, then stably sorted by the sort
column's bytes. Rows with equal sort values therefore come out in key order,
independent of which file they came from. Chronological output requires a sort
column whose text sorts lexicographically (e.g. ``YYYY-MM-DD``).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import BinaryIO

from .config import MergeOptions
from .csv_io import (
    OUTPUT_DELIMITER,
    InputSource,
    read_tables,
    render_line,
    validate_delimiter,
    write_table,
)
from .errors import ColumnMissingInRowError, NoInputError, SchemaChangeError
from .logging_setup import get_logger
from .models import ColumnSelector, Row, Table

_log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    """Result of a merge.

    Attributes
    ----------
    table:
        Header of the first input followed by the surviving rows in order.
    key_column_indices:
        Resolved index of every key column, in the order they were given.
    sort_column_index:
        Resolved index of the sort column.
    delimiter:
        Delimiter the merged table is written with.
    """

    table: Table
    key_column_indices: tuple[int, ...]
    sort_column_index: int
    delimiter: str = OUTPUT_DELIMITER


def row_key(row: Row, key_indices: Sequence[int], *, source: str) -> bytes:
    """Concatenate the key fields of ``row``.

    Raises :class:`ColumnMissingInRowError` when the row is too short to hold
    one of the key columns.
    """

    parts: list[bytes] = []
    for index in key_indices:
        value = row.get(index)
        if value is None:
            raise ColumnMissingInRowError(row.line, index, "key", row.source or source)
        parts.append(value)
    return b"".join(parts)


def _sort_value(row: Row, index: int) -> tuple[bool, bytes]:
    # Rows too short to have the sort column order before all others.
    value = row.get(index)
    return (value is not None, value or b"")


def merge(
    tables: Sequence[Table],
    key_columns: Sequence[ColumnSelector],
    sort_column: ColumnSelector,
) -> MergeOutcome:
    """Deduplicate ``tables`` by ``key_columns`` and sort by ``sort_column``.

    Selectors are resolved once against the first table's header. Every later
    table must carry a byte-identical header. When a key repeats, within one
    table or across tables, the later row replaces the earlier one.

    Raises
    ------
    NoInputError
        ``tables`` is empty.
    MissingColumnError
        A key or sort selector does not resolve.
    SchemaChangeError
        A table's header differs from the first table's.
    ColumnMissingInRowError
        A row lacks a field at one of the key indices.
    """

    if not tables:
        raise NoInputError()

    first = tables[0]
    key_indices = tuple(first.resolve(k, "key") for k in key_columns)
    sort_index = first.resolve(sort_column, "sort")

    by_key: dict[bytes, Row] = {}
    total = 0
    for table in tables:
        if table.header != first.header:
            raise SchemaChangeError(
                previous=render_line(first.header),
                current=render_line(table.header),
                source=table.source,
            )
        replaced = 0
        for row in table.rows:
            key = row_key(row, key_indices, source=table.source)
            if key in by_key:
                replaced += 1
            by_key[key] = row
        total += len(table.rows)
        _log.debug(
            "ingested %d rows from %s (%d replaced earlier rows)",
            len(table.rows),
            table.source,
            replaced,
        )

    rows = [by_key[key] for key in sorted(by_key)]
    rows.sort(key=lambda r: _sort_value(r, sort_index))

    _log.info(
        "merged %d files: %d rows in, %d unique rows out",
        len(tables),
        total,
        len(rows),
    )
    return MergeOutcome(
        table=Table(
            header=first.header,
            rows=rows,
            source=", ".join(t.source for t in tables),
        ),
        key_column_indices=key_indices,
        sort_column_index=sort_index,
    )


def merge_csv(
    sources: Iterable[InputSource],
    key_columns: Sequence[ColumnSelector],
    sink: BinaryIO,
    options: MergeOptions,
) -> MergeOutcome:
    """Read ``sources``, merge them and write the result to ``sink``.

    Nothing is written unless the merge succeeds as a whole.
    """

    validate_delimiter(options.delimiter)
    tables = read_tables(sources, delimiter=options.delimiter)
    outcome = merge(tables, key_columns, options.sort_column)
    write_table(outcome.table, sink)
    return outcome


__all__ = ["MergeOutcome", "merge", "merge_csv", "row_key"]
