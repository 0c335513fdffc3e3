"""Pair ledger rows with the payment rows that settled them.

A ledger row (e.g. a sponsorship recorded by the platform) is matched to the
payment row (the processor's settlement) that is closest in time *after* it,
within ``max_distance_seconds``. Each payment row can be claimed once; claimed
rows are removed from the lookup table so later ledger rows cannot see them.
Because of that, ledger rows must be processed in chronological order, which
is the order :func:`sponsor_recon.merge.merge` produces for them.

Output rows are the ledger fields, then ``Received Date`` and ``Distance [s]``,
then the payment fields, with blanks for everything after the ledger fields
when no payment matched.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import BinaryIO

from .config import ReconcileOptions
from .csv_io import InputSource, read_tables, validate_delimiter, write_table
from .dates import format_match_time, ledger_timestamp, payment_timestamp
from .errors import ColumnMissingInRowError
from .logging_setup import get_logger
from .merge import merge
from .models import Row, Table
from .notes import Annotator, load_engine
from .numbers import check_separators, normalize_row

_log = get_logger(__name__)

RECEIVED_DATE_HEADER = b"Received Date"
DISTANCE_HEADER = b"Distance [s]"
NOTE_HEADER = b"Note"

_ONE_SECOND = timedelta(seconds=1)


@dataclass(frozen=True, slots=True)
class LookupEntry:
    """A payment row with the UTC timestamp derived from its date and time."""

    timestamp: datetime
    row: Row


@dataclass(frozen=True, slots=True)
class Match:
    index: int
    entry: LookupEntry
    distance: int


class LookupTable:
    """Timestamp-sorted payment rows supporting nearest search and removal.

    Entries are sorted once on construction; equal timestamps keep their input
    order. Removal deletes the entry outright, so the remaining entries stay
    sorted and a removed entry is never returned again.
    """

    def __init__(self, entries: Iterable[LookupEntry]) -> None:
        self._entries: list[LookupEntry] = sorted(entries, key=lambda e: e.timestamp)
        self._keys: list[datetime] = [e.timestamp for e in self._entries]

    @classmethod
    def from_table(cls, table: Table, *, date_index: int, time_index: int) -> LookupTable:
        """Build the lookup table from a payment table.

        Raises :class:`ColumnMissingInRowError`, :class:`InvalidDateEncodingError`
        or :class:`DateParseError` for the first row that cannot be indexed.
        """

        entries: list[LookupEntry] = []
        for row in table.rows:
            source = row.source or table.source
            date = row.get(date_index)
            if date is None:
                raise ColumnMissingInRowError(row.line, date_index, "date", source)
            time = row.get(time_index)
            if time is None:
                raise ColumnMissingInRowError(row.line, time_index, "time", source)
            ts = payment_timestamp(date, time, line=row.line, source=source)
            entries.append(LookupEntry(ts, row))
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LookupEntry]:
        return iter(self._entries)

    def search(self, timestamp: datetime) -> tuple[bool, int]:
        """Binary search for ``timestamp``.

        Returns ``(True, index)`` of the first entry with exactly that
        timestamp, or ``(False, index)`` where it would be inserted.
        """

        index = bisect.bisect_left(self._keys, timestamp)
        found = index < len(self._keys) and self._keys[index] == timestamp
        return found, index

    def find(self, timestamp: datetime, max_distance_seconds: int) -> Match | None:
        """Return the best payment entry for a ledger ``timestamp`` or ``None``.

        An exact timestamp match wins with distance 0. Otherwise the entries at
        the insertion index and its two neighbours are considered; only those
        strictly after ``timestamp`` qualify, and the one with the fewest whole
        seconds of distance wins, the first in scan order on ties. It is
        accepted only within ``max_distance_seconds``.
        """

        found, index = self.search(timestamp)
        if found:
            return Match(index, self._entries[index], 0)

        best: Match | None = None
        for candidate in (index, index - 1, index + 1):
            if not 0 <= candidate < len(self._entries):
                continue
            entry = self._entries[candidate]
            delta = entry.timestamp - timestamp
            # A settlement never precedes the event it settles.
            if delta <= timedelta(0):
                continue
            distance = delta // _ONE_SECOND
            if best is None or distance < best.distance:
                best = Match(candidate, entry, distance)

        if best is None or best.distance > max_distance_seconds:
            return None
        return best

    def remove(self, index: int) -> LookupEntry:
        del self._keys[index]
        return self._entries.pop(index)

    def claim(self, timestamp: datetime, max_distance_seconds: int) -> Match | None:
        """Like :meth:`find`, but remove the matched entry from the table."""

        match = self.find(timestamp, max_distance_seconds)
        if match is not None:
            self.remove(match.index)
        return match


def joined_header(
    ledger_header: tuple[bytes, ...], payment_header: tuple[bytes, ...]
) -> tuple[bytes, ...]:
    return ledger_header + (RECEIVED_DATE_HEADER, DISTANCE_HEADER) + payment_header


def reconcile(
    ledger: Table,
    payments: Table,
    *,
    ledger_date_index: int,
    payment_date_index: int,
    payment_time_index: int,
    max_distance_seconds: int,
) -> Table:
    """Join every ledger row with its matching payment row.

    ``ledger`` must already be deduplicated and in chronological order. The
    lookup table is built from ``payments`` before the first ledger row is
    looked at. Any error aborts the whole reconciliation.

    Returns a table with one row per ledger row, in ledger order.
    """

    lookup = LookupTable.from_table(
        payments, date_index=payment_date_index, time_index=payment_time_index
    )
    _log.debug("lookup table holds %d payment rows", len(lookup))

    blanks = (b"",) * (2 + payments.width)
    rows: list[Row] = []
    matched = 0
    for row in ledger.rows:
        source = row.source or ledger.source
        raw = row.get(ledger_date_index)
        if raw is None:
            raise ColumnMissingInRowError(row.line, ledger_date_index, "date", source)
        ts = ledger_timestamp(raw, line=row.line, source=source)

        match = lookup.claim(ts, max_distance_seconds)
        if match is None:
            _log.debug(
                "line %d of %s (%s): no payment within %ds",
                row.line,
                source,
                ts,
                max_distance_seconds,
            )
            rows.append(row.extended(*blanks))
            continue

        matched += 1
        _log.debug(
            "line %d of %s (%s): matched payment at %s, %ds later",
            row.line,
            source,
            ts,
            match.entry.timestamp,
            match.distance,
        )
        rows.append(
            row.extended(
                format_match_time(match.entry.timestamp),
                str(match.distance).encode("ascii"),
                *match.entry.row.fields,
            )
        )

    _log.info(
        "reconciled %d ledger rows: %d matched, %d unmatched, %d payment rows left over",
        len(rows),
        matched,
        len(rows) - matched,
        len(lookup),
    )
    return Table(
        header=joined_header(ledger.header, payments.header),
        rows=rows,
        source=ledger.source,
    )


def merge_accounts(
    ledger_sources: Iterable[InputSource],
    payment_sources: Iterable[InputSource],
    sink: BinaryIO,
    options: ReconcileOptions | None = None,
    *,
    annotator: Annotator | None = None,
) -> Table:
    """Merge, reconcile, normalize and annotate, then write the result to ``sink``.

    Ledger files are merged by the ledger key columns and sorted by the ledger
    date; payment files are merged by their date and time columns. The joined
    rows get their currency fields normalized and, when ``annotator`` is given
    or ``options.notes`` names a rule file, a trailing ``Note`` column.

    Nothing is written unless every step succeeds. Returns the written table.
    """

    opts = options or ReconcileOptions()
    validate_delimiter(opts.ledger_delimiter)
    validate_delimiter(opts.payment_delimiter)
    if opts.normalize_numbers:
        check_separators(opts.thousands_separator, opts.decimal_separator)
    if annotator is None and opts.notes is not None:
        annotator = load_engine(opts.notes)

    ledger = merge(
        read_tables(ledger_sources, delimiter=opts.ledger_delimiter),
        opts.ledger_keys,
        opts.ledger_date_column,
    )
    payments = merge(
        read_tables(payment_sources, delimiter=opts.payment_delimiter),
        (opts.payment_date_column, opts.payment_time_column),
        opts.payment_date_column,
    )
    date_index, time_index = payments.key_column_indices

    joined = reconcile(
        ledger.table,
        payments.table,
        ledger_date_index=ledger.sort_column_index,
        payment_date_index=date_index,
        payment_time_index=time_index,
        max_distance_seconds=opts.max_distance_seconds,
    )

    header = joined.header
    rows = joined.rows
    if opts.normalize_numbers and opts.number_markers:
        rows = [
            normalize_row(r, opts.number_markers, opts.thousands_separator, opts.decimal_separator)
            for r in rows
        ]
    if annotator is not None:
        header = header + (NOTE_HEADER,)
        rows = [r.extended((annotator.annotate(r) or "").encode("utf-8")) for r in rows]

    result = Table(header=header, rows=rows, source=joined.source)
    write_table(result, sink)
    return result


__all__ = [
    "DISTANCE_HEADER",
    "LookupEntry",
    "LookupTable",
    "Match",
    "NOTE_HEADER",
    "RECEIVED_DATE_HEADER",
    "joined_header",
    "merge_accounts",
    "reconcile",
]
