"""Timestamp grammars of the two streams.

Ledger dates come in whatever shape the exporting platform chose, usually an
ISO-8601 date or date-time, sometimes with an offset. They are parsed with
:mod:`dateutil` and, when no offset is given, read as UTC. Year, month and day
must all be present; nothing is filled in from the current date.

Payment timestamps are split over a date column and a time column which are
concatenated without separator, e.g. ``"March 1, 2021"`` + ``"00:00:05 UTC"``,
and read with one fixed grammar: an English month name, a day of one or two
digits, a four-digit year and a zero-padded ``HH:MM:SS`` time. They are always
UTC.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, timezone

from dateutil import parser as date_parser

from .errors import DateParseError, InvalidDateEncodingError

MATCH_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"

# Git-style raw timestamps: "<seconds since epoch> <+hhmm>".
_RAW_TIMESTAMP = re.compile(r"^(\d+) ([+-])(\d{2})(\d{2})$")

# "<Month> <d>, <yyyy><HH>:<MM>:<SS> UTC"
_PAYMENT_TIMESTAMP = re.compile(
    r"^([A-Za-z]+) (\d{1,2}), (\d{4})(\d{2}):(\d{2}):(\d{2}) UTC$", re.ASCII
)

# Independent of the process locale, unlike strptime's %B.
_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Two defaults differing in year, month and day; a date that parses the same
# against both did not borrow any of them.
_DEFAULTS = (datetime(1970, 1, 1), datetime(1971, 2, 2))


def _decode_date(raw: bytes, *, line: int, source: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidDateEncodingError(
            raw.decode("utf-8", "replace"), line=line, source=source
        ) from None


def parse_ledger_date(text: str) -> datetime:
    """Parse a ledger date into an aware :class:`datetime`.

    Raises ``ValueError`` (or ``OverflowError``) when ``text`` is not a
    complete date, e.g. ``"March 2021"`` or ``"12:00"``.
    """

    s = text.strip()
    m = _RAW_TIMESTAMP.match(s)
    if m:
        seconds, sign, hours, minutes = m.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        tz = timezone(-offset if sign == "-" else offset)
        return datetime.fromtimestamp(int(seconds), tz=tz)

    dt, other = (date_parser.parse(s, default=d) for d in _DEFAULTS)
    if dt != other:
        raise ValueError(f"incomplete date {text!r}: year, month and day are required")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def parse_payment_datetime(text: str) -> datetime:
    """Parse concatenated payment date+time text as a UTC :class:`datetime`.

    Raises ``ValueError`` when ``text`` does not follow the payment grammar or
    names an impossible date or time.
    """

    m = _PAYMENT_TIMESTAMP.match(text)
    if m is None or m.group(1) not in _MONTHS:
        raise ValueError(f"{text!r} is not a payment timestamp like 'March 1, 202100:00:05 UTC'")
    month_name, day, year, hour, minute, second = m.groups()
    return datetime(
        int(year),
        _MONTHS.index(month_name) + 1,
        int(day),
        int(hour),
        int(minute),
        int(second),
        tzinfo=UTC,
    )


def ledger_timestamp(raw: bytes, *, line: int = 0, source: str = "") -> datetime:
    """Decode and parse the raw bytes of a ledger date field."""

    text = _decode_date(raw, line=line, source=source)
    try:
        return parse_ledger_date(text)
    except (ValueError, OverflowError) as e:
        raise DateParseError(text, "ledger", line=line, source=source) from e


def payment_timestamp(date: bytes, time: bytes, *, line: int = 0, source: str = "") -> datetime:
    """Decode and parse the raw bytes of a payment's date and time fields."""

    text = _decode_date(date + time, line=line, source=source)
    try:
        return parse_payment_datetime(text)
    except ValueError as e:
        raise DateParseError(text, "payment", line=line, source=source) from e


def format_match_time(dt: datetime) -> bytes:
    """Render a matched payment timestamp, e.g. ``2021-03-01 00:00:05 +0000``."""

    return dt.strftime(MATCH_TIME_FORMAT).encode("ascii")


__all__ = [
    "MATCH_TIME_FORMAT",
    "format_match_time",
    "ledger_timestamp",
    "parse_ledger_date",
    "parse_payment_datetime",
    "payment_timestamp",
]
