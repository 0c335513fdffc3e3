"""Rewrite thousands and decimal separators of currency-looking fields.

Exports disagree on number formatting (``$1,000.00`` vs ``€1.000,00``). The
normalizer does not parse numbers; it rewrites whatever ``.`` or ``,`` sits at
the fixed offsets where separators would be, counting from the end:

- the third byte from the end is the decimal separator if it is one,
- then every fourth byte further left is a thousands separator if it is one.

Fields are only touched when they start with one of the configured marker
characters, so dates and free text pass through unchanged.
"""

from __future__ import annotations

from .errors import InvalidDelimiterError
from .models import Row

_SEPARATORS = frozenset(b".,")


def _separator_byte(ch: str) -> int:
    encoded = ch.encode("utf-8")
    if len(encoded) != 1:
        raise InvalidDelimiterError(ch)
    return encoded[0]


def check_separators(thousands_separator: str, decimal_separator: str) -> None:
    """Raise :class:`InvalidDelimiterError` unless both separators are one byte."""

    _separator_byte(thousands_separator)
    _separator_byte(decimal_separator)


def normalize_number(number: bytes, thousands_separator: str, decimal_separator: str) -> bytes:
    """Return ``number`` with its separators rewritten.

    >>> normalize_number(b"$1,000.00", ".", ",")
    b'$1.000,00'
    """

    thousands = _separator_byte(thousands_separator)
    decimal = _separator_byte(decimal_separator)
    out = bytearray(number)

    i = len(out) - 3
    if i >= 0 and out[i] in _SEPARATORS:
        out[i] = decimal
        i -= 4
    else:
        i -= 1
    while i >= 0:
        if out[i] in _SEPARATORS:
            out[i] = thousands
        i -= 4
    return bytes(out)


def normalize_row(
    row: Row,
    markers: str,
    thousands_separator: str,
    decimal_separator: str,
) -> Row:
    """Normalize every field of ``row`` that starts with one of ``markers``."""

    prefixes = tuple(m.encode("utf-8") for m in markers)
    if not prefixes:
        return row
    fields = tuple(
        normalize_number(f, thousands_separator, decimal_separator)
        if f.startswith(prefixes)
        else f
        for f in row.fields
    )
    return Row(fields, row.line, row.source)


__all__ = ["check_separators", "normalize_number", "normalize_row"]
