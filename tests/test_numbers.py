from __future__ import annotations

import pytest

from sponsor_recon.errors import InvalidDelimiterError
from sponsor_recon.models import Row
from sponsor_recon.numbers import normalize_number, normalize_row


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("$10.00", "$10,00"),
        ("$1,000.00", "$1.000,00"),
        ("$1,000", "$1.000"),
        ("€8,75", "€8,75"),
        ("€1,000,00", "€1.000,00"),
        ("€1,000,000,00", "€1.000.000,00"),
        ("$1,000,000.00", "$1.000.000,00"),
        ("$1", "$1"),
        ("", ""),
    ],
)
def test_normalize_number(raw: str, expected: str):
    assert normalize_number(raw.encode(), ".", ",") == expected.encode()


def test_normalize_number_the_other_way_round():
    assert normalize_number(b"$1.000.000,00", ",", ".") == b"$1,000,000.00"


def test_separators_must_be_single_bytes():
    with pytest.raises(InvalidDelimiterError):
        normalize_number(b"$1.00", "€", ",")


def test_normalize_row_only_touches_marked_fields():
    row = Row((b"2021-03-01", b"$1,000.00", b"\xe2\x82\xac2,000.50", b"1,000.00"), line=2)
    out = normalize_row(row, "€$", ".", ",")
    assert out.fields == (
        b"2021-03-01",
        b"$1.000,00",
        "€2.000,50".encode(),
        b"1,000.00",
    )
    assert out.line == 2


def test_normalize_row_without_markers_is_a_no_op():
    row = Row((b"$1,000.00",))
    assert normalize_row(row, "", ".", ",") is row
