from __future__ import annotations

import pytest

from sponsor_recon.errors import MissingColumnError
from sponsor_recon.models import Row, Table, column_index

HEADER = (b"Date", b"Time", b"0", b"Amount")


def test_column_index_by_name_and_position():
    assert column_index("Time", HEADER) == 1
    assert column_index("3", HEADER) == 3
    assert column_index(3, HEADER) == 3


def test_digit_selector_is_always_positional():
    # A header literally named "0" is not reachable by name.
    assert column_index("0", HEADER) == 0


def test_column_index_misses():
    assert column_index("4", HEADER) is None
    assert column_index(-1, HEADER) is None
    assert column_index("date", HEADER) is None


def test_table_resolve_names_kind_on_failure():
    t = Table(header=HEADER)
    with pytest.raises(MissingColumnError) as exc:
        t.resolve("Fee", "sort")
    assert exc.value.kind == "sort"
    assert exc.value.name == "Fee"
    assert "sort column" in str(exc.value)


def test_row_extended_appends_and_keeps_origin():
    row = Row((b"a", b"b"), line=7, source="x.csv")
    grown = row.extended(b"c", b"")
    assert grown.fields == (b"a", b"b", b"c", b"")
    assert (grown.line, grown.source) == (7, "x.csv")
    assert row.fields == (b"a", b"b")
    assert grown.get(3) == b""
    assert grown.get(4) is None
