from __future__ import annotations

import json
from pathlib import Path

import pytest

from sponsor_recon.errors import AnnotationConfigError
from sponsor_recon.models import Row
from sponsor_recon.notes import Engine, Rule, Statement, load_engine

SPONSOR_ROW = Row((b"Oneitho", b"2021-03-01", b"$5.00", b"Monthly", b"$5 a month one time"))


def _engine() -> Engine:
    return Engine(
        rules=[
            Rule(
                statements=[
                    Statement(value_column_index=0, operation="Equals", value="Oneitho"),
                    Statement(value_column_index=4, operation="EndsWith", value="one time"),
                ],
                value="the annotation",
            ),
            Rule(
                statements=[Statement(value_column_index=3, operation="Equals", value="Monthly")],
                value="recurring",
            ),
        ]
    )


def test_first_matching_rule_wins():
    assert _engine().annotate(SPONSOR_ROW) == "the annotation"


def test_all_statements_must_hold():
    row = Row((b"Someone", b"2021-03-01", b"$5.00", b"Monthly", b"x one time"))
    assert _engine().annotate(row) == "recurring"
    assert _engine().annotate(Row((b"Someone",))) is None


def test_statement_on_missing_column_does_not_hold():
    stm = Statement(value_column_index=10, operation="EndsWith", value="")
    assert not stm.matches(SPONSOR_ROW)


def test_rule_without_statements_always_matches():
    engine = Engine(rules=[Rule(statements=[], value="catch-all")])
    assert engine.annotate(Row(())) == "catch-all"


def test_load_engine_round_trips_json(tmp_path: Path):
    path = tmp_path / "notes.json"
    path.write_text(_engine().model_dump_json(indent=2), encoding="utf-8")
    assert load_engine(path) == _engine()


def test_load_engine_missing_file(tmp_path: Path):
    with pytest.raises(AnnotationConfigError) as exc:
        load_engine(tmp_path / "absent.json")
    assert isinstance(exc.value.__cause__, OSError)


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps({"rules": [{"statements": [], "value": 3}]}),
        json.dumps(
            {
                "rules": [
                    {
                        "statements": [
                            {"value_column_index": 0, "operation": "StartsWith", "value": "a"}
                        ],
                        "value": "x",
                    }
                ]
            }
        ),
        json.dumps(
            {
                "rules": [
                    {
                        "statements": [
                            {"value_column_index": -1, "operation": "Equals", "value": "a"}
                        ],
                        "value": "x",
                    }
                ]
            }
        ),
    ],
)
def test_load_engine_rejects_malformed_rules(tmp_path: Path, payload: str):
    path = tmp_path / "notes.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(AnnotationConfigError):
        load_engine(path)
