"""A small rule engine that attaches a note to matching output rows.

Rules live in a JSON file::

    {
      "rules": [
        {
          "statements": [
            {"value_column_index": 0, "operation": "Equals", "value": "octocat"},
            {"value_column_index": 8, "operation": "EndsWith", "value": "one time"}
          ],
          "value": "the annotation"
        }
      ]
    }

A rule matches when all of its statements hold. The engine returns the value of
the first matching rule in file order.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import AnnotationConfigError
from .logging_setup import get_logger
from .models import Row

_log = get_logger(__name__)

Operation = Literal["Equals", "EndsWith"]


class Annotator(Protocol):
    """Anything that can derive an optional note from a finished row."""

    def annotate(self, row: Row) -> str | None: ...


class Statement(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    value_column_index: int = Field(ge=0)
    operation: Operation
    value: str

    def matches(self, row: Row) -> bool:
        # A row too short for the column never satisfies the statement.
        field = row.get(self.value_column_index)
        if field is None:
            return False
        expected = self.value.encode("utf-8")
        if self.operation == "Equals":
            return field == expected
        return field.endswith(expected)


class Rule(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    # All statements have to hold for the rule to match.
    statements: list[Statement]
    value: str

    def matches(self, row: Row) -> bool:
        return all(stm.matches(row) for stm in self.statements)


class Engine(BaseModel):
    """Top-level schema of a notes rule file."""

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    rules: list[Rule] = Field(default_factory=list)

    def matching_rule(self, row: Row) -> Rule | None:
        for rule in self.rules:
            if rule.matches(row):
                return rule
        return None

    def annotate(self, row: Row) -> str | None:
        rule = self.matching_rule(row)
        return rule.value if rule is not None else None


def load_engine(path: str | PathLike[str]) -> Engine:
    """Load and validate the rule file at ``path``.

    Raises :class:`AnnotationConfigError` when the file cannot be read or does
    not decode into the rule schema.
    """

    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as e:
        raise AnnotationConfigError(str(p), e.strerror or str(e)) from e
    try:
        engine = Engine.model_validate_json(data)
    except ValidationError as e:
        raise AnnotationConfigError(str(p), str(e)) from e
    _log.debug("loaded %d notes rules from %s", len(engine.rules), p)
    return engine


__all__ = ["Annotator", "Engine", "Operation", "Rule", "Statement", "load_engine"]
