"""Record model shared by the merger and the reconciler.

Rows keep their fields as raw ``bytes`` exactly as they appeared in the input,
so that nothing is re-encoded on the way from an export to the merged output.
Text is only decoded where a value has to be interpreted (dates, header names
in messages).
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .errors import MissingColumnError

# A column selector is either a positional index or a header name. Strings
# made only of ASCII digits are always treated as indices, never as names.
type ColumnSelector = int | str


@dataclass(frozen=True, slots=True)
class Row:
    """An ordered, immutable sequence of byte fields.

    ``line`` is the 1-based line of ``source`` on which the record ended, or
    ``0`` for rows that were synthesized rather than read.
    """

    fields: tuple[bytes, ...]
    line: int = 0
    source: str = ""

    def get(self, index: int) -> bytes | None:
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None

    def extended(self, *fields: bytes) -> Row:
        """Return a copy with ``fields`` appended after the existing ones."""

        return Row(self.fields + tuple(fields), self.line, self.source)

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.fields)


@dataclass(slots=True)
class Table:
    """A header plus the rows read below it.

    Attributes
    ----------
    header:
        Column names as raw bytes, in file order.
    rows:
        Data rows in the order they were produced.
    source:
        Human-readable origin (usually a file path) used in error messages.
    """

    header: tuple[bytes, ...]
    rows: list[Row] = field(default_factory=list)
    source: str = "<input>"

    @property
    def width(self) -> int:
        return len(self.header)

    def resolve(self, selector: ColumnSelector, kind: str) -> int:
        """Resolve ``selector`` to a column index against this table's header.

        Integers and all-digit strings are positional and must exist in the
        header; anything else must equal a header name exactly. Raises
        :class:`MissingColumnError` naming ``kind`` when nothing resolves.
        """

        index = column_index(selector, self.header)
        if index is None:
            raise MissingColumnError(str(selector), kind)
        return index


def column_index(selector: ColumnSelector, header: Sequence[bytes]) -> int | None:
    """Return the position ``selector`` denotes in ``header`` or ``None``."""

    if isinstance(selector, int):
        return selector if 0 <= selector < len(header) else None
    if selector.isascii() and selector.isdigit():
        index = int(selector)
        return index if index < len(header) else None
    wanted = selector.encode("utf-8")
    for pos, name in enumerate(header):
        if name == wanted:
            return pos
    return None


__all__ = ["ColumnSelector", "Row", "Table", "column_index"]
