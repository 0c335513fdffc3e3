"""Option objects for the merge and reconciliation entry points.

Defaults mirror the layout of the GitHub Sponsors activity export (ledger) and
the Stripe balance export (payments) the tool was built around.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .models import ColumnSelector

DEFAULT_MAX_DISTANCE_SECONDS = 10


@dataclass(frozen=True, slots=True)
class MergeOptions:
    """Options for :func:`sponsor_recon.merge.merge_csv`.

    ``sort_column`` selects the output order; ``delimiter`` applies to the
    input files only since output is always comma-delimited.
    """

    sort_column: ColumnSelector
    delimiter: str = ","


@dataclass(frozen=True, slots=True)
class ReconcileOptions:
    """Options for :func:`sponsor_recon.reconcile.merge_accounts`.

    Attributes
    ----------
    payment_date_column, payment_time_column:
        Selectors of the two payment columns that together form the
        settlement timestamp. They are also the payment deduplication key.
    payment_delimiter:
        Input delimiter of the payment files.
    ledger_date_column:
        Selector of the ledger date column; also the ledger sort column.
    ledger_key_columns:
        Ledger deduplication key. ``None`` uses the ledger date column alone.
    ledger_delimiter:
        Input delimiter of the ledger files.
    max_distance_seconds:
        Largest accepted distance between a ledger row and its payment row.
    number_markers:
        Fields starting with any of these characters get their thousands and
        decimal separators rewritten. Empty disables normalization.
    thousands_separator, decimal_separator:
        Target separators for number normalization.
    normalize_numbers:
        Master switch for number normalization.
    notes:
        Optional path to a JSON rule file; enables the ``Note`` column.
    """

    payment_date_column: ColumnSelector = "Date"
    payment_time_column: ColumnSelector = "Time"
    payment_delimiter: str = ","
    ledger_date_column: ColumnSelector = "Transaction Date"
    ledger_key_columns: tuple[ColumnSelector, ...] | None = None
    ledger_delimiter: str = ","
    max_distance_seconds: int = DEFAULT_MAX_DISTANCE_SECONDS
    number_markers: str = "€$"
    thousands_separator: str = "."
    decimal_separator: str = ","
    normalize_numbers: bool = True
    notes: Path | None = None

    def __post_init__(self) -> None:
        if self.max_distance_seconds < 0:
            raise ValueError(
                f"max_distance_seconds must be non-negative, got {self.max_distance_seconds}"
            )

    @property
    def ledger_keys(self) -> tuple[ColumnSelector, ...]:
        if self.ledger_key_columns:
            return self.ledger_key_columns
        return (self.ledger_date_column,)


__all__ = ["DEFAULT_MAX_DISTANCE_SECONDS", "MergeOptions", "ReconcileOptions"]
