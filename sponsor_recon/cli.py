"""CLI for the ``sponsor_recon`` package.

Two subcommands are exposed through a Typer application:

- ``merge``: collapse overlapping exports of one table into a single
  deduplicated, sorted CSV.
- ``merge-accounts``: merge the ledger (e.g. GitHub Sponsors activity) and
  payment (e.g. Stripe balance) exports, pair every ledger row with the payment
  that settled it, and emit one joined table.

Results go to stdout as comma-delimited CSV; logs and errors go to stderr.
Environment variables (notably ``SPONSOR_RECON_LOG_LEVEL``) are loaded from a
local ``.env`` before any command runs. Business logic lives in
``sponsor_recon.merge`` and ``sponsor_recon.reconcile``.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from dotenv import load_dotenv

from .config import MergeOptions, ReconcileOptions
from .errors import ReconError
from .logging_setup import configure_logging, get_logger

_log = get_logger(__name__)

T = TypeVar("T")


def _run(action: Callable[[], T]) -> T:
    """Run ``action``, turning expected failures into an error line and exit 1."""

    try:
        return action()
    except ReconError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        typer.echo(f"Error: File not found: {e.filename}", err=True)
        raise typer.Exit(1) from e
    except PermissionError as e:
        typer.echo(f"Error: Permission denied: {e.filename}", err=True)
        raise typer.Exit(1) from e
    except OSError as e:
        typer.echo(f"Error: Could not read from CSV file at '{e.filename}': {e}", err=True)
        raise typer.Exit(1) from e


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="A tool to help dealing with sponsor data: merge exports and reconcile "
    "ledger activity against payment settlements.",
)


@app.command("merge")
def merge_cmd(
    key_column: Annotated[
        str,
        typer.Argument(
            help="The index or name of the column to use as key for merging. "
            "Rows seen later with the key will overwrite those that are seen earlier."
        ),
    ],
    sort_column: Annotated[
        str, typer.Argument(help="The index or name of the column to use for sorting the output.")
    ],
    csv_file: Annotated[
        list[Path] | None,
        typer.Argument(
            help="One or more CSV files to merge - they must have the same shape and a header.",
            dir_okay=False,
        ),
    ] = None,
    delimiter: Annotated[
        str, typer.Option("--delimiter", "-d", help="Field delimiter of the input files.")
    ] = ",",
) -> None:
    """Merge multiple files of the same kind with overlaps into one stream without overlaps.

    Useful when activity is downloaded regularly: older values that a provider
    drops at some point survive in earlier downloads.
    """

    from .merge import merge_csv

    files = csv_file or []
    outcome = _run(
        lambda: merge_csv(
            files,
            [key_column],
            typer.get_binary_stream("stdout"),
            MergeOptions(sort_column=sort_column, delimiter=delimiter),
        )
    )
    _log.debug(
        "merge used key columns %s and sort column %d",
        list(outcome.key_column_indices),
        outcome.sort_column_index,
    )


@app.command("merge-accounts")
def merge_accounts_cmd(
    ledger: Annotated[
        list[Path] | None,
        typer.Option(
            "--ledger",
            "--github-activity",
            "-g",
            help="The CSV files obtained from a GitHub activity export (repeatable).",
            dir_okay=False,
        ),
    ] = None,
    payments: Annotated[
        list[Path] | None,
        typer.Option(
            "--payments",
            "--stripe-activity",
            "-s",
            help="The CSV files obtained from a Stripe activity export (repeatable).",
            dir_okay=False,
        ),
    ] = None,
    max_distance_seconds: Annotated[
        int,
        typer.Option(
            "--max-distance-seconds",
            "-m",
            min=0,
            help="The amount of seconds a payment may be away from the ledger row "
            "to be considered its settlement.",
        ),
    ] = 5,
    normalize_if_starts_with: Annotated[
        str,
        typer.Option(
            help="Fields whose value starts with one of these characters will have "
            "their thousands- and decimal separators normalized."
        ),
    ] = "€$",
    thousands_separator: Annotated[
        str, typer.Option(help="The separator between bigger numbers, like 1.000 or 1,000.")
    ] = ".",
    decimal_separator: Annotated[
        str,
        typer.Option(help="The separator between the whole and the fractional part of a number."),
    ] = ",",
    normalize: Annotated[
        bool, typer.Option("--normalize/--no-normalize", help="Normalize currency fields.")
    ] = True,
    notes: Annotated[
        Path | None,
        typer.Option(
            "--notes",
            "-n",
            help="A JSON file declaring rules for adding a note to matching rows "
            "in an appended 'Note' column.",
            dir_okay=False,
        ),
    ] = None,
    ledger_date_column: Annotated[
        str, typer.Option(help="Index or name of the ledger date column.")
    ] = "Transaction Date",
    payment_date_column: Annotated[
        str, typer.Option(help="Index or name of the payment date column.")
    ] = "Date",
    payment_time_column: Annotated[
        str, typer.Option(help="Index or name of the payment time column.")
    ] = "Time",
    ledger_delimiter: Annotated[
        str, typer.Option(help="Field delimiter of the ledger files.")
    ] = ",",
    payment_delimiter: Annotated[
        str, typer.Option(help="Field delimiter of the payment files.")
    ] = ",",
) -> None:
    """Merge ledger activity and payment information into one reconciled table."""

    from .reconcile import merge_accounts

    options = ReconcileOptions(
        payment_date_column=payment_date_column,
        payment_time_column=payment_time_column,
        payment_delimiter=payment_delimiter,
        ledger_date_column=ledger_date_column,
        ledger_delimiter=ledger_delimiter,
        max_distance_seconds=max_distance_seconds,
        number_markers=normalize_if_starts_with,
        thousands_separator=thousands_separator,
        decimal_separator=decimal_separator,
        normalize_numbers=normalize,
        notes=notes,
    )
    _run(
        lambda: merge_accounts(
            ledger or [],
            payments or [],
            typer.get_binary_stream("stdout"),
            options,
        )
    )


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging before a
    subcommand runs.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging("DEBUG" if verbose else None)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
