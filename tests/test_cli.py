from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from sponsor_recon.cli import app

from tests.helpers.csv_data import csv_bytes, ledger_csv, payment_csv, write

runner = CliRunner()


def test_merge_command_writes_merged_csv(tmp_path: Path):
    older = write(
        tmp_path / "older.csv",
        csv_bytes(
            """
            id;date;amount
            1;2021-01-02;1,00
            2;2021-01-01;2,00
            """
        ),
    )
    newer = write(
        tmp_path / "newer.csv",
        csv_bytes(
            """
            id;date;amount
            1;2021-01-02;1,50
            """
        ),
    )

    result = runner.invoke(app, ["merge", "-d", ";", "id", "date", str(older), str(newer)])

    assert result.exit_code == 0, result.output
    assert result.stdout_bytes == b'id,date,amount\n2,2021-01-01,"2,00"\n1,2021-01-02,"1,50"\n'


def test_merge_command_reports_schema_changes(tmp_path: Path):
    a = write(tmp_path / "a.csv", b"id,date\n1,2021\n")
    b = write(tmp_path / "b.csv", b"id,when\n1,2021\n")

    result = runner.invoke(app, ["merge", "id", "date", str(a), str(b)])

    assert result.exit_code == 1
    assert "Error: The schema changed" in result.output
    assert "id,date != id,when" in result.output


def test_merge_command_without_files_reports_no_input():
    result = runner.invoke(app, ["merge", "id", "date"])
    assert result.exit_code == 1
    assert "Error: No input was provided" in result.output


def test_merge_command_reports_missing_files(tmp_path: Path):
    result = runner.invoke(app, ["merge", "0", "0", str(tmp_path / "gone.csv")])
    assert result.exit_code == 1
    assert "Error: File not found:" in result.output


def test_merge_accounts_command(tmp_path: Path):
    ledger = write(
        tmp_path / "github.csv",
        ledger_csv('octocat,2021-03-01T00:00:00Z,"$1,000.00"'),
    )
    stripe = write(
        tmp_path / "stripe.csv",
        payment_csv('"March 1, 2021",00:00:05 UTC,Charge,"€850,00"'),
    )
    notes = tmp_path / "notes.json"
    notes.write_text(
        json.dumps({"rules": [{"statements": [], "value": "checked"}]}), encoding="utf-8"
    )

    result = runner.invoke(
        app,
        ["merge-accounts", "-g", str(ledger), "-s", str(stripe), "-m", "10", "-n", str(notes)],
    )

    assert result.exit_code == 0, result.output
    lines = result.stdout_bytes.decode("utf-8").splitlines()
    assert lines[0].endswith(",Received Date,Distance [s],Date,Time,Description,Amount,Note")
    assert lines[1] == (
        'octocat,2021-03-01T00:00:00Z,"$1.000,00",2021-03-01 00:00:05 +0000,5,'
        '"March 1, 2021",00:00:05 UTC,Charge,"€850,00",checked'
    )


def test_merge_accounts_command_respects_the_cutoff(tmp_path: Path):
    ledger = write(tmp_path / "github.csv", ledger_csv("octocat,2021-03-01T00:00:00Z,$5.00"))
    stripe = write(
        tmp_path / "stripe.csv", payment_csv('"March 1, 2021",00:00:05 UTC,Charge,$5.00')
    )

    result = runner.invoke(
        app,
        [
            "merge-accounts",
            "--ledger",
            str(ledger),
            "--payments",
            str(stripe),
            "--max-distance-seconds",
            "3",
            "--no-normalize",
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.stdout_bytes.splitlines()[1] == b"octocat,2021-03-01T00:00:00Z,$5.00,,,,,,"


def test_merge_accounts_command_reports_bad_dates(tmp_path: Path):
    ledger = write(tmp_path / "github.csv", ledger_csv("octocat,not a date,$5.00"))
    stripe = write(tmp_path / "stripe.csv", payment_csv())

    result = runner.invoke(app, ["merge-accounts", "-g", str(ledger), "-s", str(stripe)])

    assert result.exit_code == 1
    assert "Error: Failed to parse ledger time 'not a date'" in result.output
    assert "github.csv" in result.output
    assert "Sponsor Handle" not in result.output
