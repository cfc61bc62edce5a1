"""Mini README: Tests for the offline CLI commands.

The commands read settings from ``FINTRACK_*`` variables, so each test
points the file backend at a temporary directory and clears the settings
cache before invoking the Typer app.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fintrack.configuration import get_settings
from main_finance_tracker import cli

RUNNER = CliRunner()

BACKUP = {
    "transactions": [
        {
            "id": 1,
            "description": "Salary",
            "amount": 2000,
            "type": "income",
            "category": "Salário",
            "date": "2024-03-05",
            "itemDescription": "March salary",
        },
        {
            "id": 2,
            "description": "Rent",
            "amount": -800,
            "type": "expense",
            "category": "Moradia",
            "date": "2024-03-06",
            "itemDescription": "March rent",
            "expenseType": "fixa",
            "paymentMethod": "Boleto",
        },
    ],
    "categories": {"expense": ["Pets"], "income": []},
    "monthlyBudget": 1000,
}


@pytest.fixture()
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "data"
    monkeypatch.setenv("FINTRACK_DATA_DIRECTORY", str(directory))
    monkeypatch.setenv("FINTRACK_STORAGE_BACKEND", "file")
    get_settings.cache_clear()
    yield directory
    get_settings.cache_clear()


def test_import_then_summary_and_export(data_dir: Path, tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(json.dumps(BACKUP), encoding="utf-8")

    imported = RUNNER.invoke(cli, ["import-file", str(backup)])
    assert imported.exit_code == 0, imported.output
    assert (data_dir / "my-finance-app-transactions.json").exists()

    summary = RUNNER.invoke(cli, ["summary", "--filter", "month", "--value", "2024-03"])
    assert summary.exit_code == 0, summary.output
    assert "1200.00" in summary.output
    assert "800.00" in summary.output

    export_dir = tmp_path / "exports"
    exported = RUNNER.invoke(cli, ["export", "--directory", str(export_dir)])
    assert exported.exit_code == 0, exported.output
    files = list(export_dir.glob("meu_sistema_financeiro_*.json"))
    assert len(files) == 1
    document = json.loads(files[0].read_text(encoding="utf-8"))
    assert len(document["transactions"]) == 2
    assert "Pets" in document["categories"]["expense"]


def test_import_rejects_empty_backup(data_dir: Path, tmp_path: Path) -> None:
    backup = tmp_path / "empty.json"
    backup.write_text(json.dumps({"transactions": []}), encoding="utf-8")

    result = RUNNER.invoke(cli, ["import-file", str(backup)])

    assert result.exit_code == 1


def test_summary_rejects_unknown_filter(data_dir: Path) -> None:
    result = RUNNER.invoke(cli, ["summary", "--filter", "week"])

    assert result.exit_code == 1
