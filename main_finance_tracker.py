"""Mini README: Entry point CLI for the FinTrack personal finance tracker.

This script exposes a Typer CLI that starts the web interface with
configurable host, port and production flags, and offers a few offline
commands (summary, export, import) that work directly on the configured
storage. Logging level and storage location come from ``FINTRACK_*``
environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import uvicorn

from fintrack.configuration import get_settings
from fintrack.finance import TransactionStore
from fintrack.logging_utils import configure_root_logger

cli = typer.Typer(help="Run and manage the FinTrack personal finance tracker.")


def _open_store() -> TransactionStore:
    settings = get_settings()
    configure_root_logger(settings.log_level)
    return TransactionStore.from_settings(settings)


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # 0.0.0.0 is a bind address only; browsers need a concrete host.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting FinTrack on {effective_host}:{effective_port}.\n"
        f"API available at http://{browser_host}:{effective_port}/api/state"
    )
    uvicorn.run(
        "fintrack.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def summary(
    filter_kind: str = typer.Option("none", "--filter", help="none, day, month or year."),
    value: str = typer.Option("", help="Filter value such as 2024-03-01, 2024-03 or 2024."),
) -> None:
    """Print balance, income, expenses and budget usage."""

    store = _open_store()
    result = store.update_filter(filter_kind, value)
    if not result:
        typer.echo(result.message, err=True)
        raise typer.Exit(code=1)
    figures = store.summary()
    typer.echo(f"Transações:        {len(store.filtered_transactions)}")
    typer.echo(f"Saldo:             {figures['totalBalance']:.2f}")
    typer.echo(f"Receitas:          {figures['totalIncome']:.2f}")
    typer.echo(f"Despesas:          {figures['totalExpenses']:.2f}")
    typer.echo(f"Despesas do mês:   {figures['currentMonthTotalExpenses']:.2f}")
    typer.echo(
        f"Orçamento mensal:  {figures['monthlyBudget']:.2f} "
        f"({figures['budgetUsagePercent']:.1f}% usado)"
    )


@cli.command()
def export(
    directory: Path = typer.Option(Path("."), help="Directory that receives the export file."),
) -> None:
    """Write the full dataset to a dated JSON file."""

    store = _open_store()
    exported = store.export_data().payload
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / exported.filename
    destination.write_text(exported.content, encoding="utf-8")
    typer.echo(f"Dados exportados para {destination}")


@cli.command("import-file")
def import_file(
    path: Optional[Path] = typer.Argument(None, help="Export file to import."),
) -> None:
    """Replace the stored dataset with the contents of an export file."""

    store = _open_store()
    contents = path.read_bytes() if path is not None else None
    result = store.import_data(contents)
    typer.echo(result.message, err=not result.ok)
    if not result:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
