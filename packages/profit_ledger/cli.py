"""CLI for the ``profit_ledger`` package.

A terminal stand-in for the app's screens: record and remove entries, and
print the day view, the monthly cumulative series and summary, the category
breakdown and the filtered list. Environment variables (``DATABASE_URL``,
``PROFIT_LEDGER_DATA_DIR``, ``PROFIT_LEDGER_LOG_LEVEL``) are loaded from a
local ``.env`` with ``python-dotenv`` before any command runs. All computation
lives in the library modules; this file only formats.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .aggregation import category_breakdown, daily_total, monthly_series, monthly_summary
from .categories import CATEGORIES, category_for
from .dates import current_year_month, month_bounds, parse_date
from .logging_setup import LOG_LEVEL_ENV, configure_logging
from .queries import filter_entries, flatten, group_by_date
from .storage import KeyValueStore, PersistenceError, SqlKeyValueStore, open_store
from .store import LedgerStore
from .validation import EntryValidationError

app = typer.Typer(
    name="profit-ledger",
    help="Track daily income and expenses and report monthly totals.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


@dataclass(slots=True)
class _Options:
    database_url: str | None
    data_dir: Path | None


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def _backend(ctx: typer.Context) -> KeyValueStore:
    opts: _Options = ctx.obj
    backend = open_store(database_url=opts.database_url, data_dir=opts.data_dir)
    if isinstance(backend, SqlKeyValueStore):
        try:
            backend.ensure_schema()
        except PersistenceError as e:
            _fail(f"could not prepare the database: {e}")
    return backend


def _open(ctx: typer.Context) -> LedgerStore:
    # Ids synthesized for legacy records must be saved before they are shown
    # or accepted, or the next invocation would generate different ones.
    store = LedgerStore(_backend(ctx))
    try:
        report = store.load(write_back=True)
    except PersistenceError as e:
        _fail(f"could not load the ledger: {e}")
    if report.parse_failed:
        err_console.print(
            "[yellow]Warning:[/yellow] stored data is not valid JSON; showing an empty ledger."
        )
    return store


def _signed(value: int | float) -> str:
    sign = "+" if value >= 0 else "-"
    return f"{sign}{abs(value):,.0f}"


def _check_date(value: str) -> str:
    try:
        return parse_date(value).isoformat()
    except ValueError as e:
        _fail(str(e))


# ---- Commands ----------------------------------------------------------------


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    amount: Annotated[str, typer.Argument(help="Amount, a positive whole number")],
    category: Annotated[
        Optional[str], typer.Option("--category", "-c", help="Category id (see `categories`)")
    ] = None,
    entry_type: Annotated[
        str, typer.Option("--type", "-t", help="income or expense")
    ] = "expense",
    memo: Annotated[str, typer.Option(help="Free-text note")] = "",
    entry_id: Annotated[
        Optional[str], typer.Option("--id", help="Existing entry id to edit")
    ] = None,
) -> None:
    """Record a new entry, or edit one with --id."""

    store = _open(ctx)
    draft = {
        "amount": amount,
        "category_id": category,
        "type": entry_type,
        "memo": memo,
        "entry_id": entry_id,
    }
    try:
        entry = store.upsert(day, draft)
    except EntryValidationError as e:
        _fail(str(e))
    except PersistenceError as e:
        _fail(f"could not save the entry: {e}")
    typer.echo(f"Saved {entry.date} {entry.id}")


@app.command("remove")
def remove_cmd(
    ctx: typer.Context,
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    entry_id: Annotated[str, typer.Argument(help="Entry id")],
) -> None:
    """Delete one entry."""

    day_key = _check_date(day)
    store = _open(ctx)
    try:
        removed = store.remove(day_key, entry_id)
    except PersistenceError as e:
        _fail(f"could not save the ledger: {e}")
    if not removed:
        _fail(f"no entry {entry_id} on {day_key}")
    typer.echo(f"Removed {day_key} {entry_id}")


@app.command("day")
def day_cmd(
    ctx: typer.Context,
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
) -> None:
    """Show one day's entries and its signed total."""

    day_key = _check_date(day)
    store = _open(ctx)
    table = Table(title=day_key)
    table.add_column("ID", overflow="fold")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Memo")
    for e in store.get(day_key):
        signed = -abs(e.amount) if e.is_expense else abs(e.amount)
        table.add_row(e.id, category_for(e.category_id).label, _signed(signed), e.memo)
    console.print(table)
    typer.echo(f"Total: {_signed(daily_total(store.ledger, day_key))}")


@app.command("month")
def month_cmd(
    ctx: typer.Context,
    year_month: Annotated[Optional[str], typer.Argument(help="Month (YYYY-MM)")] = None,
) -> None:
    """Cumulative profit/loss for a month and its income/expense summary."""

    ym = year_month or current_year_month()
    store = _open(ctx)
    ledger = store.ledger
    try:
        series = monthly_series(ledger, ym)
        summary = monthly_summary(ledger, ym)
    except ValueError as e:
        _fail(str(e))

    if not series.labels:
        typer.echo(f"No entries in {ym}.")
    else:
        table = Table(title=f"Cumulative profit/loss {ym}")
        table.add_column("Date")
        table.add_column("Cumulative", justify="right")
        for label, value in zip(series.labels, series.values, strict=True):
            table.add_row(label, _signed(value))
        console.print(table)

    typer.echo(f"Net: {_signed(series.net_total)}")
    typer.echo(f"Income: {summary.income:,}  Expense: {summary.expense:,}")
    if summary.remaining_days > 0:
        typer.echo(
            f"Remaining: {summary.remaining_days} days, "
            f"{round(summary.per_day_allowance):,} per day"
        )
    else:
        typer.echo("No days left in this month.")


@app.command("breakdown")
def breakdown_cmd(
    ctx: typer.Context,
    year_month: Annotated[Optional[str], typer.Argument(help="Month (YYYY-MM)")] = None,
    entry_type: Annotated[
        str, typer.Option("--type", "-t", help="income or expense")
    ] = "expense",
) -> None:
    """Per-category totals and shares for a month."""

    ym = year_month or current_year_month()
    store = _open(ctx)
    try:
        result = category_breakdown(store.ledger, ym, entry_type)  # type: ignore[arg-type]
    except ValueError as e:
        _fail(str(e))

    if not result.slices:
        typer.echo(f"No {entry_type} entries in {ym}.")
        return
    table = Table(title=f"{entry_type.capitalize()} by category {ym}")
    table.add_column("Category")
    table.add_column("Total", justify="right")
    table.add_column("Share", justify="right")
    for s in result.slices:
        table.add_row(
            f"[{s.category.color}]{s.category.label}[/]", f"{s.total:,}", f"{s.share:.1%}"
        )
    console.print(table)
    typer.echo(f"Total: {result.grand_total:,}")


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    from_date: Annotated[
        Optional[str], typer.Option("--from", help="First date (default: start of month)")
    ] = None,
    to_date: Annotated[
        Optional[str], typer.Option("--to", help="Last date (default: end of month)")
    ] = None,
    entry_type: Annotated[
        str, typer.Option("--type", "-t", help="all, income or expense")
    ] = "all",
) -> None:
    """Entries in a date range, grouped by date with daily totals."""

    first, last = month_bounds(current_year_month(date.today()))
    lo = _check_date(from_date) if from_date else first.isoformat()
    hi = _check_date(to_date) if to_date else last.isoformat()
    store = _open(ctx)
    try:
        matching = filter_entries(
            flatten(store.ledger), lo, hi, entry_type  # type: ignore[arg-type]
        )
        groups = group_by_date(matching)
    except ValueError as e:
        _fail(str(e))

    if not groups:
        typer.echo(f"No entries between {lo} and {hi}.")
        return
    for g in groups:
        table = Table(title=f"{g.date}  {_signed(g.total)}")
        table.add_column("ID", overflow="fold")
        table.add_column("Category")
        table.add_column("Amount", justify="right")
        table.add_column("Memo")
        for item in g.entries:
            e = item.entry
            signed = -abs(e.amount) if e.is_expense else abs(e.amount)
            table.add_row(e.id, category_for(e.category_id).label, _signed(signed), e.memo)
        console.print(table)


@app.command("categories")
def categories_cmd() -> None:
    """List the category ids accepted by `add`."""

    table = Table(title="Categories")
    table.add_column("ID")
    table.add_column("Label")
    table.add_column("For")
    for c in CATEGORIES:
        table.add_row(c.id, f"[{c.color}]{c.label}[/]", c.kind or "both")
    console.print(table)


@app.command("migrate")
def migrate_cmd(ctx: typer.Context) -> None:
    """Rewrite stored data in the current format."""

    store = LedgerStore(_backend(ctx))
    try:
        report = store.load(write_back=True)
    except PersistenceError as e:
        _fail(f"migration failed: {e}")
    if report.parse_failed:
        _fail("stored data is not valid JSON; nothing was rewritten")
    if not report.upgraded:
        typer.echo("Already up to date.")
        return
    typer.echo(
        f"Upgraded: wrapped={report.wrapped_single} ids={report.ids_synthesized} "
        f"types={report.types_defaulted} dropped={report.dropped}"
    )


@app.callback()
def _root(
    ctx: typer.Context,
    database_url: Annotated[
        Optional[str], typer.Option(help="Override DATABASE_URL (falls back to env var).")
    ] = None,
    data_dir: Annotated[
        Optional[Path],
        typer.Option(help="Directory for the JSON file store (when no database is set)."),
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set variables) and configures package logging at WARNING unless
    ``PROFIT_LEDGER_LOG_LEVEL`` asks for more.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(os.getenv(LOG_LEVEL_ENV) or logging.WARNING, force=True)
    ctx.obj = _Options(database_url=database_url, data_dir=data_dir)


if __name__ == "__main__":  # pragma: no cover
    app()
