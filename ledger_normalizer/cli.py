# ruff: noqa: I001
"""CLI for the ``ledger_normalizer`` package.

Callable command handlers (``cmd_summary``, ``cmd_breakdown``,
``cmd_explore``) do the work and return an exit status; a Typer-based console
interface wraps them. Environment variables (``LEDGER_NORMALIZER_*``) are
loaded from a local ``.env`` via ``python-dotenv`` before any command runs.
The transformation itself lives in :mod:`ledger_normalizer.api`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from pydantic import TypeAdapter
from typer.models import OptionInfo

from .api import LedgerReadError
from .breakdown import MonthBreakdown, SortMode, build_month_breakdown
from .ingest import load_monthly_spend
from .logging_setup import configure_logging, get_logger
from .models import ParseResult
from .presentation import (
    DISPLAY_WARNINGS_LIMIT,
    format_date_maybe_time_utc,
    format_date_utc,
    format_usd,
    month_chart_lines,
    months_most_recent_first,
    truncate_warnings,
)

logger = get_logger("ledger_normalizer.cli")

MAX_WARNINGS_ENV = "LEDGER_NORMALIZER_MAX_WARNINGS"
DISPLAY_TRANSACTIONS_LIMIT = 200


# ---- Small module-level helpers used by CLI commands -------------------------


def _resolve_max_warnings(explicit: int | None) -> int:
    """Resolve how many warnings to print.

    An explicit option wins; otherwise ``LEDGER_NORMALIZER_MAX_WARNINGS`` when
    it parses as an integer; otherwise 50. Negative values clamp to 0.
    """

    import os

    if explicit is not None:
        return max(0, explicit)
    env_val = os.getenv(MAX_WARNINGS_ENV)
    try:
        value = int(env_val) if env_val else None
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", MAX_WARNINGS_ENV, env_val)
        value = None
    return DISPLAY_WARNINGS_LIMIT if value is None else max(0, value)


def _load(csv_path: str) -> ParseResult | None:
    """Load and transform one file, reporting failures on stderr."""

    try:
        return load_monthly_spend(csv_path)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except IsADirectoryError:
        print(f"Error: Not a file: {csv_path}", file=sys.stderr)
    except LedgerReadError as e:
        print(f"Error: Couldn't read that CSV: {e}", file=sys.stderr)
    except OSError as e:
        print(f"Error: Unexpected failure reading '{csv_path}': {e}", file=sys.stderr)
    return None


def render_summary(result: ParseResult, *, max_warnings: int) -> list[str]:
    summary = result.summary
    parts = [
        f"Included {summary.included_rows}",
        f"Ignored {summary.ignored_rows}",
        f"Months {len(result.month_totals)}",
    ]
    if summary.earliest is not None and summary.latest is not None:
        parts.append(
            f"Range {format_date_utc(summary.earliest)} → {format_date_utc(summary.latest)}"
        )
    lines = [" • ".join(parts)]

    if summary.warnings:
        lines.append(f"Warnings ({len(summary.warnings)}):")
        lines.extend(f"  - {w}" for w in truncate_warnings(summary.warnings, max_warnings))

    chart = month_chart_lines(result.month_totals)
    if chart:
        lines.append("Monthly spend (most recent first):")
        lines.extend(f"  {row}" for row in chart)
    return lines


def render_breakdown(b: MonthBreakdown, *, sort: SortMode, limit: int) -> list[str]:
    total = format_usd(b.total_usd) + (" (high)" if b.is_high else "")
    lines = [
        f"{b.year_month} breakdown",
        f"{len(b.transactions)} transactions • Total {total}",
    ]
    if not b.transactions:
        lines.append("No rows for this month.")
        return lines

    lines.append("Top merchants:")
    for m in b.top_merchants:
        lines.append(f"  {m.merchant_name}  {format_usd(m.total_usd)}  {m.count}×")

    lines.append(f"Transactions ({sort.label}) {len(b.shown)} / {len(b.transactions)}:")
    for t in b.shown[:limit]:
        when = format_date_maybe_time_utc(t.date, t.has_time)
        lines.append(f"  {when}  {t.merchant_name}  {format_usd(t.amount_usd)}  {t.type}")
    if len(b.shown) > limit:
        lines.append(f"  …and {len(b.shown) - limit} more")
    return lines


# ---- Command handlers ----------------------------------------------------------


def cmd_summary(csv_path: str, *, as_json: bool = False, max_warnings: int | None = None) -> int:
    """Print the summary and month totals for one file.

    With ``as_json`` the full result is written as JSON instead (all
    warnings, ascending month totals, every included transaction).
    Returns ``0`` on success and ``1`` when the file could not be read.
    """

    result = _load(csv_path)
    if result is None:
        return 1
    if as_json:
        print(TypeAdapter(ParseResult).dump_json(result, indent=2).decode("utf-8"))
        return 0
    for line in render_summary(result, max_warnings=_resolve_max_warnings(max_warnings)):
        print(line)
    return 0


def cmd_breakdown(
    csv_path: str,
    year_month: str,
    *,
    sort: SortMode = SortMode.TIME_DESC,
    merchant_query: str = "",
    limit: int = DISPLAY_TRANSACTIONS_LIMIT,
) -> int:
    result = _load(csv_path)
    if result is None:
        return 1
    b = build_month_breakdown(
        result.transactions, year_month.strip(), sort=sort, merchant_query=merchant_query
    )
    for line in render_breakdown(b, sort=sort, limit=max(0, limit)):
        print(line)
    return 0


def cmd_explore(csv_path: str, *, session: PromptSession | None = None) -> int:
    """Interactive loop: pick a month, pick a sort, print its breakdown.

    Empty input (or Ctrl-D) at the month prompt ends the session.
    """

    from .term_ui import select_sort_mode, select_year_month

    result = _load(csv_path)
    if result is None:
        return 1
    for line in render_summary(result, max_warnings=_resolve_max_warnings(None)):
        print(line)
    months = [m.year_month for m in months_most_recent_first(result.month_totals)]
    if not months:
        print("No included transactions to explore.")
        return 0

    sess = session or PromptSession()
    while True:
        year_month = select_year_month(months, session=sess)
        if year_month is None:
            return 0
        sort = select_sort_mode(session=sess)
        b = build_month_breakdown(result.transactions, year_month, sort=sort)
        for line in render_breakdown(b, sort=sort, limit=DISPLAY_TRANSACTIONS_LIMIT):
            print(line)


# ---- Typer-based console interface ---------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Summarize monthly card spend from a transactions CSV export. "
        "Loads LEDGER_NORMALIZER_* settings from a local .env before running."
    ),
)

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a transactions CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler reports nice errors
    readable=True,
)


@app.command("summary")
def summary_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
    max_warnings: int | None = typer.Option(
        None,
        help=f"Warnings to print before summarizing the rest (default 50, env {MAX_WARNINGS_ENV}).",
    ),
) -> None:
    """Included/ignored counts, date range, warnings and month totals."""

    code = cmd_summary(str(csv_path), as_json=as_json, max_warnings=max_warnings)
    if code:
        raise typer.Exit(code)


@app.command("breakdown")
def breakdown_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    month: str = typer.Option(..., "--month", help="Month to break down (YYYY-MM)."),
    sort: SortMode = typer.Option(SortMode.TIME_DESC, help="Transaction ordering."),
    merchant: str = typer.Option("", help="Only list merchants containing this text."),
    limit: int = typer.Option(DISPLAY_TRANSACTIONS_LIMIT, help="Maximum transactions listed."),
) -> None:
    """Top merchants and transactions for one month."""

    code = cmd_breakdown(str(csv_path), month, sort=sort, merchant_query=merchant, limit=limit)
    if code:
        raise typer.Exit(code)


@app.command("explore")
def explore_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Pick months interactively and print their breakdowns."""

    code = cmd_explore(str(csv_path))
    if code:
        raise typer.Exit(code)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m ledger_normalizer.cli`
    app()
