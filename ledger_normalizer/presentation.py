"""Display helpers for rendering a :class:`ParseResult` as text.

Truncation and ordering choices here are display policy only; the core keeps
full warning lists and ascending month totals.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from .models import MonthTotal

HIGH_SPEND_THRESHOLD_USD = 3000
DISPLAY_WARNINGS_LIMIT = 50
_BAR_CHAR = "█"


def format_usd(amount: float) -> str:
    """US-style currency: ``$1,234.56`` / ``-$10.00``."""

    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_date_utc(ts: datetime) -> str:
    # Same UTC calendar used for month bucketing.
    return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"


def format_date_maybe_time_utc(ts: datetime, has_time: bool) -> str:
    date = format_date_utc(ts)
    if not has_time:
        return date
    return f"{date} {ts.hour:02d}:{ts.minute:02d}"


def truncate_warnings(warnings: Sequence[str], limit: int = DISPLAY_WARNINGS_LIMIT) -> list[str]:
    """First ``limit`` warnings, plus ``"…and N more"`` when some were cut."""

    limit = max(0, limit)
    shown = list(warnings[:limit])
    if len(warnings) > limit:
        shown.append(f"…and {len(warnings) - limit} more")
    return shown


def months_most_recent_first(totals: Sequence[MonthTotal]) -> list[MonthTotal]:
    return sorted(totals, key=lambda m: m.year_month, reverse=True)


def is_high_spend(total_usd: float) -> bool:
    return total_usd > HIGH_SPEND_THRESHOLD_USD


def bar_width(total_usd: float, max_total_usd: float, width: int) -> int:
    """Bar length proportional to the largest month, clamped to ``[0, width]``.

    A non-positive maximum (only refunds) scales against 1 instead.
    """

    safe_max = max_total_usd if max_total_usd > 0 else 1
    frac = max(0.0, min(1.0, total_usd / safe_max))
    return round(frac * width)


def month_chart_lines(totals: Sequence[MonthTotal], *, width: int = 40) -> list[str]:
    """One text bar per month, most recent first; ``!`` marks high months."""

    if not totals:
        return []
    rows = months_most_recent_first(totals)
    max_total = max(m.total_usd for m in rows)
    amounts = [format_usd(m.total_usd) for m in rows]
    amount_width = max(len(a) for a in amounts)
    lines: list[str] = []
    for month, amount in zip(rows, amounts, strict=True):
        bar = _BAR_CHAR * bar_width(month.total_usd, max_total, width)
        marker = " !" if is_high_spend(month.total_usd) else ""
        lines.append(f"{month.year_month}  {amount:>{amount_width}}  {bar}{marker}".rstrip())
    return lines


__all__ = [
    "DISPLAY_WARNINGS_LIMIT",
    "HIGH_SPEND_THRESHOLD_USD",
    "bar_width",
    "format_date_maybe_time_utc",
    "format_date_utc",
    "format_usd",
    "is_high_spend",
    "month_chart_lines",
    "months_most_recent_first",
    "truncate_warnings",
]
