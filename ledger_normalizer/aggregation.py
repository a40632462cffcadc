"""Inclusion filtering, date-range tracking and month aggregation.

Everything here works on call-local accumulators; nothing is shared between
invocations of the transformation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from .models import MonthTotal, NormalizedTransaction, ParseSummary

APPROVED_STATUS = "APPROVED"
INCLUDED_TYPES = frozenset({"POS_TX", "REFUND"})


def is_included(tx: NormalizedTransaction) -> bool:
    """Approved purchases and approved refunds; everything else is ignored."""

    return tx.status == APPROVED_STATUS and tx.type in INCLUDED_TYPES


@dataclass(slots=True)
class DateRange:
    """Running min/max over included transaction timestamps."""

    earliest: datetime | None = None
    latest: datetime | None = None

    def update(self, ts: datetime) -> None:
        if self.earliest is None or ts < self.earliest:
            self.earliest = ts
        if self.latest is None or ts > self.latest:
            self.latest = ts


def month_totals(transactions: Iterable[NormalizedTransaction]) -> tuple[MonthTotal, ...]:
    """Signed per-month sums, ascending by ``YYYY-MM`` (refunds subtract)."""

    totals: dict[str, float] = {}
    for tx in transactions:
        totals[tx.year_month] = totals.get(tx.year_month, 0.0) + tx.amount_usd
    return tuple(MonthTotal(ym, total) for ym, total in sorted(totals.items()))


def build_summary(
    *,
    total_rows: int,
    included_rows: int,
    date_range: DateRange,
    warnings: Sequence[str],
) -> ParseSummary:
    return ParseSummary(
        total_rows=total_rows,
        included_rows=included_rows,
        ignored_rows=total_rows - included_rows,
        earliest=date_range.earliest,
        latest=date_range.latest,
        warnings=tuple(warnings),
    )


__all__ = [
    "APPROVED_STATUS",
    "INCLUDED_TYPES",
    "DateRange",
    "build_summary",
    "is_included",
    "month_totals",
]
