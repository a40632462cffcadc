"""Per-month breakdown of included transactions.

Given the transactions of a :class:`~ledger_normalizer.models.ParseResult`,
select one month, optionally filter by merchant, sort by one of six modes and
summarize the biggest merchants. Month totals, the high-spend flag and the
top-merchant list always cover the whole month; only the listed transactions
honor the merchant filter.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from .models import NormalizedTransaction
from .presentation import is_high_spend

TOP_MERCHANTS_LIMIT = 10


class SortMode(StrEnum):
    TIME_DESC = "time_desc"
    TIME_ASC = "time_asc"
    MERCHANT_ASC = "merchant_asc"
    MERCHANT_DESC = "merchant_desc"
    AMOUNT_DESC = "amount_desc"
    AMOUNT_ASC = "amount_asc"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]


_SORT_LABELS = {
    SortMode.TIME_DESC: "Time (newest first)",
    SortMode.TIME_ASC: "Time (oldest first)",
    SortMode.MERCHANT_ASC: "Merchant (A → Z)",
    SortMode.MERCHANT_DESC: "Merchant (Z → A)",
    SortMode.AMOUNT_DESC: "Amount (high → low)",
    SortMode.AMOUNT_ASC: "Amount (low → high)",
}


@dataclass(frozen=True, slots=True)
class MerchantTotal:
    merchant_name: str
    total_usd: float
    count: int


@dataclass(frozen=True, slots=True)
class MonthBreakdown:
    year_month: str
    transactions: tuple[NormalizedTransaction, ...]
    shown: tuple[NormalizedTransaction, ...]
    total_usd: float
    is_high: bool
    top_merchants: tuple[MerchantTotal, ...]


def transactions_for_month(
    transactions: Iterable[NormalizedTransaction], year_month: str
) -> list[NormalizedTransaction]:
    return [t for t in transactions if t.year_month == year_month]


def filter_by_merchant(
    transactions: Iterable[NormalizedTransaction], query: str
) -> list[NormalizedTransaction]:
    """Case-insensitive substring match on merchant name; blank keeps all."""

    q = query.strip().casefold()
    if not q:
        return list(transactions)
    return [t for t in transactions if q in t.merchant_name.casefold()]


def _merchant_key(t: NormalizedTransaction) -> str:
    """Case-insensitive, locale-independent key: casefolded code-point order.

    Accented letters therefore sort after ``z`` (``"Éclair"`` > ``"Zed"``).
    """

    return t.merchant_name.strip().casefold()


def sort_transactions(
    transactions: Iterable[NormalizedTransaction], mode: SortMode = SortMode.TIME_DESC
) -> list[NormalizedTransaction]:
    """Sort by ``mode``; ties fall back to newest-first, then input position.

    Implemented as successive stable sorts from the least significant key.
    """

    items = list(transactions)
    items.sort(key=lambda t: t.date, reverse=True)
    match SortMode(mode):
        case SortMode.TIME_DESC:
            pass
        case SortMode.TIME_ASC:
            items.sort(key=lambda t: t.date)
        case SortMode.MERCHANT_ASC:
            items.sort(key=_merchant_key)
        case SortMode.MERCHANT_DESC:
            items.sort(key=_merchant_key, reverse=True)
        case SortMode.AMOUNT_DESC:
            items.sort(key=lambda t: t.amount_usd, reverse=True)
        case SortMode.AMOUNT_ASC:
            items.sort(key=lambda t: t.amount_usd)
    return items


def top_merchants(
    transactions: Iterable[NormalizedTransaction], limit: int = TOP_MERCHANTS_LIMIT
) -> list[MerchantTotal]:
    """Signed total and count per merchant, largest total first."""

    totals: dict[str, tuple[float, int]] = {}
    for t in transactions:
        total, count = totals.get(t.merchant_name, (0.0, 0))
        totals[t.merchant_name] = (total + t.amount_usd, count + 1)
    ranked = [MerchantTotal(name, total, count) for name, (total, count) in totals.items()]
    ranked.sort(key=lambda m: m.total_usd, reverse=True)
    return ranked[:limit]


def build_month_breakdown(
    transactions: Sequence[NormalizedTransaction],
    year_month: str,
    *,
    sort: SortMode = SortMode.TIME_DESC,
    merchant_query: str = "",
) -> MonthBreakdown:
    month_txs = transactions_for_month(transactions, year_month)
    total = sum((t.amount_usd for t in month_txs), 0.0)
    shown = sort_transactions(filter_by_merchant(month_txs, merchant_query), sort)
    return MonthBreakdown(
        year_month=year_month,
        transactions=tuple(month_txs),
        shown=tuple(shown),
        total_usd=total,
        is_high=is_high_spend(total),
        top_merchants=tuple(top_merchants(month_txs)),
    )


__all__ = [
    "MerchantTotal",
    "MonthBreakdown",
    "SortMode",
    "build_month_breakdown",
    "filter_by_merchant",
    "sort_transactions",
    "top_merchants",
    "transactions_for_month",
]
