"""Data models for ``ledger_normalizer``.

Result types are frozen, slotted dataclasses holding tuples rather than lists,
so a :class:`ParseResult` cannot be mutated once returned to a caller.
Amounts are plain floats summed in input order rather than ``Decimal``;
totals carry ordinary binary rounding and are formatted to cents for display.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

# ---------------------------------------------------------------------------
# Decoder output
# ---------------------------------------------------------------------------

type RawRecord = Mapping[str, str]
"""A decoded row before validation: trimmed header name -> raw string value.

Values are never type-coerced. Headers other than the recognized ones are
carried along untouched and ignored by normalization.
"""


@dataclass(frozen=True, slots=True)
class DecodeError:
    """A non-fatal anomaly reported while decoding delimited text.

    ``code`` is a machine-readable identifier (e.g. ``"TooFewFields"``) and
    ``row`` the 1-based data-row number when the anomaly is tied to a row.
    """

    code: str
    message: str
    row: int | None = None

    def describe(self) -> str:
        suffix = f" (row {self.row})" if self.row is not None else ""
        return f"{self.code}: {self.message}{suffix}"


# ---------------------------------------------------------------------------
# Normalized rows and aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedTransaction:
    """A single accepted row.

    ``date`` is timezone-aware UTC with millisecond precision and
    ``year_month`` is always its UTC calendar month (``YYYY-MM``).
    ``amount_usd`` is positive for spend and negative for refunds.
    ``has_time`` only records whether the source string carried a time of day.
    """

    date: datetime
    year_month: str
    status: str
    type: str
    merchant_name: str
    amount_usd: float
    has_time: bool


class RowWarning(NamedTuple):
    """Returned by the row normalizer in place of a transaction."""

    message: str


@dataclass(frozen=True, slots=True)
class MonthTotal:
    year_month: str
    total_usd: float


@dataclass(frozen=True, slots=True)
class ParseSummary:
    """Counts, date range and diagnostics for one transformation.

    ``earliest``/``latest`` are ``None`` iff no row was included, and
    ``ignored_rows`` is always ``total_rows - included_rows``.
    """

    total_rows: int
    included_rows: int
    ignored_rows: int
    earliest: datetime | None
    latest: datetime | None
    warnings: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Aggregate root returned by the transformation.

    ``month_totals`` is ascending by ``year_month``; ``transactions`` keeps
    input order (filtered), consumers sort as needed.
    """

    summary: ParseSummary
    month_totals: tuple[MonthTotal, ...]
    transactions: tuple[NormalizedTransaction, ...]


__all__ = [
    "DecodeError",
    "MonthTotal",
    "NormalizedTransaction",
    "ParseResult",
    "ParseSummary",
    "RawRecord",
    "RowWarning",
]
