"""Public interface for the ``ledger_normalizer`` package.

This module re-exports the transformation entry point and its result models
as the stable import surface. There is no runtime logic here.
"""

from .api import LedgerReadError, compute_monthly_spend_from_csv_text
from .breakdown import MonthBreakdown, SortMode, build_month_breakdown
from .ingest import load_monthly_spend
from .models import (
    DecodeError,
    MonthTotal,
    NormalizedTransaction,
    ParseResult,
    ParseSummary,
    RawRecord,
)

__all__ = [
    # API
    "compute_monthly_spend_from_csv_text",
    "load_monthly_spend",
    "build_month_breakdown",
    "LedgerReadError",
    # Models / types
    "RawRecord",
    "DecodeError",
    "NormalizedTransaction",
    "MonthTotal",
    "ParseSummary",
    "ParseResult",
    "MonthBreakdown",
    "SortMode",
]
