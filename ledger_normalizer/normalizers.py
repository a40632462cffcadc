"""Row normalization: one decoded record -> transaction or warning.

Recognized columns (exact, case-sensitive header names):
``date, status, type, merchantName, accountAmount, USDAmount``.
Everything else in the record is ignored.

Sign convention of the output: spend is positive, refunds are negative.
Card exports tend to record purchases as negative ``accountAmount`` and
refunds as positive, so the raw sign is discarded and re-derived from
``type``.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime

from dateutil import parser as date_parser

from .models import NormalizedTransaction, RawRecord, RowWarning

UNKNOWN_MERCHANT = "(unknown merchant)"
REFUND_TYPE = "REFUND"

# A free-form date must carry its own year, month and day: parsing against
# two defaults that differ in each field only agrees when none was filled in.
_DATE_DEFAULT = datetime(1970, 1, 1)
_DATE_ALT_DEFAULT = datetime(1971, 2, 2)
_TIME_TOKEN = re.compile(r"\d{2}:\d{2}")
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PREFIXED_INT = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def parse_amount(value: str | None) -> float | None:
    """Parse a numeric cell; ``None`` when absent, empty, or not a finite number.

    Only strings that convert in full are accepted: ``"12.5"``, ``" -4 "``,
    ``"1e3"``, ``"0x1F"``. Thousands separators, currency symbols and
    ``"NaN"``/``"Infinity"`` spellings are rejected.
    """

    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if _DECIMAL.fullmatch(s):
        n = float(s)
    elif _PREFIXED_INT.fullmatch(s):
        try:
            n = float(int(s, 0))
        except OverflowError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def parse_timestamp(value: str) -> datetime | None:
    """Parse a calendar date with optional time into an aware UTC datetime.

    ISO-8601 strings are tried first; anything else goes through dateutil's
    general parser (month-first for ambiguous numeric dates), which must find
    a year, month and day in the text; bare times like ``"10:30"`` are
    rejected. Values without an offset are taken as UTC. Precision is
    truncated to milliseconds.
    """

    try:
        try:
            dt = date_parser.isoparse(value)
        except ValueError:
            dt = date_parser.parse(value, default=_DATE_DEFAULT)
            if dt != date_parser.parse(value, default=_DATE_ALT_DEFAULT):
                return None
        # Offsets near datetime.min/max can overflow on conversion.
        dt = dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
    except (ValueError, OverflowError):
        return None
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def year_month_utc(dt: datetime) -> str:
    return f"{dt.year:04d}-{dt.month:02d}"


def _field(record: RawRecord, key: str) -> str:
    return (record.get(key) or "").strip()


# ---------------------------------------------------------------------------
# Row normalizer
# ---------------------------------------------------------------------------


def normalize_row(record: RawRecord) -> NormalizedTransaction | RowWarning:
    """Normalize one decoded record.

    Returns a :class:`RowWarning` for rows that cannot become a transaction
    (missing/invalid date, no usable amount). Inclusion rules (status/type)
    are not applied here.
    """

    date_str = _field(record, "date")
    if not date_str:
        return RowWarning("Row missing date")
    ts = parse_timestamp(date_str)
    if ts is None:
        return RowWarning(f"Invalid date: {date_str}")
    has_time = _TIME_TOKEN.search(date_str) is not None

    status = _field(record, "status")
    tx_type = _field(record, "type")
    merchant_name = _field(record, "merchantName") or UNKNOWN_MERCHANT

    # accountAmount is already normalized by the exporter; USDAmount is the fallback.
    raw = parse_amount(record.get("accountAmount"))
    if raw is None:
        raw = parse_amount(record.get("USDAmount"))
    if raw is None:
        return RowWarning(f"Row missing amount fields for {date_str}")

    # Every non-refund type is positive, including types filtered out later.
    amount_usd = -abs(raw) if tx_type == REFUND_TYPE else abs(raw)

    return NormalizedTransaction(
        date=ts,
        year_month=year_month_utc(ts),
        status=status,
        type=tx_type,
        merchant_name=merchant_name,
        amount_usd=amount_usd,
        has_time=has_time,
    )


__all__ = [
    "UNKNOWN_MERCHANT",
    "normalize_row",
    "parse_amount",
    "parse_timestamp",
    "year_month_utc",
]
