"""Public API for the ``ledger_normalizer`` package.

:func:`compute_monthly_spend_from_csv_text` is the whole transformation:
decode -> normalize each record -> filter + track the date range ->
aggregate month totals -> assemble the summary. It is pure and call-scoped;
identical text always yields an equal :class:`ParseResult`.
"""

from __future__ import annotations

from .aggregation import DateRange, build_summary, is_included, month_totals
from .decoding import decode_records, decode_warnings
from .logging_setup import get_logger
from .models import NormalizedTransaction, ParseResult, RowWarning
from .normalizers import normalize_row

logger = get_logger("ledger_normalizer.api")


class LedgerReadError(RuntimeError):
    """The input could not be decoded at all; no partial result exists.

    Distinct from row-level problems, which surface as summary warnings.
    """


def compute_monthly_spend_from_csv_text(csv_text: str) -> ParseResult:
    """Transform raw delimited transaction text into a :class:`ParseResult`.

    Behavior:
    - Decode anomalies (malformed quoting, field-count mismatches, ...) are
      reported first as warnings, capped at 10 plus an overflow line.
    - Rows that cannot be normalized add one warning each, in input order.
    - Normalized rows that are not approved purchases/refunds are dropped
      silently and only show up in ``ignored_rows``.
    - ``total_rows`` counts the non-blank records that reached normalization.

    Raises :class:`LedgerReadError` when the decoder itself fails.
    """

    try:
        decoded = decode_records(csv_text)
    except Exception as e:
        raise LedgerReadError(f"failed to decode delimited text: {e}") from e

    warnings = decode_warnings(decoded.errors)
    transactions: list[NormalizedTransaction] = []
    date_range = DateRange()
    total_rows = 0

    for record in decoded.records:
        if not record:
            continue
        total_rows += 1
        normalized = normalize_row(record)
        if isinstance(normalized, RowWarning):
            warnings.append(normalized.message)
            continue
        if not is_included(normalized):
            continue
        transactions.append(normalized)
        date_range.update(normalized.date)

    totals = month_totals(transactions)
    summary = build_summary(
        total_rows=total_rows,
        included_rows=len(transactions),
        date_range=date_range,
        warnings=warnings,
    )
    logger.debug(
        "decoded %d rows (delimiter=%r, decode_errors=%d): "
        "included=%d ignored=%d months=%d warnings=%d",
        summary.total_rows,
        decoded.delimiter,
        len(decoded.errors),
        summary.included_rows,
        summary.ignored_rows,
        len(totals),
        len(summary.warnings),
    )
    return ParseResult(summary=summary, month_totals=totals, transactions=tuple(transactions))


__all__ = ["LedgerReadError", "compute_monthly_spend_from_csv_text"]
