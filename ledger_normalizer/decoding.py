"""Delimited-text decoding: raw text -> header-keyed string records.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module (quoted
fields with embedded delimiters and newlines, doubled quotes). On top of the
reader this module adds what a forgiving upload path needs:

- delimiter auto-detection among a small set of candidates;
- "greedy" blank-row skipping (rows whose cells are all whitespace vanish);
- collection of structural anomalies as :class:`DecodeError` values instead of
  exceptions, so one malformed line never costs the rest of the file.

Values are never coerced; interpretation of dates and amounts happens in
:mod:`ledger_normalizer.normalizers`.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator, Sequence
from io import StringIO
from itertools import islice
from typing import NamedTuple

from .models import DecodeError, RawRecord

DEFAULT_DELIMITER = ","
DELIMITER_CANDIDATES: tuple[str, ...] = (",", "\t", "|", ";", "\x1e", "\x1f")
# Number of non-blank rows inspected per candidate when guessing.
_PREVIEW_ROWS = 10
# Surfaced decode errors; the remainder is summarized in a single line.
MAX_DECODE_WARNINGS = 10

_BOM = "\ufeff"


class DecodedText(NamedTuple):
    records: list[RawRecord]
    errors: list[DecodeError]
    delimiter: str
    headers: tuple[str, ...]


def _is_blank(fields: Sequence[str]) -> bool:
    return "".join(fields).strip() == ""


def _reader(text: str, delimiter: str, *, strict: bool) -> Iterator[list[str]]:
    return csv.reader(StringIO(text, newline=""), delimiter=delimiter, strict=strict)


def guess_delimiter(text: str) -> str | None:
    """Return the most consistent candidate delimiter, or ``None``.

    A candidate qualifies when the preview rows average more than ~2 fields.
    Among qualifying candidates the one whose field count varies least from
    row to row wins; ties go to the larger average, then candidate order.
    """

    best: str | None = None
    best_delta = 0
    best_avg = 0.0
    for candidate in DELIMITER_CANDIDATES:
        try:
            non_blank = (f for f in _reader(text, candidate, strict=False) if not _is_blank(f))
            counts = [len(f) for f in islice(non_blank, _PREVIEW_ROWS)]
        except csv.Error:
            continue
        if not counts:
            continue
        avg = sum(counts) / len(counts)
        if avg <= 1.99:
            continue
        delta = sum(abs(b - a) for a, b in zip(counts, counts[1:], strict=False))
        if best is None or delta < best_delta or (delta == best_delta and avg > best_avg):
            best, best_delta, best_avg = candidate, delta, avg
    return best


def _quote_error(exc: csv.Error, row: int | None) -> DecodeError:
    msg = str(exc)
    if "end of data" in msg:
        return DecodeError("MissingQuotes", "Quoted field unterminated", row)
    if "expected after" in msg:
        return DecodeError("InvalidQuotes", "Trailing quote on quoted field is malformed", row)
    return DecodeError("ParseError", msg, row)


def decode_records(text: str) -> DecodedText:
    """Decode ``text`` into header-keyed records plus collected anomalies.

    The first non-blank row supplies the (trimmed) header names. Data rows
    that are blank under the greedy policy are dropped before they are
    numbered or counted. Field-count mismatches keep the row (missing cells
    are absent, surplus cells are dropped); quoting errors drop the affected
    row and decoding resumes with the following line.
    """

    if text.startswith(_BOM):
        text = text[len(_BOM) :]

    errors: list[DecodeError] = []
    delimiter = guess_delimiter(text)
    if delimiter is None:
        delimiter = DEFAULT_DELIMITER
        errors.append(
            DecodeError(
                "UndetectableDelimiter",
                f"Unable to auto-detect delimiting character; defaulted to '{DEFAULT_DELIMITER}'",
            )
        )

    headers: tuple[str, ...] | None = None
    records: list[RawRecord] = []
    data_row = 0
    rows = _reader(text, delimiter, strict=True)
    while True:
        try:
            fields = next(rows)
        except StopIteration:
            break
        except csv.Error as exc:
            if headers is None:
                errors.append(_quote_error(exc, None))
            else:
                data_row += 1
                errors.append(_quote_error(exc, data_row))
            continue

        if _is_blank(fields):
            continue
        if headers is None:
            headers = tuple(h.strip() for h in fields)
            continue

        data_row += 1
        expected, parsed = len(headers), len(fields)
        if parsed < expected:
            errors.append(
                DecodeError(
                    "TooFewFields",
                    f"Too few fields: expected {expected} fields but parsed {parsed}",
                    data_row,
                )
            )
        elif parsed > expected:
            errors.append(
                DecodeError(
                    "TooManyFields",
                    f"Too many fields: expected {expected} fields but parsed {parsed}",
                    data_row,
                )
            )
        # zip() stops at the shorter side: absent cells stay absent and
        # surplus cells are dropped. Later duplicate headers win.
        records.append(dict(zip(headers, fields, strict=False)))

    return DecodedText(records, errors, delimiter, headers or ())


def decode_warnings(errors: Sequence[DecodeError], limit: int = MAX_DECODE_WARNINGS) -> list[str]:
    """Render the first ``limit`` errors plus one overflow line when needed."""

    warnings = [e.describe() for e in errors[:limit]]
    if len(errors) > limit:
        warnings.append(f"...and {len(errors) - limit} more parse errors")
    return warnings


__all__ = [
    "DELIMITER_CANDIDATES",
    "DecodedText",
    "MAX_DECODE_WARNINGS",
    "decode_records",
    "decode_warnings",
    "guess_delimiter",
]
