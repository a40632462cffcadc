"""File intake shared by CLI commands.

Reads an uploaded export from disk and hands its text to
:func:`ledger_normalizer.api.compute_monthly_spend_from_csv_text`, once per
file. The read is the only I/O on the path; the transformation itself never
touches the filesystem.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from .api import compute_monthly_spend_from_csv_text
from .logging_setup import get_logger
from .models import ParseResult

logger = get_logger("ledger_normalizer.ingest")


def read_ledger_text(path: str | PathLike[str]) -> str:
    """Return the file's contents decoded as UTF-8.

    A leading byte order mark is dropped and undecodable bytes become U+FFFD,
    so a mis-encoded export still yields rows (and warnings) instead of
    failing outright. ``OSError`` (missing file, permissions) propagates.
    """

    data = Path(path).read_bytes()
    logger.debug("read %d bytes from %s", len(data), path)
    return data.decode("utf-8-sig", errors="replace")


def load_monthly_spend(path: str | PathLike[str]) -> ParseResult:
    return compute_monthly_spend_from_csv_text(read_ledger_text(path))


__all__ = ["load_monthly_spend", "read_ledger_text"]
