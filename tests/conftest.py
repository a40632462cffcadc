"""Pytest configuration for test isolation.

The CLI reads ``LEDGER_NORMALIZER_*`` settings from the environment (and from
a ``.env`` in the working directory). A developer's shell or ``.env`` must not
leak into assertions about warning truncation or log levels, so every test
starts with those variables removed.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

_ENV_VARS = ("LEDGER_NORMALIZER_LOG_LEVEL", "LEDGER_NORMALIZER_MAX_WARNINGS")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # The CLI loads ./.env; run from an empty directory so none is found.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str], Path]:
    """Write dedented CSV text to a file under ``tmp_path`` and return its path."""

    def _write(text: str, name: str = "transactions.csv") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return path

    return _write
