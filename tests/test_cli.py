import contextlib
import json

import pytest
from prompt_toolkit import PromptSession
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput
from typer.testing import CliRunner

import ledger_normalizer.term_ui as term_ui
from ledger_normalizer.breakdown import SortMode
from ledger_normalizer.cli import _resolve_max_warnings, app, cmd_explore

runner = CliRunner()

SAMPLE = """
    date,status,type,merchantName,accountAmount,USDAmount
    2024-01-05 08:15,APPROVED,POS_TX,Coffee Shop,-4.50,
    2024-01-20,APPROVED,POS_TX,Grocer,-100.00,
    2024-01-22,APPROVED,REFUND,Grocer,20.00,
    2024-02-03,DECLINED,POS_TX,Grocer,-9.99,
    2024-02-10,APPROVED,POS_TX,Airline,-3200.00,
    ,APPROVED,POS_TX,Nowhere,-1.00,
    """


def test_summary_prints_counts_range_warnings_and_chart(write_csv):
    path = write_csv(SAMPLE)

    result = runner.invoke(app, ["summary", "--csv-path", str(path)])

    assert result.exit_code == 0, result.output
    assert "Included 4 • Ignored 2 • Months 2 • Range 2024-01-05 → 2024-02-10" in result.output
    assert "Warnings (1):" in result.output
    assert "  - Row missing date" in result.output
    lines = result.output.splitlines()
    feb = next(i for i, line in enumerate(lines) if line.strip().startswith("2024-02"))
    jan = next(i for i, line in enumerate(lines) if line.strip().startswith("2024-01"))
    assert feb < jan
    assert lines[feb].endswith(" !")
    assert "$84.50" in lines[jan]


def test_summary_json_carries_full_result(write_csv):
    path = write_csv(SAMPLE)

    result = runner.invoke(app, ["summary", "--csv-path", str(path), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["summary"]["total_rows"] == 6
    assert payload["summary"]["included_rows"] == 4
    assert payload["summary"]["ignored_rows"] == 2
    assert payload["summary"]["warnings"] == ["Row missing date"]
    assert payload["month_totals"] == [
        {"year_month": "2024-01", "total_usd": 84.5},
        {"year_month": "2024-02", "total_usd": 3200.0},
    ]
    first = payload["transactions"][0]
    assert first["merchant_name"] == "Coffee Shop"
    assert first["has_time"] is True
    assert first["date"].startswith("2024-01-05T08:15:00")


def test_summary_respects_max_warnings_from_env(write_csv, monkeypatch: pytest.MonkeyPatch):
    path = write_csv(
        """
        date,status,type,merchantName,accountAmount
        ,APPROVED,POS_TX,A,-1
        bad,APPROVED,POS_TX,A,-1
        2024-01-01,APPROVED,POS_TX,A,
        """
    )
    monkeypatch.setenv("LEDGER_NORMALIZER_MAX_WARNINGS", "1")

    result = runner.invoke(app, ["summary", "--csv-path", str(path)])

    assert result.exit_code == 0, result.output
    assert "Warnings (3):" in result.output
    assert "  - Row missing date" in result.output
    assert "Invalid date: bad" not in result.output
    assert "…and 2 more" in result.output


def test_resolve_max_warnings(monkeypatch: pytest.MonkeyPatch):
    assert _resolve_max_warnings(None) == 50
    assert _resolve_max_warnings(3) == 3
    assert _resolve_max_warnings(-1) == 0
    monkeypatch.setenv("LEDGER_NORMALIZER_MAX_WARNINGS", "nope")
    assert _resolve_max_warnings(None) == 50
    monkeypatch.setenv("LEDGER_NORMALIZER_MAX_WARNINGS", "7")
    assert _resolve_max_warnings(None) == 7


def test_missing_file_exits_with_error(tmp_path):
    result = runner.invoke(app, ["summary", "--csv-path", str(tmp_path / "nope.csv")])

    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_breakdown_lists_sorted_and_filtered_transactions(write_csv):
    path = write_csv(SAMPLE)

    result = runner.invoke(
        app,
        [
            "breakdown",
            "--csv-path",
            str(path),
            "--month",
            "2024-01",
            "--sort",
            "amount_asc",
            "--merchant",
            "grocer",
        ],
    )

    assert result.exit_code == 0, result.output
    out = result.output
    assert "2024-01 breakdown" in out
    assert "3 transactions • Total $84.50" in out
    assert "  Grocer  $80.00  2×" in out
    assert "Transactions (Amount (low → high)) 2 / 3:" in out
    refund_at = out.index("2024-01-22  Grocer  -$20.00  REFUND")
    purchase_at = out.index("2024-01-20  Grocer  $100.00  POS_TX")
    assert refund_at < purchase_at
    assert "Coffee Shop  $4.50  POS_TX" not in out


def test_breakdown_shows_time_and_high_flag(write_csv):
    path = write_csv(SAMPLE)

    jan = runner.invoke(app, ["breakdown", "--csv-path", str(path), "--month", "2024-01"])
    feb = runner.invoke(app, ["breakdown", "--csv-path", str(path), "--month", "2024-02"])

    assert "2024-01-05 08:15  Coffee Shop  $4.50  POS_TX" in jan.output
    assert "1 transactions • Total $3,200.00 (high)" in feb.output


def test_breakdown_of_unknown_month_and_limit(write_csv):
    path = write_csv(SAMPLE)

    empty = runner.invoke(app, ["breakdown", "--csv-path", str(path), "--month", "2023-01"])
    limited = runner.invoke(
        app, ["breakdown", "--csv-path", str(path), "--month", "2024-01", "--limit", "1"]
    )

    assert empty.exit_code == 0
    assert "No rows for this month." in empty.output
    assert "  …and 2 more" in limited.output


@contextlib.contextmanager
def _dummy_session():
    with create_pipe_input() as pipe:
        yield PromptSession(input=pipe, output=DummyOutput())


def test_explore_loops_until_empty_month(write_csv, monkeypatch: pytest.MonkeyPatch, capsys):
    path = write_csv(SAMPLE)
    picks = iter(["2024-02", "2024-01", None])
    offered: list[list[str]] = []

    def fake_month(months, **_kwargs):
        offered.append(list(months))
        return next(picks)

    monkeypatch.setattr(term_ui, "select_year_month", fake_month)
    monkeypatch.setattr(term_ui, "select_sort_mode", lambda **_kwargs: SortMode.AMOUNT_DESC)

    with _dummy_session() as sess:
        code = cmd_explore(str(path), session=sess)

    out = capsys.readouterr().out
    assert code == 0
    assert offered[0] == ["2024-02", "2024-01"]
    assert out.index("2024-02 breakdown") < out.index("2024-01 breakdown")
    assert "Transactions (Amount (high → low)) 3 / 3:" in out


def test_explore_missing_file_returns_error(tmp_path, capsys):
    with _dummy_session() as sess:
        code = cmd_explore(str(tmp_path / "missing.csv"), session=sess)

    assert code == 1
    assert "Error: File not found" in capsys.readouterr().err
