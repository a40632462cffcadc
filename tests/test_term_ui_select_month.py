import contextlib

from ledger_normalizer.breakdown import SortMode
from ledger_normalizer.term_ui import select_sort_mode, select_year_month

# Compatibility import across prompt_toolkit versions
try:  # pragma: no cover - fallback path depends on library version
    from prompt_toolkit.input import create_pipe_input
except Exception:  # pragma: no cover - defensive
    from prompt_toolkit.input.defaults import create_pipe_input

from prompt_toolkit import PromptSession
from prompt_toolkit.output import DummyOutput

MONTHS = ["2024-03", "2024-02", "2024-01"]


@contextlib.contextmanager
def pipe_session():
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        yield pipe, sess


def test_select_year_month_returns_typed_month():
    with pipe_session() as (pipe, sess):
        pipe.send_text("2024-02\r")
        assert select_year_month(MONTHS, session=sess) == "2024-02"


def test_select_year_month_accepts_default_with_enter():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert select_year_month(MONTHS, default="2024-03", session=sess) == "2024-03"


def test_select_year_month_empty_input_means_quit():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert select_year_month(MONTHS, session=sess) is None


def test_select_year_month_ctrl_d_means_quit():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\x04")  # Ctrl-D on an empty buffer
        assert select_year_month(MONTHS, session=sess) is None


def test_select_sort_mode_is_case_insensitive_and_defaults():
    with pipe_session() as (pipe, sess):
        pipe.send_text("AMOUNT_DESC\r")
        assert select_sort_mode(session=sess) is SortMode.AMOUNT_DESC

    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert select_sort_mode(default=SortMode.TIME_ASC, session=sess) is SortMode.TIME_ASC
