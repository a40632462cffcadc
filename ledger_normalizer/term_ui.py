"""Tiny terminal UI helpers (prompt_toolkit-based).

Interactive pickers used by the ``explore`` command, kept apart from the
breakdown logic so they can be tested with piped input.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import Validator

from .breakdown import SortMode


def _choose(
    choices: Sequence[str],
    *,
    message: str,
    default: str,
    error_message: str,
    session: PromptSession | None,
) -> str | None:
    allowed = {c.lower(): c for c in choices}
    completer = WordCompleter(list(choices), ignore_case=True, sentence=True)
    validator = Validator.from_callable(
        lambda text: not text.strip() or text.strip().lower() in allowed,
        error_message=error_message,
        move_cursor_to_end=True,
    )
    sess = session or PromptSession()
    try:
        text = sess.prompt(
            message,
            completer=completer,
            complete_while_typing=True,
            validator=validator,
            validate_while_typing=False,
            default=default,
        )
    except (EOFError, KeyboardInterrupt):
        return None
    picked = text.strip()
    return allowed[picked.lower()] if picked else None


def select_year_month(
    months: Iterable[str],
    *,
    default: str | None = None,
    message: str = "Month (YYYY-MM, empty to quit): ",
    session: PromptSession | None = None,
) -> str | None:
    """Prompt for one of ``months``; ``None`` on empty input, Ctrl-C or Ctrl-D."""

    return _choose(
        list(months),
        message=message,
        default=default or "",
        error_message="Unknown month; pick one with transactions",
        session=session,
    )


def select_sort_mode(
    *,
    default: SortMode = SortMode.TIME_DESC,
    message: str = "Sort by: ",
    session: PromptSession | None = None,
) -> SortMode:
    """Prompt for a sort mode; empty input keeps ``default``."""

    picked = _choose(
        [m.value for m in SortMode],
        message=message,
        default="",
        error_message="Unknown sort mode",
        session=session,
    )
    return SortMode(picked) if picked else default


__all__ = ["select_sort_mode", "select_year_month"]
