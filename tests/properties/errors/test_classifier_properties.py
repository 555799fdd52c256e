"""Property-based tests for error classification precedence."""

import logging

from hypothesis import given, strategies as st

from gitproc.errors import ExecuteResult, classify
from gitproc.exceptions import (
    GitExecutionError,
    GitFatalError,
    GitUsageError,
    MergeInProgressError,
)
from gitproc.utils import create_logger

LOGGER = create_logger(log_level=logging.ERROR)

# =============================================================================
# Strategies
# =============================================================================

# Single words cannot spell any multi-word rule phrase
_WORD = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=30)

UNMERGED_LINE = "error: Merging is not possible because you have unmerged files."

# Lines that only the generic rules recognize
generic_line = st.one_of(
    _WORD.map(lambda text: "fatal: " + text),
    _WORD.map(lambda text: "usage: " + text),
    _WORD.map(lambda text: "hint: " + text),
)

failing_exit_code = st.integers(min_value=1, max_value=255)


# =============================================================================
# Precedence Properties
# =============================================================================


@given(others=st.lists(generic_line, max_size=6), exit_code=failing_exit_code, data=st.data())
def test_merge_in_progress_wins_wherever_it_appears(
    others: list[str], exit_code: int, data: st.DataObject
) -> None:
    """Property: an unmerged-files line beats every generic line around it."""
    index = data.draw(st.integers(min_value=0, max_value=len(others)))
    lines = [*others[:index], UNMERGED_LINE, *others[index:]]

    error = classify(ExecuteResult(exit_code, stderr="\n".join(lines)), logger=LOGGER)

    assert isinstance(error, MergeInProgressError)
    assert str(error) == UNMERGED_LINE


@given(text=_WORD, exit_code=failing_exit_code)
def test_fatal_line_is_fatal_regardless_of_exit_code(text: str, exit_code: int) -> None:
    """Property: a generic fatal line classifies as fatal with its own text."""
    line = "fatal: " + text

    error = classify(ExecuteResult(exit_code, stderr=line + "\n"), logger=LOGGER)

    assert type(error) is GitFatalError
    assert str(error) == line


@given(exit_code=failing_exit_code, text=_WORD.map(lambda text: "zz " + text))
def test_unrecognized_output_falls_back_to_exit_code(exit_code: int, text: str) -> None:
    """Property: unrecognized output is classified by exit code alone."""
    error = classify(ExecuteResult(exit_code, stderr=text), logger=LOGGER)

    expected = {128: GitFatalError, 129: GitUsageError}.get(exit_code, GitExecutionError)
    assert type(error) is expected
    assert str(error) == text


@given(stderr=st.text(max_size=200))
def test_success_is_never_an_error(stderr: str) -> None:
    """Property: without progress facts, exit code 0 is never an error."""
    assert classify(ExecuteResult(0, stderr=stderr), logger=LOGGER) is None
