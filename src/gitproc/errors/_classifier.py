"""Turning a finished git process into the most specific exception."""

from collections.abc import Iterable, Sequence

from structlog.typing import FilteringBoundLogger

from gitproc.enums import OperationErrorType
from gitproc.errors._result import ExecuteResult
from gitproc.errors._rules import GENERIC_RULES, SPECIFIC_RULES, ErrorRule, RuleMatch
from gitproc.exceptions import (
    GitError,
    GitExecutionError,
    GitFatalError,
    GitUsageError,
    SubmoduleUpdateError,
)
from gitproc.progress import (
    SUBMODULE_FAILURE_PATTERNS,
    HintMessage,
    OperationProgress,
    WarningMessage,
)
from gitproc.utils._logging import get_logger

FATAL_EXIT_CODE = 128
USAGE_EXIT_CODE = 129


def _progress_lines(progress: Sequence[OperationProgress]) -> list[str]:
    lines: list[str] = []
    for event in progress:
        match event:
            case WarningMessage(message=message, severity=OperationErrorType.ERROR):
                lines.extend(line.strip() for line in message.splitlines() if line.strip())
            case HintMessage(message=message):
                lines.append(f"hint: {message}")
            case _:
                pass
    return lines


def _first_match(
    rules: Iterable[ErrorRule],
    lines: Sequence[str],
    result: ExecuteResult,
) -> tuple[ErrorRule, GitError] | None:
    for rule in rules:
        for line in lines:
            groups = rule.match(line)
            if groups is not None:
                return rule, rule.factory(RuleMatch(line, groups, lines, result))
    return None


def _submodule_failure(
    progress: Sequence[OperationProgress], result: ExecuteResult
) -> SubmoduleUpdateError | None:
    for event in progress:
        if not isinstance(event, WarningMessage) or event.severity is not OperationErrorType.ERROR:
            continue
        for pattern in SUBMODULE_FAILURE_PATTERNS:
            found = pattern.search(event.message)
            if found is not None:
                return SubmoduleUpdateError(
                    event.message, path=found.group("path"), result=result
                )
    return None


def _fallback(result: ExecuteResult, lines: Sequence[str]) -> GitError:
    message = lines[0] if lines else f"git exited with code {result.exit_code}"
    if result.exit_code == FATAL_EXIT_CODE:
        return GitFatalError(message, result=result)
    if result.exit_code == USAGE_EXIT_CODE:
        return GitUsageError(message, result=result)
    return GitExecutionError(message, result=result)


def classify(
    result: ExecuteResult,
    *,
    progress: Iterable[OperationProgress] = (),
    logger: FilteringBoundLogger | None = None,
) -> GitError | None:
    """Return the most specific exception describing a git failure.

    Error output lines are matched against the specific rules first, then
    submodule failures reported through progress events, then the generic
    `fatal:` and `usage:` rules, and finally the exit code. Errors and hints
    seen as progress events are matched as well, after the captured error
    output.

    A successful result is only reported as a failure when its progress
    events contain a submodule failure, since git does not always fail the
    command for those.

    Args:
        result: The finished process.
        progress: Events parsed from the process's output.
        logger: Logger for diagnostics.

    Returns:
        The exception to raise, or None if the operation succeeded.
    """
    log = logger if logger is not None else get_logger()
    events = list(progress)

    submodule_error = _submodule_failure(events, result)
    if result.succeeded:
        if submodule_error is not None:
            log.debug("git_error_classified", rule="submodule_failure", exit_code=0)
        return submodule_error

    lines = [*result.stderr_lines, *_progress_lines(events)]

    matched = _first_match(SPECIFIC_RULES, lines, result)
    if matched is None and submodule_error is not None:
        log.debug(
            "git_error_classified", rule="submodule_failure", exit_code=result.exit_code
        )
        return submodule_error
    if matched is None:
        matched = _first_match(GENERIC_RULES, lines, result)

    if matched is None:
        error = _fallback(result, lines)
        log.debug(
            "git_error_classified",
            rule="exit_code",
            exit_code=result.exit_code,
            error_type=type(error).__name__,
        )
        return error

    rule, error = matched
    log.debug(
        "git_error_classified",
        rule=rule.name,
        exit_code=result.exit_code,
        error_type=type(error).__name__,
    )
    return error


def raise_for_result(
    result: ExecuteResult,
    *,
    progress: Iterable[OperationProgress] = (),
    logger: FilteringBoundLogger | None = None,
) -> None:
    """Raise the exception `classify` returns, if any.

    Raises:
        GitError: The most specific failure for the result.
    """
    error = classify(result, progress=progress, logger=logger)
    if error is not None:
        raise error
