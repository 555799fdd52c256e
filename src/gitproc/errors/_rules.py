"""Rules mapping git's error output to specific exceptions.

Each rule looks at one trimmed line of error output at a time. Prefix and
suffix comparisons ignore case, as does the optional regular expression,
which is searched anywhere in the line. Named groups of the expression are
handed to the rule's factory.

Rules are ordered from most to least specific; the first rule matching any
line decides the exception.
"""

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final

from gitproc.enums import PushErrorType
from gitproc.errors._result import ExecuteResult
from gitproc.exceptions import (
    AmbiguousReferenceError,
    BadRevisionError,
    GitError,
    GitFatalError,
    GitUsageError,
    HookConfigurationError,
    HookInteractivityError,
    MergeFailedError,
    MergeInProgressError,
    MissingObjectError,
    NoMergeCandidatesError,
    ObjectDatabaseBusyError,
    PushRejectedError,
    ReferenceConflictError,
    ReferenceNotFoundError,
    RemoteRefNotFoundError,
)


@dataclass(frozen=True, slots=True)
class RuleMatch:
    """A rule that matched, with everything its factory may use.

    Attributes:
        line: The matching line.
        groups: Named groups captured by the rule's expression.
        lines: Every line the classifier examined.
        result: The process result being classified.
    """

    line: str
    groups: Mapping[str, str | None]
    lines: Sequence[str]
    result: ExecuteResult


type ErrorFactory = Callable[[RuleMatch], GitError]


@dataclass(frozen=True, slots=True)
class ErrorRule:
    """Recognizes one kind of failure in a line of error output.

    Attributes:
        name: Identifier used in logs.
        factory: Builds the exception for a matching line.
        prefix: Required start of the line, compared without case.
        suffix: Required end of the line, compared without case.
        pattern: Expression that must be found in the line.
    """

    name: str
    factory: ErrorFactory
    prefix: str | None = None
    suffix: str | None = None
    pattern: re.Pattern[str] | None = field(default=None)

    def match(self, line: str) -> dict[str, str | None] | None:
        """Return the captured groups if the line matches, else None."""
        folded = line.casefold()
        if self.prefix is not None and not folded.startswith(self.prefix.casefold()):
            return None
        if self.suffix is not None and not folded.endswith(self.suffix.casefold()):
            return None
        if self.pattern is None:
            return {}
        found = self.pattern.search(line)
        return found.groupdict() if found is not None else None


def _pattern(expression: str) -> re.Pattern[str]:
    return re.compile(expression, re.IGNORECASE)


def _simple(error_type: type[GitError]) -> ErrorFactory:
    def build(match: RuleMatch) -> GitError:
        return error_type(match.line, result=match.result)

    return build


# =============================================================================
# Hooks
# =============================================================================


def _hook_configuration(match: RuleMatch) -> GitError:
    return HookConfigurationError(
        match.line, hook_path=match.groups.get("hook_path"), result=match.result
    )


def _hook_interactivity(match: RuleMatch) -> GitError:
    line_number = match.groups.get("line_number")
    return HookInteractivityError(
        match.line,
        hook_path=match.groups.get("hook_path"),
        line_number=int(line_number) if line_number else None,
        result=match.result,
    )


HOOK_RULES: Final = (
    ErrorRule(
        "hook_configuration",
        _hook_configuration,
        prefix="error: cannot spawn",
        suffix="No such file or directory",
        pattern=_pattern(r"^error: cannot spawn (?P<hook_path>.+?):\s*No such file"),
    ),
    ErrorRule(
        "hook_interactivity",
        _hook_interactivity,
        suffix="/dev/tty: No such device or address",
        pattern=_pattern(
            r"^(?:(?P<hook_path>[^:]+?):\s*)?(?:line\s+(?P<line_number>\d+):\s*)?"
            r"/dev/tty: No such device or address"
        ),
    ),
)


# =============================================================================
# Merge and pull
# =============================================================================

MERGE_RULES: Final = (
    ErrorRule(
        "unmerged_files",
        _simple(MergeInProgressError),
        suffix=" is not possible because you have unmerged files.",
    ),
    ErrorRule(
        "merge_not_concluded",
        _simple(MergeInProgressError),
        pattern=_pattern(r"You have not concluded your merge"),
    ),
    ErrorRule(
        "unresolved_conflict",
        _simple(MergeInProgressError),
        pattern=_pattern(r"Exiting because of an unresolved conflict"),
    ),
    *(
        ErrorRule("no_merge_candidates", _simple(NoMergeCandidatesError), prefix=prefix)
        for prefix in (
            "There are no candidates for merging among the refs that you just fetched.",
            "You asked to pull from the remote '",
            "There is no tracking information for the current branch.",
            "nothing to commit",
            "The previous cherry-pick is now empty",
        )
    ),
    ErrorRule(
        "remote_ref_not_found",
        _simple(RemoteRefNotFoundError),
        prefix="Your configuration specifies to merge with the ref '",
    ),
    ErrorRule("merge_strategy_failed", _simple(MergeFailedError), prefix="Merge with strategy "),
    ErrorRule(
        "no_merge_strategy",
        _simple(MergeFailedError),
        prefix="No merge strategy handled the merge",
    ),
)


# =============================================================================
# Push
# =============================================================================

PUSH_HINTS: Final = (
    (
        "You cannot update a remote ref that points at a non-commit object,",
        PushErrorType.REF_NEEDS_FORCE,
    ),
    (
        "Updates were rejected because the tag already exists in the remote.",
        PushErrorType.REF_ALREADY_EXISTS,
    ),
    (
        "Updates were rejected because the remote contains work that you do",
        PushErrorType.REF_FETCH_FIRST,
    ),
    (
        "Updates were rejected because a pushed branch tip is behind its remote",
        PushErrorType.CHECKOUT_PULL_PUSH,
    ),
    (
        "Updates were rejected because the tip of your current branch is behind",
        PushErrorType.CURRENT_BEHIND_REMOTE,
    ),
)
"""Hint openings git prints after a rejected push, with the reason they name."""

_HINT_PREFIX: Final = "hint:"


def push_error_type_for_hint(line: str) -> PushErrorType | None:
    """Return the push failure a hint line describes, if it describes one."""
    text = line.strip()
    if text.casefold().startswith(_HINT_PREFIX):
        text = text[len(_HINT_PREFIX) :].strip()
    folded = text.casefold()
    for opening, push_error_type in PUSH_HINTS:
        if folded.startswith(opening.casefold()):
            return push_error_type
    return None


def _hinted_push_error_type(lines: Sequence[str]) -> PushErrorType:
    for line in lines:
        push_error_type = push_error_type_for_hint(line)
        if push_error_type is not None:
            return push_error_type
    return PushErrorType.REJECTED


def _push_rejected(match: RuleMatch) -> GitError:
    return PushRejectedError(
        match.line,
        push_error_type=_hinted_push_error_type(match.lines),
        reason=match.groups.get("reason"),
        local_ref=match.groups.get("local_ref"),
        remote_ref=match.groups.get("remote_ref"),
        result=match.result,
    )


def _remote_rejected(match: RuleMatch) -> GitError:
    return PushRejectedError(
        match.line,
        push_error_type=PushErrorType.REJECTED,
        reason=match.groups.get("reason"),
        local_ref=match.groups.get("local_ref"),
        remote_ref=match.groups.get("remote_ref"),
        result=match.result,
    )


def _push_hint(match: RuleMatch) -> GitError:
    return PushRejectedError(
        match.line,
        push_error_type=_hinted_push_error_type([match.line]),
        result=match.result,
    )


def _reference_not_found(match: RuleMatch) -> GitError:
    return ReferenceNotFoundError(
        match.line, reference=match.groups.get("reference"), result=match.result
    )


def _ambiguous_reference(match: RuleMatch) -> GitError:
    return AmbiguousReferenceError(
        match.line, reference=match.groups.get("reference"), result=match.result
    )


PUSH_RULES: Final = (
    # `git push --porcelain`: "!\tlocal:remote\t[rejected] (reason)"
    ErrorRule(
        "push_rejected_porcelain",
        _push_rejected,
        pattern=_pattern(
            r"^!\s+(?P<local_ref>[^\s:]*):(?P<remote_ref>\S+)\s+\[(?:remote )?rejected\]"
            r"(?:\s+\((?P<reason>[^)]+)\))?"
        ),
    ),
    ErrorRule(
        "push_remote_rejected",
        _remote_rejected,
        pattern=_pattern(
            r"^!\s*\[remote rejected\]\s+(?P<local_ref>\S+)\s+->\s+(?P<remote_ref>\S+)"
            r"(?:\s+\((?P<reason>[^)]+)\))?"
        ),
    ),
    ErrorRule(
        "push_rejected",
        _push_rejected,
        pattern=_pattern(
            r"^!\s*\[rejected\]\s+(?P<local_ref>\S+)\s+->\s+(?P<remote_ref>\S+)"
            r"(?:\s+\((?P<reason>[^)]+)\))?"
        ),
    ),
    *(
        ErrorRule(
            f"push_hint_{push_error_type}",
            _push_hint,
            pattern=_pattern(rf"^(?:hint:\s*)?{re.escape(opening)}"),
        )
        for opening, push_error_type in PUSH_HINTS
    ),
    ErrorRule(
        "refspec_not_found",
        _reference_not_found,
        pattern=_pattern(r"src refspec (?P<reference>\S+) does not match any"),
    ),
    ErrorRule(
        "refspec_ambiguous",
        _ambiguous_reference,
        pattern=_pattern(r"refspec (?P<reference>\S+) matches more than one"),
    ),
)


# =============================================================================
# Object database
# =============================================================================


def _reference_conflict(match: RuleMatch) -> GitError:
    return ReferenceConflictError(
        match.line,
        reference=match.groups.get("reference"),
        conflicting=match.groups.get("conflicting"),
        result=match.result,
    )


OBJECT_DATABASE_RULES: Final = (
    ErrorRule(
        "index_locked",
        _simple(ObjectDatabaseBusyError),
        pattern=_pattern(r"\.lock': File exists"),
    ),
    ErrorRule(
        "another_git_process",
        _simple(ObjectDatabaseBusyError),
        pattern=_pattern(r"Another git process seems to be running"),
    ),
    ErrorRule(
        "lock_file_exists",
        _simple(ObjectDatabaseBusyError),
        pattern=_pattern(r"Unable to create '[^']*\.lock'(?!: Permission denied)"),
    ),
    ErrorRule(
        "reference_conflict",
        _reference_conflict,
        pattern=_pattern(
            r"cannot lock ref '(?P<reference>[^']+)': '(?P<conflicting>[^']+)' exists;"
        ),
    ),
    ErrorRule("bad_revision", _simple(BadRevisionError), prefix="fatal: bad revision '"),
    ErrorRule("bad_object", _simple(MissingObjectError), prefix="fatal: bad object "),
)


SPECIFIC_RULES: Final[tuple[ErrorRule, ...]] = (
    *HOOK_RULES,
    *MERGE_RULES,
    *PUSH_RULES,
    *OBJECT_DATABASE_RULES,
)
"""Rules for failures with a dedicated exception, in precedence order."""

GENERIC_RULES: Final[tuple[ErrorRule, ...]] = (
    ErrorRule("fatal", _simple(GitFatalError), prefix="fatal: "),
    ErrorRule("usage", _simple(GitUsageError), prefix="usage: "),
)
"""Catch-all rules consulted only after every specific rule and progress fact."""
