"""Recognizers that turn git output lines into progress events.

A recognizer looks at the lines the parser is currently holding and reports
how they relate to the output it knows:

- `NO_MATCH`: the lines are not (the start of) this recognizer's output.
- `INCOMPLETE`: the lines are a strict prefix of a multi-line match.
- `MAYBE_COMPLETE`: the lines form a match that more lines could extend.
- `COMPLETE`: the lines form a match that cannot be extended.

Single-line recognizers only ever answer `NO_MATCH` or `COMPLETE`.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Final, override

from gitproc.enums import OperationErrorType, OperationKind
from gitproc.progress._models import (
    AmbiguousReferenceWarningMessage,
    ApplyingPatchMessage,
    CheckingOutFilesProgress,
    CompressingObjectsProgress,
    CountingObjectsProgress,
    HintMessage,
    MergeOperationMessage,
    OperationProgress,
    ReceivingObjectsProgress,
    ResolvingDeltasProgress,
    RewindingHeadMessage,
    SubmoduleCheckoutCompleted,
    SubmoduleCloningInto,
    SubmoduleMergeCompleted,
    SubmoduleRebaseCompleted,
    SubmoduleRegistrationCompleted,
    SubmoduleStepDone,
    WaitingForRemoteMessage,
    WarningMessage,
    WorkingDirectoryUpdatedMessage,
    WritingObjectsProgress,
)
from gitproc.utils._magnitude import parse_magnitude


class MatchStatus(Enum):
    NO_MATCH = "no_match"
    INCOMPLETE = "incomplete"
    MAYBE_COMPLETE = "maybe_complete"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class Match:
    """Outcome of evaluating a recognizer against held lines.

    Attributes:
        status: How the lines relate to the recognizer's output.
        event: Event for the lines; set for `MAYBE_COMPLETE` and `COMPLETE`.
    """

    status: MatchStatus
    event: OperationProgress | None = None

    @property
    def is_open(self) -> bool:
        """Whether more lines could still change the outcome."""
        return self.status in (MatchStatus.INCOMPLETE, MatchStatus.MAYBE_COMPLETE)

    @property
    def is_match(self) -> bool:
        return self.event is not None


NO_MATCH: Final = Match(MatchStatus.NO_MATCH)
INCOMPLETE: Final = Match(MatchStatus.INCOMPLETE)


class Recognizer(ABC):
    """Classifies held output lines into a progress event."""

    __slots__: Final = ("name",)

    def __init__(self, name: str) -> None:
        self.name: str = name

    @abstractmethod
    def match(self, lines: Sequence[str]) -> Match:
        """Evaluate the held lines, oldest first."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class LineRecognizer(Recognizer):
    """Recognizer for output that always fits on one line."""

    __slots__: Final = ()

    @override
    def match(self, lines: Sequence[str]) -> Match:
        if len(lines) != 1:
            return NO_MATCH
        event = self.recognize(lines[0])
        return Match(MatchStatus.COMPLETE, event) if event is not None else NO_MATCH

    @abstractmethod
    def recognize(self, line: str) -> OperationProgress | None:
        """Return the event for a line, or None."""


type PatternBuilder = Callable[[re.Match[str]], OperationProgress | None]
type PayloadBuilder = Callable[[str], OperationProgress]


class PatternRecognizer(LineRecognizer):
    """Line recognizer driven by regular expressions, tried in order."""

    __slots__: Final = ("_patterns", "_build")

    def __init__(
        self,
        name: str,
        patterns: Sequence[re.Pattern[str]],
        build: PatternBuilder,
    ) -> None:
        super().__init__(name)
        self._patterns: tuple[re.Pattern[str], ...] = tuple(patterns)
        self._build: PatternBuilder = build

    @override
    def recognize(self, line: str) -> OperationProgress | None:
        for pattern in self._patterns:
            found = pattern.search(line)
            if found is not None:
                return self._build(found)
        return None


class PrefixRecognizer(LineRecognizer):
    """Line recognizer for `prefix: payload` lines.

    Lines whose payload is blank are left for other recognizers, so an empty
    `hint:` line still reaches the caller verbatim.
    """

    __slots__: Final = ("_prefixes", "_build", "_keep_prefix")

    def __init__(
        self,
        name: str,
        prefixes: Sequence[str],
        build: PayloadBuilder,
        *,
        keep_prefix: bool = False,
    ) -> None:
        super().__init__(name)
        self._prefixes: tuple[str, ...] = tuple(prefixes)
        self._build: PayloadBuilder = build
        self._keep_prefix: bool = keep_prefix

    @override
    def recognize(self, line: str) -> OperationProgress | None:
        for prefix in self._prefixes:
            if line.startswith(prefix):
                payload = line.strip() if self._keep_prefix else line[len(prefix) :].rstrip()
                return self._build(payload) if payload.strip() else None
        return None


# =============================================================================
# Percentage progress
# =============================================================================

_PERCENT: Final = r":\s+(\d+)%\s+\((\d+)/(\d+)\)"


def _fraction(percent: str) -> float:
    return min(max(int(percent) / 100, 0.0), 1.0)


def _percent_pattern(label: str) -> re.Pattern[str]:
    words = r"\s+".join(label.split())
    return re.compile(rf"^\s*{words}{_PERCENT}")


def _build_checking_out(found: re.Match[str]) -> OperationProgress:
    pct, count, total = found.groups()
    return CheckingOutFilesProgress(_fraction(pct), int(count), int(total))


def _build_compressing(found: re.Match[str]) -> OperationProgress:
    pct, count, total = found.groups()
    return CompressingObjectsProgress(_fraction(pct), int(count), int(total))


def _build_resolving(found: re.Match[str]) -> OperationProgress:
    pct, count, total = found.groups()
    return ResolvingDeltasProgress(_fraction(pct), int(count), int(total))


def _build_writing(found: re.Match[str]) -> OperationProgress:
    pct, count, total = found.groups()
    return WritingObjectsProgress(_fraction(pct), int(count), int(total))


def _build_counting(found: re.Match[str]) -> OperationProgress:
    groups = found.groupdict()
    if groups.get("pct") is not None:
        total = int(groups["total"])
        return CountingObjectsProgress(_fraction(groups["pct"]), int(groups["count"]), total)
    objects_total = int(groups["objects"])
    return CountingObjectsProgress(
        completed=1.0,
        object_count=objects_total,
        object_total=objects_total,
        deltas_total=int(groups["deltas"]),
        objects_reused=int(groups["reused"]),
        deltas_reused=int(groups["deltas_reused"]),
    )


def _build_receiving(found: re.Match[str]) -> OperationProgress:
    groups = found.groupdict()
    read_bytes = read_rate = 0
    if groups.get("bytes") is not None:
        read_bytes = parse_magnitude(groups["bytes"], groups["bytes_unit"])
        read_rate = parse_magnitude(groups["rate"], groups["rate_unit"])
    return ReceivingObjectsProgress(
        completed=_fraction(groups["pct"]),
        objects_read=int(groups["count"]),
        objects_total=int(groups["total"]),
        read_bytes=read_bytes,
        read_rate=read_rate,
    )


CHECKING_OUT_FILES: Final = PatternRecognizer(
    "checking_out_files",
    [_percent_pattern("Checking out files"), _percent_pattern("Updating files")],
    _build_checking_out,
)

COMPRESSING_OBJECTS: Final = PatternRecognizer(
    "compressing_objects",
    [_percent_pattern("Compressing objects")],
    _build_compressing,
)

COUNTING_OBJECTS: Final = PatternRecognizer(
    "counting_objects",
    [
        re.compile(r"^\s*Counting\s+objects:\s+(?P<pct>\d+)%\s+\((?P<count>\d+)/(?P<total>\d+)\)"),
        re.compile(
            r"^\s*(?:Counting\s+objects:\s+)?Total\s+(?P<objects>\d+)\s+\(delta\s+(?P<deltas>\d+)\),?"
            r"\s+reused\s+(?P<reused>\d+)\s+\(delta\s+(?P<deltas_reused>\d+)\)"
        ),
    ],
    _build_counting,
)

RECEIVING_OBJECTS: Final = PatternRecognizer(
    "receiving_objects",
    [
        re.compile(
            r"^\s*Receiving\s+objects:\s+(?P<pct>\d+)%\s+\((?P<count>\d+)/(?P<total>\d+)\),"
            r"\s+(?P<bytes>[\d.]+)\s+(?P<bytes_unit>\w+)\s+\|\s+(?P<rate>[\d.]+)\s+(?P<rate_unit>\w+)/s"
        ),
        re.compile(r"^\s*Receiving\s+objects:\s+(?P<pct>\d+)%\s+\((?P<count>\d+)/(?P<total>\d+)\)"),
    ],
    _build_receiving,
)

RESOLVING_DELTAS: Final = PatternRecognizer(
    "resolving_deltas",
    [_percent_pattern("Resolving deltas")],
    _build_resolving,
)

WRITING_OBJECTS: Final = PatternRecognizer(
    "writing_objects",
    [_percent_pattern("Writing objects")],
    _build_writing,
)


# =============================================================================
# Free-text messages
# =============================================================================

AMBIGUOUS_REFERENCE: Final = PatternRecognizer(
    "ambiguous_reference",
    [re.compile(r"^\s*[Ww]arning:\s+refname\s+'([^']+)'\s+is\s+ambiguous")],
    lambda found: AmbiguousReferenceWarningMessage.from_reference_name(found.group(1)),
)

APPLYING_PATCH: Final = PrefixRecognizer("applying_patch", ["Applying: "], ApplyingPatchMessage)

HINT: Final = PrefixRecognizer("hint", ["hint: "], HintMessage)

REMOTE: Final = PrefixRecognizer("remote", ["remote: "], WaitingForRemoteMessage)

REWINDING_HEAD: Final = PrefixRecognizer(
    "rewinding_head",
    ["First, rewinding head to replay your work on top of it"],
    RewindingHeadMessage,
    keep_prefix=True,
)

MERGE: Final = PatternRecognizer(
    "merge",
    [
        re.compile(
            r"^(?:Merging |Auto-merging |Already up[ -]to[ -]date|Fast-forward|Merge made by the )"
        ),
        re.compile(r"^Current branch \S+ is up to date\."),
    ],
    lambda found: MergeOperationMessage(found.string.strip()),
)

_SEVERITY_PREFIXES: Final = (
    ("error: ", OperationErrorType.ERROR),
    ("fatal: ", OperationErrorType.ERROR),
    ("warning: ", OperationErrorType.WARNING),
    ("usage: ", OperationErrorType.UNKNOWN),
)


class WarningAndErrorRecognizer(LineRecognizer):
    """`error:`, `fatal:`, `warning:` and `usage:` lines."""

    __slots__: Final = ()

    @override
    def recognize(self, line: str) -> OperationProgress | None:
        for prefix, severity in _SEVERITY_PREFIXES:
            if line.startswith(prefix):
                payload = line[len(prefix) :].strip()
                return WarningMessage(payload, severity) if payload else None
        return None


WARNING_AND_ERROR: Final = WarningAndErrorRecognizer("warning_and_error")

PUSH_REJECTED: Final = PatternRecognizer(
    "push_rejected",
    [re.compile(r"^\s*!\s*\[(?:remote )?rejected\]")],
    lambda found: WarningMessage(found.string.strip(), OperationErrorType.ERROR),
)


# =============================================================================
# Submodules
# =============================================================================

SUBMODULE_FAILURE_PATTERNS: Final = (
    re.compile(r"^\s*Submodule path '(?P<path>[^']+)' not initialized"),
    re.compile(r"Unable to find current revision in submodule path '(?P<path>[^']+)'"),
    re.compile(r"Unable to find current [^ ]+ revision in submodule path '(?P<path>[^']+)'"),
    re.compile(r"^\s*Skipping unmerged submodule (?P<path>.+)"),
    re.compile(r"Unable to (?:checkout|merge|rebase) '[^']+' in submodule path '(?P<path>[^']+)'"),
    re.compile(r"Unable to fetch in submodule path '(?P<path>[^']+)'"),
    re.compile(r"Failed to recurse into submodule path '(?P<path>[^']+)'"),
)
"""Submodule failures git reports without failing the whole command."""

SUBMODULE_FAILURE: Final = PatternRecognizer(
    "submodule_failure",
    SUBMODULE_FAILURE_PATTERNS,
    lambda found: WarningMessage(found.string.strip(), OperationErrorType.ERROR),
)

SUBMODULE_CHECKOUT_COMPLETED: Final = PatternRecognizer(
    "submodule_checkout_completed",
    [re.compile(r"^\s*Submodule path '([^']+)': checked out '([^']+)'")],
    lambda found: SubmoduleCheckoutCompleted(found.group(1), found.group(2)),
)

SUBMODULE_MERGE_COMPLETED: Final = PatternRecognizer(
    "submodule_merge_completed",
    [re.compile(r"^\s*Submodule path '([^']+)': merged in '([^']+)'")],
    lambda found: SubmoduleMergeCompleted(found.group(1), found.group(2)),
)

SUBMODULE_REBASE_COMPLETED: Final = PatternRecognizer(
    "submodule_rebase_completed",
    [re.compile(r"^\s*Submodule path '([^']+)': rebased into '([^']+)'")],
    lambda found: SubmoduleRebaseCompleted(found.group(1), found.group(2)),
)

SUBMODULE_CLONING_INTO: Final = PatternRecognizer(
    "submodule_cloning_into",
    [re.compile(r"^\s*Cloning into '([^']+)'")],
    lambda found: SubmoduleCloningInto(found.group(1)),
)

SUBMODULE_STEP_DONE: Final = PatternRecognizer(
    "submodule_step_done",
    [re.compile(r"^done\.\s*$")],
    lambda _: SubmoduleStepDone(),
)

SUBMODULE_REGISTRATION: Final = PatternRecognizer(
    "submodule_registration",
    [re.compile(r"^\s*Submodule '([^']+)' \(([^)]+)\) registered for path '([^']+)'")],
    lambda found: SubmoduleRegistrationCompleted(found.group(1), found.group(2), found.group(3)),
)


# =============================================================================
# Working tree updates and conflicts
# =============================================================================

MERGE_CONFLICT_PATTERNS: Final = (
    re.compile(r"CONFLICT.+Merge conflict in (?P<file>.+)$"),
    re.compile(r"CONFLICT.+delete\): (?P<file>.+) deleted"),
    re.compile(r'CONFLICT.+\): Rename (?:directory )?"?(?P<file>.+?)"?->'),
    re.compile(r"CONFLICT.+: There is a directory.+Adding (?P<file>.+) as"),
    re.compile(r"CONFLICT.+rename split\):.+where to place (?P<file>.+) because"),
    re.compile(r"CONFLICT.+implicit dir rename\):.+: (?P<file>.+).$"),
)


def parse_conflict_path(line: str) -> str | None:
    """Return the path named by a `CONFLICT (...)` line, if any."""
    for pattern in MERGE_CONFLICT_PATTERNS:
        found = pattern.search(line)
        if found is not None:
            return found.group("file")
    return None


WORKING_TREE_UPDATE: Final = PatternRecognizer(
    "working_tree_update",
    [re.compile(r"^\t(?:modified|deleted|new file):\s+\S")],
    lambda found: WorkingDirectoryUpdatedMessage(found.string.strip()),
)

STASH_CONFLICT: Final = PatternRecognizer(
    "stash_conflict",
    MERGE_CONFLICT_PATTERNS,
    lambda found: WorkingDirectoryUpdatedMessage(found.string.strip()),
)


def _join(lines: Sequence[str]) -> str:
    return "\n".join(line.strip() for line in lines)


class MergeConflictRecognizer(Recognizer):
    """A run of `CONFLICT (...)` lines, optionally closed by the failure summary."""

    __slots__: Final = ()

    _CONFLICT: Final = "CONFLICT ("
    _SUMMARY: Final = "Automatic merge failed"

    @override
    def match(self, lines: Sequence[str]) -> Match:
        if not lines[0].startswith(self._CONFLICT):
            return NO_MATCH
        for line in lines[1:-1]:
            if not line.startswith(self._CONFLICT):
                return NO_MATCH

        last = lines[-1]
        event = WarningMessage(_join(lines), OperationErrorType.ERROR)
        if len(lines) > 1 and last.startswith(self._SUMMARY):
            return Match(MatchStatus.COMPLETE, event)
        if last.startswith(self._CONFLICT):
            return Match(MatchStatus.MAYBE_COMPLETE, event)
        return NO_MATCH


class CheckoutConflictRecognizer(Recognizer):
    """Checkout refusing to overwrite local files.

    The block is an `error:` header, one tab-indented path per line, then
    optional advice and a final `Aborting`.
    """

    __slots__: Final = ()

    _HEADERS: Final = (
        "Your local changes to the following files would be overwritten by",
        "The following untracked working tree files would be overwritten by",
        "The following untracked working tree files would be removed by",
        "The following working tree files would be overwritten by sparse checkout update",
        "Cannot update sparse checkout: the following entries are not up to date",
    )

    @override
    def match(self, lines: Sequence[str]) -> Match:
        header = lines[0]
        if not header.startswith("error: ") or not any(h in header for h in self._HEADERS):
            return NO_MATCH

        paths = 0
        advice = False
        for index, line in enumerate(lines[1:], start=1):
            if line.startswith("\t") and not advice:
                paths += 1
            elif line.startswith("Aborting") and paths and index == len(lines) - 1:
                event = WarningMessage(_join(lines)[len("error: ") :], OperationErrorType.ERROR)
                return Match(MatchStatus.COMPLETE, event)
            elif paths and line.startswith("Please "):
                advice = True
            else:
                return NO_MATCH

        if not paths:
            return INCOMPLETE
        event = WarningMessage(_join(lines)[len("error: ") :], OperationErrorType.ERROR)
        return Match(MatchStatus.MAYBE_COMPLETE, event)


MERGE_CONFLICT: Final = MergeConflictRecognizer("merge_conflict")
CHECKOUT_CONFLICT: Final = CheckoutConflictRecognizer("checkout_conflict")


# =============================================================================
# Profiles
# =============================================================================

_TRANSFER: Final = (RECEIVING_OBJECTS, RESOLVING_DELTAS, COUNTING_OBJECTS, COMPRESSING_OBJECTS)

_SUBMODULE: Final = (
    SUBMODULE_FAILURE,
    SUBMODULE_CHECKOUT_COMPLETED,
    SUBMODULE_MERGE_COMPLETED,
    SUBMODULE_REBASE_COMPLETED,
    SUBMODULE_CLONING_INTO,
    SUBMODULE_STEP_DONE,
    SUBMODULE_REGISTRATION,
)

PROFILES: Final[dict[OperationKind, tuple[Recognizer, ...]]] = {
    OperationKind.CLONE: (*_TRANSFER, CHECKING_OUT_FILES, REMOTE, WARNING_AND_ERROR, HINT),
    OperationKind.FETCH: (*_TRANSFER, REMOTE, WARNING_AND_ERROR, HINT),
    OperationKind.PULL: (
        MERGE_CONFLICT,
        CHECKOUT_CONFLICT,
        *_TRANSFER,
        CHECKING_OUT_FILES,
        REMOTE,
        AMBIGUOUS_REFERENCE,
        WARNING_AND_ERROR,
        HINT,
        REWINDING_HEAD,
        APPLYING_PATCH,
        MERGE,
    ),
    OperationKind.PUSH: (
        COMPRESSING_OBJECTS,
        COUNTING_OBJECTS,
        WRITING_OBJECTS,
        PUSH_REJECTED,
        REMOTE,
        WARNING_AND_ERROR,
        HINT,
    ),
    OperationKind.CHECKOUT: (
        CHECKOUT_CONFLICT,
        CHECKING_OUT_FILES,
        AMBIGUOUS_REFERENCE,
        WARNING_AND_ERROR,
        HINT,
    ),
    OperationKind.REBASE: (
        MERGE_CONFLICT,
        CHECKOUT_CONFLICT,
        REWINDING_HEAD,
        APPLYING_PATCH,
        MERGE,
        AMBIGUOUS_REFERENCE,
        WARNING_AND_ERROR,
        HINT,
    ),
    OperationKind.MERGE: (
        MERGE_CONFLICT,
        CHECKOUT_CONFLICT,
        CHECKING_OUT_FILES,
        MERGE,
        AMBIGUOUS_REFERENCE,
        WARNING_AND_ERROR,
        HINT,
    ),
    OperationKind.STASH_APPLY: (
        STASH_CONFLICT,
        WORKING_TREE_UPDATE,
        MERGE,
        WARNING_AND_ERROR,
        HINT,
    ),
    OperationKind.SUBMODULE_UPDATE: (
        *_SUBMODULE,
        *_TRANSFER,
        CHECKING_OUT_FILES,
        REMOTE,
        WARNING_AND_ERROR,
        HINT,
    ),
    OperationKind.GENERIC: (
        MERGE_CONFLICT,
        CHECKOUT_CONFLICT,
        *_SUBMODULE,
        *_TRANSFER,
        CHECKING_OUT_FILES,
        WRITING_OBJECTS,
        PUSH_REJECTED,
        REMOTE,
        AMBIGUOUS_REFERENCE,
        WARNING_AND_ERROR,
        HINT,
        REWINDING_HEAD,
        APPLYING_PATCH,
        MERGE,
    ),
}


def profile_for(operation: OperationKind) -> tuple[Recognizer, ...]:
    """Return the ordered recognizers used for an operation's output."""
    return PROFILES[operation]
