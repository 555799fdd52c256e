"""Progress events and the incremental parser that produces them.

Example:
    >>> from gitproc.enums import OperationKind
    >>> from gitproc.progress import ProgressParser
    >>> parser = ProgressParser(OperationKind.FETCH)
    >>> [event] = parser.feed("Receiving objects:  50% (2/4)\\r")
    >>> event.completed, event.objects_total
    (0.5, 4)
"""

from gitproc.progress._models import (
    AmbiguousReferenceWarningMessage,
    ApplyingPatchMessage,
    CheckingOutFilesProgress,
    CompressingObjectsProgress,
    CountingObjectsProgress,
    GenericOperationMessage,
    HintMessage,
    MergeOperationMessage,
    OperationError,
    OperationMessage,
    OperationProgress,
    ProgressHandler,
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
    dispatch_progress,
)
from gitproc.progress._observe import (
    CancelFlag,
    ProgressMonitor,
    ProgressObserver,
    aobserve_progress,
    observe_progress,
    stream_progress_in_background,
    summarize_pull,
)
from gitproc.progress._parser import DEFAULT_MAX_HELD_LINES, ProgressParser
from gitproc.progress._recognizers import (
    MERGE_CONFLICT_PATTERNS,
    PROFILES,
    SUBMODULE_FAILURE_PATTERNS,
    LineRecognizer,
    Match,
    MatchStatus,
    PatternRecognizer,
    PrefixRecognizer,
    Recognizer,
    parse_conflict_path,
    profile_for,
)

__all__ = [
    "DEFAULT_MAX_HELD_LINES",
    "MERGE_CONFLICT_PATTERNS",
    "PROFILES",
    "SUBMODULE_FAILURE_PATTERNS",
    "AmbiguousReferenceWarningMessage",
    "ApplyingPatchMessage",
    "CancelFlag",
    "CheckingOutFilesProgress",
    "CompressingObjectsProgress",
    "CountingObjectsProgress",
    "GenericOperationMessage",
    "HintMessage",
    "LineRecognizer",
    "Match",
    "MatchStatus",
    "MergeOperationMessage",
    "OperationError",
    "OperationMessage",
    "OperationProgress",
    "PatternRecognizer",
    "PrefixRecognizer",
    "ProgressHandler",
    "ProgressMonitor",
    "ProgressObserver",
    "ProgressParser",
    "ReceivingObjectsProgress",
    "Recognizer",
    "ResolvingDeltasProgress",
    "RewindingHeadMessage",
    "SubmoduleCheckoutCompleted",
    "SubmoduleCloningInto",
    "SubmoduleMergeCompleted",
    "SubmoduleRebaseCompleted",
    "SubmoduleRegistrationCompleted",
    "SubmoduleStepDone",
    "WaitingForRemoteMessage",
    "WarningMessage",
    "WorkingDirectoryUpdatedMessage",
    "WritingObjectsProgress",
    "aobserve_progress",
    "dispatch_progress",
    "observe_progress",
    "parse_conflict_path",
    "profile_for",
    "stream_progress_in_background",
    "summarize_pull",
]
