"""Progress event types.

Every event class carries a class-level `kind` used for dispatch. The family
is closed in the sense that only the parser produces events, but new kinds
are additive: observers must ignore kinds they do not recognize.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import ClassVar, Self

from gitproc.enums import OperationErrorType, OperationProgressKind
from gitproc.utils._magnitude import format_magnitude


def _require_message(message: str | None) -> None:
    if message is None:
        msg = "message must not be None"
        raise TypeError(msg)
    if not message:
        msg = "message must not be empty"
        raise ValueError(msg)


def _percent(completed: float) -> str:
    return f"{round(completed * 100):3d}%"


@dataclass(frozen=True, slots=True)
class OperationError:
    """Error or warning reported while an operation ran.

    Attributes:
        message: Text of the error, never None.
        severity: How serious git considered it.
    """

    message: str
    severity: OperationErrorType = OperationErrorType.UNKNOWN

    def __post_init__(self) -> None:
        if self.message is None:  # pyright: ignore[reportUnnecessaryComparison]
            msg = "message must not be None"
            raise TypeError(msg)

    def __str__(self) -> str:
        return f"{self.severity}: {self.message}"


@dataclass(frozen=True, slots=True)
class OperationProgress:
    """Base of every progress event."""

    kind: ClassVar[OperationProgressKind]


# =============================================================================
# Percentage progress
# =============================================================================


@dataclass(frozen=True, slots=True)
class CheckingOutFilesProgress(OperationProgress):
    """Working tree files being checked out.

    Attributes:
        completed: Fraction done, between 0 and 1.
        file_count: Files checked out so far.
        file_total: Files to check out.
    """

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.CHECKING_OUT_FILES
    prefix: ClassVar[str] = "Checking out files"

    completed: float
    file_count: int
    file_total: int

    def __str__(self) -> str:
        return f"{self.prefix}: {_percent(self.completed)} ({self.file_count}/{self.file_total})"


@dataclass(frozen=True, slots=True)
class CompressingObjectsProgress(OperationProgress):
    """Objects being delta-compressed before sending.

    Attributes:
        completed: Fraction done, between 0 and 1.
        object_count: Objects compressed so far.
        object_total: Objects to compress.
    """

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.COMPRESSING_OBJECTS
    prefix: ClassVar[str] = "Compressing objects"

    completed: float
    object_count: int
    object_total: int

    def __str__(self) -> str:
        return (
            f"{self.prefix}: {_percent(self.completed)} "
            f"({self.object_count}/{self.object_total})"
        )


@dataclass(frozen=True, slots=True)
class CountingObjectsProgress(OperationProgress):
    """Objects being counted, or the pack totals summary.

    A percentage line fills `completed`, `object_count` and `object_total`;
    the `Total N (delta N), reused N (delta N)` summary fills the totals.

    Attributes:
        completed: Fraction done, between 0 and 1.
        object_count: Objects counted so far.
        object_total: Objects to count.
        deltas_total: Deltas in the pack.
        objects_reused: Objects reused from existing packs.
        deltas_reused: Deltas reused from existing packs.
    """

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.COUNTING_OBJECTS
    prefix: ClassVar[str] = "Counting objects"

    completed: float
    object_count: int
    object_total: int
    deltas_total: int = 0
    objects_reused: int = 0
    deltas_reused: int = 0

    def __str__(self) -> str:
        return (
            f"{self.prefix}: {_percent(self.completed)} "
            f"({self.object_count}/{self.object_total})"
        )


@dataclass(frozen=True, slots=True)
class ReceivingObjectsProgress(OperationProgress):
    """Objects being received from a remote.

    Attributes:
        completed: Fraction done, between 0 and 1.
        objects_read: Objects received so far.
        objects_total: Objects to receive.
        read_bytes: Bytes received so far.
        read_rate: Transfer rate in bytes per second.
    """

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.RECEIVING_OBJECTS
    prefix: ClassVar[str] = "Receiving objects"

    completed: float
    objects_read: int
    objects_total: int
    read_bytes: int = 0
    read_rate: int = 0

    @property
    def read_bytes_text(self) -> str:
        return format_magnitude(self.read_bytes)

    @property
    def read_rate_text(self) -> str:
        return f"{format_magnitude(self.read_rate)}/s"

    def __str__(self) -> str:
        return (
            f"{self.prefix}: {_percent(self.completed)} "
            f"({self.objects_read}/{self.objects_total}), "
            f"{self.read_bytes_text} | {self.read_rate_text}"
        )


@dataclass(frozen=True, slots=True)
class ResolvingDeltasProgress(OperationProgress):
    """Received deltas being resolved.

    Attributes:
        completed: Fraction done, between 0 and 1.
        delta_count: Deltas resolved so far.
        delta_total: Deltas to resolve.
    """

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.RESOLVING_DELTAS
    prefix: ClassVar[str] = "Resolving deltas"

    completed: float
    delta_count: int
    delta_total: int

    def __str__(self) -> str:
        return f"{self.prefix}: {_percent(self.completed)} ({self.delta_count}/{self.delta_total})"


@dataclass(frozen=True, slots=True)
class WritingObjectsProgress(OperationProgress):
    """Objects being written to a remote.

    Attributes:
        completed: Fraction done, between 0 and 1.
        object_count: Objects written so far.
        object_total: Objects to write.
    """

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.WRITING_OBJECTS
    prefix: ClassVar[str] = "Writing objects"

    completed: float
    object_count: int
    object_total: int

    def __str__(self) -> str:
        return (
            f"{self.prefix}: {_percent(self.completed)} "
            f"({self.object_count}/{self.object_total})"
        )


# =============================================================================
# Messages
# =============================================================================


@dataclass(frozen=True, slots=True)
class OperationMessage(OperationProgress):
    """Progress event carrying human-readable text.

    Raises:
        TypeError: If message is None.
        ValueError: If message is empty.
    """

    message: str

    def __post_init__(self) -> None:
        _require_message(self.message)

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class AmbiguousReferenceWarningMessage(OperationMessage):
    """A revision argument matched more than one reference."""

    kind: ClassVar[OperationProgressKind] = (
        OperationProgressKind.AMBIGUOUS_REFERENCE_WARNING
    )

    reference_name: str

    @classmethod
    def from_reference_name(cls, reference_name: str) -> Self:
        _require_message(reference_name)
        return cls(
            message=f"Warning: reference name '{reference_name}' is ambiguous.",
            reference_name=reference_name,
        )


@dataclass(frozen=True, slots=True)
class ApplyingPatchMessage(OperationMessage):
    """A commit being replayed during rebase or am."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.APPLYING_PATCH


@dataclass(frozen=True, slots=True)
class GenericOperationMessage(OperationMessage):
    """Output no specific recognizer classified, kept verbatim."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.GENERIC_OPERATION


@dataclass(frozen=True, slots=True)
class HintMessage(OperationMessage):
    """Advice printed after `hint:`."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.HINT_MESSAGE


@dataclass(frozen=True, slots=True)
class MergeOperationMessage(OperationMessage):
    """Merge step or merge outcome."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.MERGE_OPERATION


@dataclass(frozen=True, slots=True)
class RewindingHeadMessage(OperationMessage):
    """Rebase rewinding HEAD before replaying commits."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.REWINDING_HEAD


@dataclass(frozen=True, slots=True)
class WaitingForRemoteMessage(OperationMessage):
    """Output relayed from the remote side after `remote:`."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.WAITING_FOR_REMOTE


@dataclass(frozen=True, slots=True)
class WorkingDirectoryUpdatedMessage(OperationMessage):
    """A working tree file changed while applying a stash."""

    kind: ClassVar[OperationProgressKind] = (
        OperationProgressKind.WORKING_DIRECTORY_UPDATED
    )


@dataclass(frozen=True, slots=True)
class WarningMessage(OperationMessage):
    """An error or warning git reported mid-operation."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.WARNING

    severity: OperationErrorType = OperationErrorType.WARNING

    @property
    def error(self) -> OperationError:
        return OperationError(self.message, self.severity)


# =============================================================================
# Submodule events
# =============================================================================


@dataclass(frozen=True, slots=True)
class SubmoduleCheckoutCompleted(OperationProgress):
    """`Submodule path 'p': checked out 'sha'`."""

    kind: ClassVar[OperationProgressKind] = (
        OperationProgressKind.SUBMODULE_CHECKOUT_COMPLETED
    )

    path: str
    object_id: str

    def __str__(self) -> str:
        return f"Submodule path '{self.path}': checked out '{self.object_id}'"


@dataclass(frozen=True, slots=True)
class SubmoduleMergeCompleted(OperationProgress):
    """`Submodule path 'p': merged in 'sha'`."""

    kind: ClassVar[OperationProgressKind] = OperationProgressKind.SUBMODULE_MERGE_COMPLETED

    path: str
    object_id: str

    def __str__(self) -> str:
        return f"Submodule path '{self.path}': merged in '{self.object_id}'"


@dataclass(frozen=True, slots=True)
class SubmoduleRebaseCompleted(OperationProgress):
    """`Submodule path 'p': rebased into 'sha'`."""

    kind: ClassVar[OperationProgressKind] = (
        OperationProgressKind.SUBMODULE_REBASE_COMPLETED
    )

    path: str
    object_id: str

    def __str__(self) -> str:
        return f"Submodule path '{self.path}': rebased into '{self.object_id}'"


@dataclass(frozen=True, slots=True)
class SubmoduleCloningInto(OperationProgress):
    kind: ClassVar[OperationProgressKind] = OperationProgressKind.SUBMODULE_CLONING_INTO

    path: str

    def __str__(self) -> str:
        return f"Cloning into '{self.path}'..."


@dataclass(frozen=True, slots=True)
class SubmoduleStepDone(OperationProgress):
    kind: ClassVar[OperationProgressKind] = OperationProgressKind.SUBMODULE_STEP_DONE

    def __str__(self) -> str:
        return "done."


@dataclass(frozen=True, slots=True)
class SubmoduleRegistrationCompleted(OperationProgress):
    """`Submodule 'name' (url) registered for path 'path'`."""

    kind: ClassVar[OperationProgressKind] = (
        OperationProgressKind.SUBMODULE_REGISTRATION_COMPLETED
    )

    name: str
    url: str
    path: str

    def __str__(self) -> str:
        return f"Submodule '{self.name}' ({self.url}) registered for path '{self.path}'"


# =============================================================================
# Dispatch
# =============================================================================

type ProgressHandler = Callable[[OperationProgress], None]


def dispatch_progress(
    event: OperationProgress,
    handlers: Mapping[OperationProgressKind, ProgressHandler],
) -> bool:
    """Call the handler registered for the event's kind.

    Kinds without a handler are ignored.

    Returns:
        True if a handler was called.
    """
    handler = handlers.get(event.kind)
    if handler is None:
        return False
    handler(event)
    return True
