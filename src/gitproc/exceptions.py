"""gitproc exceptions."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Self

from gitproc.enums import PushErrorType, ReferenceType

if TYPE_CHECKING:
    from gitproc.errors._result import ExecuteResult


class GitProcError(Exception):
    """Base exception for gitproc errors."""


# =============================================================================
# Reference Name Exceptions
# =============================================================================


class ReferenceNameError(GitProcError, ValueError):
    """Raised when a string is not a legal reference name.

    Attributes:
        name: The rejected input.
    """

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and the rejected name."""
        super().__init__(message)
        self.name: str = name

    @classmethod
    def from_name(cls, name: str) -> Self:
        """Build the error for a rejected name."""
        msg = f"'{name}' is not a valid {cls._noun}."
        return cls(msg, name=name)

    _noun: ClassVar[str] = "reference name"


class BranchNameError(ReferenceNameError):
    """Raised when a string is not a legal branch name."""

    _noun: ClassVar[str] = "branch name"


class TagNameError(ReferenceNameError):
    """Raised when a string is not a legal tag name."""

    _noun: ClassVar[str] = "tag name"


class ReferenceTypeMismatchError(GitProcError, ValueError):
    """Raised when a reference is built from a name of the wrong family."""

    def __init__(
        self,
        message: str,
        *,
        expected: ReferenceType,
        actual: ReferenceType,
    ) -> None:
        """Initialize with error message and the mismatched types."""
        super().__init__(message)
        self.expected: ReferenceType = expected
        self.actual: ReferenceType = actual


class ReferenceParseError(GitProcError, ValueError):
    """Raised when reference listing output cannot be parsed."""

    def __init__(self, message: str, *, line: str) -> None:
        """Initialize with error message and the offending line."""
        super().__init__(message)
        self.line: str = line


# =============================================================================
# Operation Exceptions
# =============================================================================


class GitError(GitProcError):
    """Base exception for failures of a finished git process.

    Attributes:
        result: The captured process result, when one is available.
        retryable: Whether the caller may reasonably retry the operation.
    """

    retryable: ClassVar[bool] = False

    def __init__(self, message: str, *, result: "ExecuteResult | None" = None) -> None:
        """Initialize with error message and the captured result."""
        super().__init__(message)
        self.result: ExecuteResult | None = result

    @property
    def exit_code(self) -> int | None:
        """Exit code of the failed process."""
        return self.result.exit_code if self.result is not None else None

    @property
    def error_text(self) -> str:
        """Captured standard error of the failed process."""
        return self.result.stderr if self.result is not None else ""


class GitExecutionError(GitError):
    """Git exited with a failure no specific rule recognized."""


class GitFatalError(GitExecutionError):
    """Git failed with a fatal error (exit code 128)."""


class GitUsageError(GitExecutionError):
    """Git rejected its command line (exit code 129)."""


class HookConfigurationError(GitError):
    """A repository hook could not be spawned."""

    def __init__(
        self,
        message: str,
        *,
        hook_path: str | None = None,
        result: "ExecuteResult | None" = None,
    ) -> None:
        """Initialize with error message and the hook path."""
        super().__init__(message, result=result)
        self.hook_path: str | None = hook_path


class HookInteractivityError(GitError):
    """A repository hook tried to read from a terminal."""

    def __init__(
        self,
        message: str,
        *,
        hook_path: str | None = None,
        line_number: int | None = None,
        result: "ExecuteResult | None" = None,
    ) -> None:
        """Initialize with error message and the hook location."""
        super().__init__(message, result=result)
        self.hook_path: str | None = hook_path
        self.line_number: int | None = line_number


class MergeInProgressError(GitError):
    """The operation is blocked by unmerged files from an unfinished merge."""


class NoMergeCandidatesError(GitError):
    """There was nothing to merge, pull or cherry-pick."""


class RemoteRefNotFoundError(GitError):
    """The configured upstream ref does not exist on the remote."""


class MergeFailedError(GitError):
    """No merge strategy could complete the merge."""


class BadRevisionError(GitError):
    """A revision argument did not resolve."""


class MissingObjectError(GitError):
    """A requested object is missing from the object database."""


class ReferenceNotFoundError(GitError):
    """A source refspec did not match any reference."""

    def __init__(
        self,
        message: str,
        *,
        reference: str | None = None,
        result: "ExecuteResult | None" = None,
    ) -> None:
        """Initialize with error message and the unmatched reference."""
        super().__init__(message, result=result)
        self.reference: str | None = reference


class AmbiguousReferenceError(ReferenceNotFoundError):
    """A source refspec matched more than one reference."""


class ReferenceConflictError(GitError):
    """A reference cannot be created because an existing name is in its way.

    Git stores `refs/tags/v1` and `refs/tags/v1/rc` as a file and a
    directory, so one of them blocks the other until it is deleted.

    Attributes:
        reference: The reference git tried to create.
        conflicting: The existing reference in its way.
    """

    def __init__(
        self,
        message: str,
        *,
        reference: str | None = None,
        conflicting: str | None = None,
        result: "ExecuteResult | None" = None,
    ) -> None:
        """Initialize with error message and the two clashing names."""
        super().__init__(message, result=result)
        self.reference: str | None = reference
        self.conflicting: str | None = conflicting


class PushRejectedError(GitError):
    """The remote refused a pushed reference.

    Attributes:
        push_error_type: Why the push was refused.
        reason: The reason git printed, if any.
        local_ref: Local side of the rejected refspec, if known.
        remote_ref: Remote side of the rejected refspec, if known.
    """

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        push_error_type: PushErrorType,
        reason: str | None = None,
        local_ref: str | None = None,
        remote_ref: str | None = None,
        result: "ExecuteResult | None" = None,
    ) -> None:
        """Initialize with error message and the rejection details."""
        super().__init__(message, result=result)
        self.push_error_type: PushErrorType = push_error_type
        self.reason: str | None = reason
        self.local_ref: str | None = local_ref
        self.remote_ref: str | None = remote_ref


class ObjectDatabaseBusyError(GitError):
    """Another process holds a lock on the object database or index."""

    retryable: ClassVar[bool] = True


class SubmoduleUpdateError(GitError):
    """A submodule could not be updated."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        result: "ExecuteResult | None" = None,
    ) -> None:
        """Initialize with error message and the submodule path."""
        super().__init__(message, result=result)
        self.path: str | None = path


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(GitProcError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source
