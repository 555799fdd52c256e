"""gitproc: a typed client layer over git subprocesses.

Reference names, progress events parsed from git's output while it runs,
and classification of failed git processes into specific exceptions.

Example:
    >>> from gitproc import parse_reference_name
    >>> parse_reference_name("main").canonical_name
    'refs/heads/main'
"""

from gitproc.enums import (
    ObjectType,
    OperationErrorType,
    OperationKind,
    OperationProgressKind,
    PullResult,
    PushErrorType,
    ReferenceType,
)
from gitproc.errors import ExecuteResult, classify, raise_for_result
from gitproc.exceptions import GitError, GitProcError, ReferenceNameError
from gitproc.progress import (
    OperationProgress,
    ProgressMonitor,
    ProgressParser,
    aobserve_progress,
    observe_progress,
    stream_progress_in_background,
)
from gitproc.refs import (
    Branch,
    BranchName,
    Reference,
    ReferenceName,
    Tag,
    TagName,
    is_legal_fully_qualified_name,
    parse_reference_name,
)

__all__ = [
    "Branch",
    "BranchName",
    "ExecuteResult",
    "GitError",
    "GitProcError",
    "ObjectType",
    "OperationErrorType",
    "OperationKind",
    "OperationProgress",
    "OperationProgressKind",
    "ProgressMonitor",
    "ProgressParser",
    "PullResult",
    "PushErrorType",
    "Reference",
    "ReferenceName",
    "ReferenceNameError",
    "ReferenceType",
    "Tag",
    "TagName",
    "aobserve_progress",
    "classify",
    "is_legal_fully_qualified_name",
    "observe_progress",
    "parse_reference_name",
    "raise_for_result",
    "stream_progress_in_background",
]
