"""Enumeration types for gitproc."""

from enum import StrEnum


class ReferenceType(StrEnum):
    """Reference families, derived from the canonical name prefix."""

    HEADS = "heads"
    REMOTES = "remotes"
    TAGS = "tags"
    NOTES = "notes"
    STASH = "stash"
    HEAD = "head"
    UNKNOWN = "unknown"


class ObjectType(StrEnum):
    """Git object types as printed by `%(objecttype)`."""

    BLOB = "blob"
    COMMIT = "commit"
    TAG = "tag"
    TREE = "tree"
    UNKNOWN = "unknown"


class OperationKind(StrEnum):
    """Long-running git operations with a dedicated progress profile."""

    CHECKOUT = "checkout"
    CLONE = "clone"
    FETCH = "fetch"
    GENERIC = "generic"
    MERGE = "merge"
    PULL = "pull"
    PUSH = "push"
    REBASE = "rebase"
    STASH_APPLY = "stash_apply"
    SUBMODULE_UPDATE = "submodule_update"


class OperationProgressKind(StrEnum):
    """Discriminator for progress events.

    New members may be added; observers must ignore kinds they do not know.
    """

    AMBIGUOUS_REFERENCE_WARNING = "ambiguous_reference_warning"
    APPLYING_PATCH = "applying_patch"
    CHECKING_OUT_FILES = "checking_out_files"
    COMPRESSING_OBJECTS = "compressing_objects"
    COUNTING_OBJECTS = "counting_objects"
    GENERIC_OPERATION = "generic_operation"
    HINT_MESSAGE = "hint_message"
    MERGE_OPERATION = "merge_operation"
    RECEIVING_OBJECTS = "receiving_objects"
    RESOLVING_DELTAS = "resolving_deltas"
    REWINDING_HEAD = "rewinding_head"
    SUBMODULE_CHECKOUT_COMPLETED = "submodule_checkout_completed"
    SUBMODULE_CLONING_INTO = "submodule_cloning_into"
    SUBMODULE_MERGE_COMPLETED = "submodule_merge_completed"
    SUBMODULE_REBASE_COMPLETED = "submodule_rebase_completed"
    SUBMODULE_REGISTRATION_COMPLETED = "submodule_registration_completed"
    SUBMODULE_STEP_DONE = "submodule_step_done"
    WAITING_FOR_REMOTE = "waiting_for_remote"
    WARNING = "warning"
    WORKING_DIRECTORY_UPDATED = "working_directory_updated"
    WRITING_OBJECTS = "writing_objects"


class OperationErrorType(StrEnum):
    """Severity of an error or warning reported during an operation."""

    UNKNOWN = "unknown"
    ERROR = "error"
    WARNING = "warning"


class PushErrorType(StrEnum):
    """Reasons a remote refuses a pushed reference."""

    REJECTED = "rejected"
    CURRENT_BEHIND_REMOTE = "current_behind_remote"
    REF_NEEDS_FORCE = "ref_needs_force"
    CHECKOUT_PULL_PUSH = "checkout_pull_push"
    REF_FETCH_FIRST = "ref_fetch_first"
    REF_ALREADY_EXISTS = "ref_already_exists"


class PullResult(StrEnum):
    """Outcome of a pull, summarized from its progress events."""

    UNDEFINED = "undefined"
    CONFLICT = "conflict"
    FAST_FORWARD = "fast_forward"
    ALREADY_UP_TO_DATE = "already_up_to_date"
    NON_FAST_FORWARD = "non_fast_forward"
    REBASE = "rebase"
    REBASE_CONFLICTS = "rebase_conflicts"
