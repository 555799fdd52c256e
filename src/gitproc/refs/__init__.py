"""Reference names and reference objects.

This package validates and canonicalizes branch, tag and generic reference
names the way git does, and provides identity types that compare by
canonical name across every variant.
"""

from gitproc.refs._comparer import (
    CANONICAL_NAME_COMPARER,
    CanonicalNameComparer,
    CanonicallyNamed,
)
from gitproc.refs._listing import (
    FOR_EACH_REF_FORMAT,
    parse_reference_line,
    references_from_for_each_ref,
)
from gitproc.refs._models import (
    Branch,
    BranchName,
    Reference,
    ReferenceName,
    Tag,
    TagAnnotation,
    TagName,
    parse_reference_name,
)
from gitproc.refs._names import (
    HEADS_PREFIX,
    NOTES_PREFIX,
    REFS_PREFIX,
    REMOTES_PREFIX,
    STASH_CANONICAL,
    TAGS_PREFIX,
    ParsedName,
    compose_canonical_name,
    decompose_canonical_name,
    is_legal_branch_name,
    is_legal_fully_qualified_name,
    is_legal_name,
    is_legal_tag_name,
    parse_name,
)

__all__ = [
    "CANONICAL_NAME_COMPARER",
    "FOR_EACH_REF_FORMAT",
    "HEADS_PREFIX",
    "NOTES_PREFIX",
    "REFS_PREFIX",
    "REMOTES_PREFIX",
    "STASH_CANONICAL",
    "TAGS_PREFIX",
    "Branch",
    "BranchName",
    "CanonicalNameComparer",
    "CanonicallyNamed",
    "ParsedName",
    "Reference",
    "ReferenceName",
    "Tag",
    "TagAnnotation",
    "TagName",
    "compose_canonical_name",
    "decompose_canonical_name",
    "is_legal_branch_name",
    "is_legal_fully_qualified_name",
    "is_legal_name",
    "is_legal_tag_name",
    "parse_name",
    "parse_reference_line",
    "parse_reference_name",
    "references_from_for_each_ref",
]
