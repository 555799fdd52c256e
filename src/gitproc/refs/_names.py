"""Reference name validation and canonicalization.

The legality rules follow `git check-ref-format`. A single routine,
`is_legal_name`, is applied to both short and fully qualified names so the
character rules live in one place.
"""

from dataclasses import dataclass
from typing import Final

from gitproc.enums import ReferenceType
from gitproc.exceptions import ReferenceNameError

REFS_PREFIX: Final = "refs/"
HEADS_PREFIX: Final = "refs/heads/"
NOTES_PREFIX: Final = "refs/notes/"
REMOTES_PREFIX: Final = "refs/remotes/"
STASH_CANONICAL: Final = "refs/stash"
TAGS_PREFIX: Final = "refs/tags/"
HEAD_NAME: Final = "HEAD"

BRANCH_PREFIXES: Final = (HEADS_PREFIX, REMOTES_PREFIX)
TAG_PREFIXES: Final = (TAGS_PREFIX,)
ANY_PREFIXES: Final = (REFS_PREFIX,)

_ILLEGAL_CHARACTERS: Final = frozenset("*:?[\\^~")
_LOCK_SUFFIX: Final = ".lock"

# Prefix-to-type lookup, most specific first.
_TYPE_PREFIXES: Final = (
    (HEADS_PREFIX, ReferenceType.HEADS),
    (REMOTES_PREFIX, ReferenceType.REMOTES),
    (TAGS_PREFIX, ReferenceType.TAGS),
    (NOTES_PREFIX, ReferenceType.NOTES),
)


@dataclass(frozen=True, slots=True)
class ParsedName:
    """Canonical and friendly forms of a parsed reference name.

    Attributes:
        canonical_name: Fully qualified name, e.g. "refs/heads/main".
        friendly_name: Canonical name with its family prefix removed.
        reference_type: Family derived from the canonical prefix.
    """

    canonical_name: str
    friendly_name: str
    reference_type: ReferenceType


def is_legal_name(candidate: str | None) -> bool:
    """Check a short or fully qualified name against git's ref rules.

    Args:
        candidate: The name to check.

    Returns:
        True if git would accept the name as a reference name.
    """
    if not candidate or candidate == "@":
        return False
    if candidate[0] == "/" or candidate[-1] in "./":
        return False
    if ".." in candidate or "@{" in candidate:
        return False

    for char in candidate:
        if char <= " " or char == "\x7f" or char in _ILLEGAL_CHARACTERS:
            return False

    for component in candidate.split("/"):
        if not component or component[0] == "." or component.endswith(_LOCK_SUFFIX):
            return False

    return True


def is_legal_fully_qualified_name(
    candidate: str | None,
    prefixes: tuple[str, ...] = ANY_PREFIXES,
) -> bool:
    """Check that a name is fully qualified under one of the given prefixes.

    Args:
        candidate: The name to check.
        prefixes: Accepted prefixes, compared ordinally and case-sensitively.

    Returns:
        True if the name starts with a prefix, has a non-empty remainder and
        is a legal reference name.
    """
    if candidate is None:
        return False
    prefix = _matching_prefix(candidate, prefixes)
    if prefix is None or len(candidate) == len(prefix):
        return False
    return is_legal_name(candidate)


def is_legal_branch_name(candidate: str | None) -> bool:
    """Check for a fully qualified local or remote-tracking branch name."""
    return is_legal_fully_qualified_name(candidate, BRANCH_PREFIXES)


def is_legal_tag_name(candidate: str | None) -> bool:
    """Check for a fully qualified tag name."""
    return is_legal_fully_qualified_name(candidate, TAG_PREFIXES)


def _matching_prefix(candidate: str, prefixes: tuple[str, ...]) -> str | None:
    for prefix in prefixes:
        if candidate.startswith(prefix):
            return prefix
    return None


def decompose_canonical_name(canonical_name: str) -> tuple[str, ReferenceType]:
    """Split a canonical name into its friendly name and family.

    Args:
        canonical_name: A name such as "refs/remotes/origin/main" or "HEAD".

    Returns:
        The friendly name and reference type. Names outside the known
        families keep everything after "refs/" as their friendly name.
    """
    if canonical_name == HEAD_NAME:
        return HEAD_NAME, ReferenceType.HEAD
    if canonical_name == STASH_CANONICAL:
        return "stash", ReferenceType.STASH

    for prefix, reference_type in _TYPE_PREFIXES:
        if canonical_name.startswith(prefix):
            return canonical_name[len(prefix) :], reference_type

    if canonical_name.startswith(REFS_PREFIX):
        return canonical_name[len(REFS_PREFIX) :], ReferenceType.UNKNOWN
    return canonical_name, ReferenceType.UNKNOWN


def compose_canonical_name(friendly_name: str, reference_type: ReferenceType) -> str:
    """Rebuild a canonical name from a friendly name and its family."""
    match reference_type:
        case ReferenceType.HEAD:
            return HEAD_NAME
        case ReferenceType.STASH:
            return STASH_CANONICAL
        case ReferenceType.HEADS:
            return HEADS_PREFIX + friendly_name
        case ReferenceType.REMOTES:
            return REMOTES_PREFIX + friendly_name
        case ReferenceType.TAGS:
            return TAGS_PREFIX + friendly_name
        case ReferenceType.NOTES:
            return NOTES_PREFIX + friendly_name
        case ReferenceType.UNKNOWN:
            return REFS_PREFIX + friendly_name


def parse_name(
    candidate: str,
    *,
    default_prefix: str | None = HEADS_PREFIX,
    prefixes: tuple[str, ...] = ANY_PREFIXES,
    error_type: type[ReferenceNameError] = ReferenceNameError,
) -> ParsedName:
    """Parse a fully qualified or short reference name.

    A fully qualified name is tried first; only names that are not already
    qualified get `default_prefix` prepended.

    Args:
        candidate: The name to parse.
        default_prefix: Prefix used to qualify legal short names, or None to
            accept fully qualified names only.
        prefixes: Prefixes that mark a name as already qualified.
        error_type: Exception raised for illegal names.

    Returns:
        The canonical and friendly forms.

    Raises:
        TypeError: If candidate is None.
        ReferenceNameError: If the name is not legal in either form.
    """
    if candidate is None:  # pyright: ignore[reportUnnecessaryComparison]
        msg = "candidate must not be None"
        raise TypeError(msg)

    if is_legal_fully_qualified_name(candidate, prefixes):
        canonical_name = candidate
    elif (
        default_prefix is not None
        and not candidate.startswith(REFS_PREFIX)
        and is_legal_name(candidate)
    ):
        canonical_name = default_prefix + candidate
    else:
        raise error_type.from_name(candidate)

    friendly_name, reference_type = decompose_canonical_name(canonical_name)
    return ParsedName(canonical_name, friendly_name, reference_type)
