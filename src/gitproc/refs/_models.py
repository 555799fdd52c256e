"""Reference identity types.

Every variant shares `CANONICAL_NAME_COMPARER`, so a `Branch` read from
`for-each-ref`, a `BranchName` parsed from user input and a generic
`ReferenceName` are equal, hash-equal and ordered together whenever their
canonical names match.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Final, NoReturn, Self

from gitproc.enums import ObjectType, ReferenceType
from gitproc.exceptions import (
    BranchNameError,
    ReferenceNameError,
    ReferenceTypeMismatchError,
    TagNameError,
)
from gitproc.refs._comparer import CANONICAL_NAME_COMPARER, CanonicalNameComparer
from gitproc.refs._names import (
    ANY_PREFIXES,
    BRANCH_PREFIXES,
    HEADS_PREFIX,
    REMOTES_PREFIX,
    TAG_PREFIXES,
    TAGS_PREFIX,
    ParsedName,
    parse_name,
)
from gitproc.utils._cell import WriteOnceCell


class ReferenceName:
    """Immutable, fully qualified reference name.

    The generic variant only accepts names already qualified under `refs/`.
    `BranchName` and `TagName` also accept short names.

    Attributes:
        canonical_name: Fully qualified name, the sole basis of identity.
        friendly_name: Canonical name with its family prefix stripped.
        reference_type: Family derived from the canonical prefix.
    """

    __slots__: Final = ("_canonical_name", "_friendly_name", "_reference_type")

    _comparer: ClassVar[CanonicalNameComparer] = CANONICAL_NAME_COMPARER
    _default_prefix: ClassVar[str | None] = None
    _prefixes: ClassVar[tuple[str, ...]] = ANY_PREFIXES
    _error_type: ClassVar[type[ReferenceNameError]] = ReferenceNameError

    _canonical_name: str
    _friendly_name: str
    _reference_type: ReferenceType

    def __init__(self, name: str) -> None:
        parsed = parse_name(
            name,
            default_prefix=self._default_prefix,
            prefixes=self._prefixes,
            error_type=self._error_type,
        )
        self._assign(parsed)

    @classmethod
    def _from_parsed(cls, parsed: ParsedName) -> Self:
        instance = cls.__new__(cls)
        instance._assign(parsed)
        return instance

    def _assign(self, parsed: ParsedName) -> None:
        object.__setattr__(self, "_canonical_name", parsed.canonical_name)
        object.__setattr__(self, "_friendly_name", parsed.friendly_name)
        object.__setattr__(self, "_reference_type", parsed.reference_type)

    def __setattr__(self, name: str, value: Any) -> NoReturn:  # pyright: ignore[reportExplicitAny, reportAny]
        msg = f"{type(self).__name__} is immutable"
        raise AttributeError(msg)

    def __delattr__(self, name: str) -> NoReturn:
        msg = f"{type(self).__name__} is immutable"
        raise AttributeError(msg)

    # Immutable, so copies are the instance itself. Pickling rebuilds through
    # the constructor, which validates the name again.
    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:  # pyright: ignore[reportExplicitAny]
        return self

    def __reduce__(self) -> tuple[Any, ...]:  # pyright: ignore[reportExplicitAny]
        return (type(self), (self._canonical_name,))

    @property
    def canonical_name(self) -> str:
        return self._canonical_name

    @property
    def friendly_name(self) -> str:
        return self._friendly_name

    @property
    def reference_type(self) -> ReferenceType:
        return self._reference_type

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReferenceName):
            return NotImplemented
        return self._comparer.equals(self, other)

    def __hash__(self) -> int:
        return self._comparer.hash(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ReferenceName):
            return NotImplemented
        return self._comparer.compare(self, other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ReferenceName):
            return NotImplemented
        return self._comparer.compare(self, other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ReferenceName):
            return NotImplemented
        return self._comparer.compare(self, other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ReferenceName):
            return NotImplemented
        return self._comparer.compare(self, other) >= 0

    def __str__(self) -> str:
        return self._canonical_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._canonical_name!r})"


def _local_name(reference: ReferenceName) -> str:
    friendly_name = reference.friendly_name
    if reference.canonical_name.startswith(REMOTES_PREFIX):
        separator = friendly_name.find("/")
        if separator > 0:
            return friendly_name[separator + 1 :]
    return friendly_name


def _remote_name(reference: ReferenceName) -> str | None:
    if not reference.canonical_name.startswith(REMOTES_PREFIX):
        return None
    separator = reference.friendly_name.find("/")
    return reference.friendly_name[:separator] if separator > 0 else None


class BranchName(ReferenceName):
    """Local or remote-tracking branch name.

    Short names are qualified under `refs/heads/`. A name that starts with
    `refs/` is never treated as a short name: `BranchName("refs/foo")` raises
    `BranchNameError` instead of becoming `refs/heads/refs/foo`.
    """

    __slots__: Final = ()

    _default_prefix: ClassVar[str | None] = HEADS_PREFIX
    _prefixes: ClassVar[tuple[str, ...]] = BRANCH_PREFIXES
    _error_type: ClassVar[type[ReferenceNameError]] = BranchNameError

    @property
    def local_name(self) -> str:
        """Branch name as a local checkout would see it.

        `refs/remotes/origin/master` gives `master`; local branches return
        their friendly name unchanged.
        """
        return _local_name(self)

    @property
    def remote_name(self) -> str | None:
        """Remote of a remote-tracking branch, None for local branches."""
        return _remote_name(self)

    @property
    def is_remote(self) -> bool:
        return self._reference_type == ReferenceType.REMOTES


class TagName(ReferenceName):
    """Tag name.

    Short names are qualified under `refs/tags/`. As with `BranchName`, a
    name starting with `refs/` outside `refs/tags/` raises `TagNameError`
    rather than being qualified a second time.
    """

    __slots__: Final = ()

    _default_prefix: ClassVar[str | None] = TAGS_PREFIX
    _prefixes: ClassVar[tuple[str, ...]] = TAG_PREFIXES
    _error_type: ClassVar[type[ReferenceNameError]] = TagNameError


def parse_reference_name(candidate: str) -> ReferenceName:
    """Parse user input into the most specific reference name variant.

    Fully qualified names keep their family; legal short names are treated
    as local branches.

    Args:
        candidate: A short name such as "main" or a fully qualified name.

    Returns:
        A `BranchName`, `TagName` or generic `ReferenceName`.

    Raises:
        TypeError: If candidate is None.
        ReferenceNameError: If the name is illegal.
    """
    parsed = parse_name(candidate)
    match parsed.reference_type:
        case ReferenceType.HEADS | ReferenceType.REMOTES:
            return BranchName._from_parsed(parsed)  # pyright: ignore[reportPrivateUsage]
        case ReferenceType.TAGS:
            return TagName._from_parsed(parsed)  # pyright: ignore[reportPrivateUsage]
        case _:
            return ReferenceName._from_parsed(parsed)  # pyright: ignore[reportPrivateUsage]


# =============================================================================
# Reference objects
# =============================================================================


@dataclass(frozen=True, slots=True)
class TagAnnotation:
    """Annotation object of an annotated tag.

    Attributes:
        object_id: Id of the tag object itself.
        target_id: Id of the object the tag points at.
        target_type: Type of the target object.
        message: Full tag message.
        tagger: Tagger identity as printed by git, if any.
    """

    object_id: str
    target_id: str
    target_type: ObjectType
    message: str
    tagger: str | None = None

    @property
    def first_line(self) -> str:
        return self.message.split("\n", 1)[0]


class Reference(ReferenceName):
    """A named pointer to a repository object."""

    __slots__: Final = ("_object_id", "_object_type")

    _reference_types: ClassVar[frozenset[ReferenceType] | None] = None

    _object_id: str
    _object_type: ObjectType

    def __init__(
        self,
        name: str,
        object_id: str,
        object_type: ObjectType = ObjectType.COMMIT,
    ) -> None:
        parsed = parse_name(name, default_prefix=None)
        allowed = self._reference_types
        if allowed is not None and parsed.reference_type not in allowed:
            msg = (
                f"'{name}' is a {parsed.reference_type} reference, "
                f"not a {type(self).__name__.lower()}"
            )
            raise ReferenceTypeMismatchError(
                msg,
                expected=min(allowed),
                actual=parsed.reference_type,
            )
        self._assign(parsed)
        object.__setattr__(self, "_object_id", object_id)
        object.__setattr__(self, "_object_type", object_type)

    @property
    def object_id(self) -> str:
        return self._object_id

    @property
    def object_type(self) -> ObjectType:
        return self._object_type

    def __reduce__(self) -> tuple[Any, ...]:  # pyright: ignore[reportExplicitAny]
        return (type(self), (self._canonical_name, self._object_id, self._object_type))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._canonical_name!r}, {self._object_id!r})"


class Branch(Reference):
    """A branch with its tip commit and optional upstream."""

    __slots__: Final = ("_upstream",)

    _reference_types: ClassVar[frozenset[ReferenceType] | None] = frozenset(
        {ReferenceType.HEADS, ReferenceType.REMOTES}
    )

    _upstream: BranchName | None

    def __init__(
        self,
        name: str,
        object_id: str,
        object_type: ObjectType = ObjectType.COMMIT,
        *,
        upstream: BranchName | None = None,
    ) -> None:
        super().__init__(name, object_id, object_type)
        object.__setattr__(self, "_upstream", upstream)

    def __reduce__(self) -> tuple[Any, ...]:  # pyright: ignore[reportExplicitAny]
        return (*super().__reduce__(), self._upstream)

    def __setstate__(self, upstream: BranchName) -> None:
        object.__setattr__(self, "_upstream", upstream)

    @property
    def upstream(self) -> BranchName | None:
        """Remote-tracking branch this branch follows, if configured."""
        return self._upstream

    @property
    def local_name(self) -> str:
        """Branch name as a local checkout would see it."""
        return _local_name(self)

    @property
    def remote_name(self) -> str | None:
        return _remote_name(self)

    @property
    def is_remote(self) -> bool:
        return self._reference_type == ReferenceType.REMOTES


class Tag(Reference):
    """A tag, optionally annotated.

    The annotation is fetched separately and attached later; it is published
    through a write-once cell so concurrent readers observe either nothing or
    the complete annotation.
    """

    __slots__: Final = ("_annotation",)

    _reference_types: ClassVar[frozenset[ReferenceType] | None] = frozenset(
        {ReferenceType.TAGS}
    )

    _annotation: WriteOnceCell[TagAnnotation]

    def __init__(
        self,
        name: str,
        object_id: str,
        object_type: ObjectType = ObjectType.COMMIT,
    ) -> None:
        super().__init__(name, object_id, object_type)
        object.__setattr__(self, "_annotation", WriteOnceCell())

    def __reduce__(self) -> tuple[Any, ...]:  # pyright: ignore[reportExplicitAny]
        return (*super().__reduce__(), self.annotation)

    def __setstate__(self, annotation: TagAnnotation) -> None:
        _ = self._annotation.set(annotation)

    @property
    def is_annotated(self) -> bool:
        """Whether the tag points at a tag object rather than directly at a commit."""
        return self._object_type == ObjectType.TAG

    @property
    def annotation(self) -> TagAnnotation | None:
        return self._annotation.get()

    def attach_annotation(self, annotation: TagAnnotation) -> bool:
        """Publish the tag's annotation.

        Args:
            annotation: The annotation read for this tag.

        Returns:
            True if this call published it, False if one was already attached.

        Raises:
            ValueError: If the tag is lightweight or the annotation belongs
                to another tag object.
        """
        if not self.is_annotated:
            msg = f"{self._canonical_name} is a lightweight tag"
            raise ValueError(msg)
        if annotation.object_id != self._object_id:
            msg = (
                f"annotation {annotation.object_id} does not belong to "
                f"{self._canonical_name} ({self._object_id})"
            )
            raise ValueError(msg)
        return self._annotation.set(annotation)
