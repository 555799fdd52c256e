"""Reading references from `git for-each-ref` output."""

from typing import Final

from gitproc.enums import ObjectType, ReferenceType
from gitproc.exceptions import ReferenceNameError, ReferenceParseError
from gitproc.refs._models import Branch, BranchName, Reference, Tag
from gitproc.refs._names import decompose_canonical_name

FOR_EACH_REF_FORMAT: Final = "--format=%(objectname) %(objecttype) %(refname) %(upstream)"
"""Argument command builders pass to `git for-each-ref` for this parser."""


def _parse_object_type(value: str) -> ObjectType:
    try:
        return ObjectType(value)
    except ValueError:
        return ObjectType.UNKNOWN


def parse_reference_line(line: str) -> Reference:
    """Parse one `for-each-ref` line produced with `FOR_EACH_REF_FORMAT`.

    Args:
        line: A line such as "<sha> commit refs/heads/main refs/remotes/origin/main".

    Returns:
        A `Branch`, `Tag` or generic `Reference`.

    Raises:
        ReferenceParseError: If the line is malformed or names an illegal ref.
    """
    parts = line.rstrip("\r\n").split(" ")
    if len(parts) not in (3, 4) or not parts[0] or not parts[2]:
        msg = f"Unexpected for-each-ref line: {line!r}"
        raise ReferenceParseError(msg, line=line)

    object_id, object_type_text, canonical_name = parts[0], parts[1], parts[2]
    upstream_text = parts[3] if len(parts) == 4 else ""  # noqa: PLR2004
    object_type = _parse_object_type(object_type_text)

    try:
        _, reference_type = decompose_canonical_name(canonical_name)
        match reference_type:
            case ReferenceType.HEADS | ReferenceType.REMOTES:
                upstream = BranchName(upstream_text) if upstream_text else None
                return Branch(canonical_name, object_id, object_type, upstream=upstream)
            case ReferenceType.TAGS:
                return Tag(canonical_name, object_id, object_type)
            case _:
                return Reference(canonical_name, object_id, object_type)
    except ReferenceNameError as e:
        msg = f"Illegal reference name in for-each-ref line: {line!r}"
        raise ReferenceParseError(msg, line=line) from e


def references_from_for_each_ref(text: str) -> list[Reference]:
    """Parse the complete output of `git for-each-ref`.

    Blank lines are skipped; order follows the output.
    """
    return [parse_reference_line(line) for line in text.splitlines() if line.strip()]
