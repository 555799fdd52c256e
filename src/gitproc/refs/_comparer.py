"""Canonical-name comparison shared by every reference variant."""

from typing import Final, Protocol


class CanonicallyNamed(Protocol):
    """Anything identified by a canonical reference name."""

    @property
    def canonical_name(self) -> str: ...


class CanonicalNameComparer:
    """Ordinal, case-sensitive comparison of canonical reference names.

    Friendly names never take part in comparison, so a branch read from
    `for-each-ref` and a name parsed from user input compare equal when they
    canonicalize to the same string.
    """

    __slots__: Final = ()

    def compare(self, left: CanonicallyNamed, right: CanonicallyNamed) -> int:
        """Return a negative, zero or positive number like `cmp`."""
        a, b = left.canonical_name, right.canonical_name
        return (a > b) - (a < b)

    def equals(self, left: CanonicallyNamed, right: CanonicallyNamed) -> bool:
        """Return whether two references share a canonical name."""
        return left.canonical_name == right.canonical_name

    def hash(self, value: CanonicallyNamed) -> int:
        """Return a hash consistent with `equals`."""
        return hash(value.canonical_name)


CANONICAL_NAME_COMPARER: Final = CanonicalNameComparer()
