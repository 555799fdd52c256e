"""Write-once cell for lazily published values."""

import threading
from typing import Final


class WriteOnceCell[T]:
    """A slot that can be filled exactly once and read from any thread.

    Readers see either nothing or the single published value, never a
    partially constructed one. The first writer wins; later writes are
    rejected without raising.
    """

    __slots__: Final = ("_lock", "_value", "_is_set")

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        self._value: T | None = None
        self._is_set: bool = False

    @property
    def is_set(self) -> bool:
        """Whether a value has been published."""
        return self._is_set

    def get(self) -> T | None:
        """Return the published value, or None if nothing was published."""
        with self._lock:
            return self._value

    def set(self, value: T) -> bool:
        """Publish a value.

        Args:
            value: The value to publish.

        Returns:
            True if this call published the value, False if another value
            was already published.
        """
        with self._lock:
            if self._is_set:
                return False
            self._value = value
            self._is_set = True
            return True

    def __repr__(self) -> str:
        return f"WriteOnceCell({self._value!r})" if self._is_set else "WriteOnceCell(<unset>)"
