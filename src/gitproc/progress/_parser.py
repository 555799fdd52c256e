"""Incremental parser for git progress output.

The parser is fed raw chunks as the process writes them and returns events
as soon as they can be decided. Text is split into lines on `\\n` and `\\r`
(git rewrites progress lines in place with carriage returns); a line is only
classified once its terminator has arrived, so where chunk boundaries fall
never changes the events produced.

Multi-line output (conflict blocks) is held while any recognizer reports an
open match. The longest complete match wins; among matches covering the same
number of lines, the recognizer listed first in the operation's profile wins.
Lines that no recognizer completes are emitted verbatim as
`GenericOperationMessage`.
Lines holding only whitespace carry no output and produce no event; they
are not recognized or held, so they never split a multi-line block either.
"""

import codecs
import re
from collections import deque
from collections.abc import Iterable
from typing import Final, Self

from structlog.typing import FilteringBoundLogger

from gitproc.config._models import ProgressConfig
from gitproc.enums import OperationKind
from gitproc.progress._models import GenericOperationMessage, OperationProgress
from gitproc.progress._recognizers import Match, MatchStatus, Recognizer, profile_for
from gitproc.utils._logging import get_logger

_TERMINATOR: Final = re.compile(r"\r\n|\r|\n")

DEFAULT_MAX_HELD_LINES: Final = 256


class ProgressParser:
    """Classifies one operation's output into progress events.

    A parser instance belongs to a single operation and is not shared;
    `feed` and `close` must be called from the thread reading the output.

    Args:
        operation: Operation whose recognizer profile to use.
        recognizers: Explicit ordered recognizers, overriding the profile.
        encoding: Encoding used to decode byte chunks.
        errors: Decoder error handling for byte chunks.
        max_held_lines: Upper bound on lines held for one multi-line match.
        logger: Logger for diagnostics; defaults to the package logger.
    """

    __slots__: Final = (
        "_best",
        "_candidates",
        "_closed",
        "_decoder",
        "_event_count",
        "_held",
        "_logger",
        "_max_held_lines",
        "_pending",
        "_recognizers",
        "_skip_newline",
    )

    def __init__(  # noqa: PLR0913
        self,
        operation: OperationKind = OperationKind.GENERIC,
        *,
        recognizers: Iterable[Recognizer] | None = None,
        encoding: str = "utf-8",
        errors: str = "replace",
        max_held_lines: int = DEFAULT_MAX_HELD_LINES,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._recognizers: tuple[Recognizer, ...] = (
            tuple(recognizers) if recognizers is not None else profile_for(operation)
        )
        self._decoder: codecs.IncrementalDecoder = codecs.getincrementaldecoder(encoding)(
            errors=errors
        )
        self._max_held_lines: int = max(1, max_held_lines)
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else get_logger()
        ).bind(operation=str(operation))

        self._pending: str = ""
        self._skip_newline: bool = False
        self._held: list[str] = []
        self._candidates: tuple[Recognizer, ...] = ()
        self._best: tuple[OperationProgress, int] | None = None
        self._closed: bool = False
        self._event_count: int = 0

    @classmethod
    def from_config(
        cls,
        operation: OperationKind,
        config: ProgressConfig,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Create a parser using the progress configuration section."""
        return cls(
            operation,
            encoding=config.encoding,
            errors=config.errors,
            max_held_lines=config.max_held_lines,
            logger=logger,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_pending_text(self) -> bool:
        """Whether text is buffered that has not produced an event yet."""
        return bool(self._pending.strip() or self._held)

    def feed(self, chunk: str | bytes) -> list[OperationProgress]:
        """Consume the next chunk of output.

        Args:
            chunk: Text or bytes exactly as read from the process.

        Returns:
            Events decided by this chunk, in output order.

        Raises:
            RuntimeError: If the parser was already closed.
        """
        if self._closed:
            msg = "Cannot feed a closed progress parser"
            raise RuntimeError(msg)

        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        events: list[OperationProgress] = []
        self._drain(deque(self._split(text)), events)
        self._event_count += len(events)
        return events

    def close(self) -> list[OperationProgress]:
        """Signal end of output and flush everything still buffered.

        Unterminated text is classified as a final line; held multi-line
        matches resolve to the longest complete match. Calling `close` again
        returns nothing.

        Returns:
            The remaining events, in output order.
        """
        if self._closed:
            return []
        self._closed = True

        events: list[OperationProgress] = []
        lines = deque(self._split(self._decoder.decode(b"", final=True)))
        tail, self._pending = self._pending, ""
        if tail.strip():
            lines.append(tail)
        self._drain(lines, events)

        while self._held:
            self._resolve(events, lines)
            self._drain(lines, events)

        self._event_count += len(events)
        self._logger.debug("progress_parser_closed", events=self._event_count)
        return events

    def _split(self, text: str) -> list[str]:
        if not text:
            return []

        lines: list[str] = []
        start = 1 if self._skip_newline and text.startswith("\n") else 0
        self._skip_newline = False

        for found in _TERMINATOR.finditer(text, start):
            lines.append(self._pending + text[start : found.start()])
            self._pending = ""
            start = found.end()
            # A "\r" ending the chunk may be the first half of "\r\n".
            self._skip_newline = start == len(text) and found.group() == "\r"

        self._pending += text[start:]
        return lines

    def _drain(self, lines: deque[str], events: list[OperationProgress]) -> None:
        while lines:
            line = lines.popleft()
            if line.strip():
                self._step(line, events, lines)

    def _step(self, line: str, events: list[OperationProgress], lines: deque[str]) -> None:
        candidates = self._candidates if self._held else self._recognizers
        held = [*self._held, line]

        accepted: list[tuple[Recognizer, Match]] = []
        for recognizer in candidates:
            result = recognizer.match(held)
            if result.status is not MatchStatus.NO_MATCH:
                accepted.append((recognizer, result))

        if not accepted:
            if self._held:
                lines.appendleft(line)
                self._resolve(events, lines)
            else:
                events.append(GenericOperationMessage(line))
            return

        self._held = held
        # Candidates keep profile order, so the first match is the tie-break winner.
        for _, result in accepted:
            if result.event is not None:
                self._best = (result.event, len(held))
                break

        self._candidates = tuple(recognizer for recognizer, result in accepted if result.is_open)
        if not self._candidates:
            self._resolve(events, lines)
        elif len(held) >= self._max_held_lines:
            self._logger.warning(
                "progress_match_truncated",
                held_lines=len(held),
                candidates=[recognizer.name for recognizer in self._candidates],
            )
            self._resolve(events, lines)

    def _resolve(self, events: list[OperationProgress], lines: deque[str]) -> None:
        held, best = self._held, self._best
        self._held = []
        self._candidates = ()
        self._best = None

        if best is None:
            events.append(GenericOperationMessage(held[0]))
            leftover = held[1:]
        else:
            event, covered = best
            events.append(event)
            leftover = held[covered:]

        lines.extendleft(reversed(leftover))
