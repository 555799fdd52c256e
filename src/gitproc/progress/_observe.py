"""Driving a progress parser from a stream of output chunks.

A stream is any iterable of `str` or `bytes` chunks as read from the git
process. Reading stops when the stream ends, when the cancel event is set, or
when the source raises `OSError`/`ValueError` because it was closed under the
reader; in every case the parser is closed so held text is still reported.
An unreadable configuration falls back to the default progress settings.
"""

import queue
import threading
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Final, Protocol

import anyio
from structlog.typing import FilteringBoundLogger

from gitproc.config import ProgressConfig, load_config
from gitproc.enums import OperationErrorType, OperationKind, PullResult
from gitproc.exceptions import ConfigError
from gitproc.progress._models import (
    GenericOperationMessage,
    MergeOperationMessage,
    OperationProgress,
    RewindingHeadMessage,
    WarningMessage,
)
from gitproc.progress._parser import ProgressParser
from gitproc.utils._logging import get_logger

type Chunk = str | bytes

# An observer returning False asks for the operation to be canceled.
type ProgressObserver = Callable[[OperationProgress], bool | None]

_SOURCE_CLOSED: Final = (OSError, ValueError)
_ASYNC_SOURCE_CLOSED: Final = (
    OSError,
    ValueError,
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
)

_PUT_TIMEOUT: Final = 0.1
_JOIN_TIMEOUT: Final = 5.0


class CancelFlag(Protocol):
    """Anything with `is_set()`, such as `threading.Event` or `anyio.Event`."""

    def is_set(self) -> bool: ...


def _is_canceled(cancel: CancelFlag | None) -> bool:
    return cancel is not None and cancel.is_set()


def _progress_config(logger: FilteringBoundLogger) -> ProgressConfig:
    try:
        return load_config().progress
    except ConfigError as e:
        logger.warning("config_load_failed", error=str(e))
        return ProgressConfig()


def _parser_for(
    operation: OperationKind,
    parser: ProgressParser | None,
    logger: FilteringBoundLogger,
) -> ProgressParser:
    if parser is not None:
        return parser
    return ProgressParser.from_config(operation, _progress_config(logger), logger=logger)


def observe_progress(
    stream: Iterable[Chunk],
    operation: OperationKind = OperationKind.GENERIC,
    *,
    cancel: CancelFlag | None = None,
    parser: ProgressParser | None = None,
    logger: FilteringBoundLogger | None = None,
) -> Iterator[OperationProgress]:
    """Lazily yield progress events parsed from a stream of chunks.

    Args:
        stream: Output chunks in the order the process wrote them.
        operation: Operation whose recognizer profile to use.
        cancel: Checked before every read; once set, reading stops.
        parser: Parser to feed, instead of one built from configuration.
        logger: Logger for diagnostics.

    Yields:
        Events in output order, including those flushed at the end.
    """
    log = logger if logger is not None else get_logger()
    progress_parser = _parser_for(operation, parser, log)
    chunks = iter(stream)

    while True:
        if _is_canceled(cancel):
            log.debug("progress_canceled", operation=str(operation))
            break
        try:
            chunk = next(chunks)
        except StopIteration:
            break
        except _SOURCE_CLOSED as e:
            log.debug("progress_source_closed", operation=str(operation), error=str(e))
            break
        yield from progress_parser.feed(chunk)

    yield from progress_parser.close()


async def aobserve_progress(
    stream: AsyncIterable[Chunk],
    operation: OperationKind = OperationKind.GENERIC,
    *,
    cancel: CancelFlag | None = None,
    parser: ProgressParser | None = None,
    logger: FilteringBoundLogger | None = None,
) -> AsyncIterator[OperationProgress]:
    """Async counterpart of `observe_progress`.

    Works with any async iterable of chunks, such as an anyio
    `TextReceiveStream` over a process's standard error. A stream closed
    under the reader ends observation like cancellation does.
    """
    log = logger if logger is not None else get_logger()
    progress_parser = _parser_for(operation, parser, log)
    chunks = aiter(stream)

    while True:
        if _is_canceled(cancel):
            log.debug("progress_canceled", operation=str(operation))
            break
        try:
            chunk = await anext(chunks)
        except StopAsyncIteration:
            break
        except _ASYNC_SOURCE_CLOSED as e:
            log.debug("progress_source_closed", operation=str(operation), error=str(e))
            break
        for event in progress_parser.feed(chunk):
            yield event

    for event in progress_parser.close():
        yield event


class ProgressMonitor:
    """Fans events out to observers and owns the operation's cancel event.

    Any observer returning `False` cancels the operation: no further output
    is read, and what was already read is still flushed to observers.

    Args:
        operation: Operation whose recognizer profile to use.
        observers: Initial observers, called in order for every event.
        cancel: Event shared with whoever runs the process.
        logger: Logger for diagnostics.
    """

    __slots__: Final = ("_cancel", "_logger", "_observers", "_operation")

    def __init__(
        self,
        operation: OperationKind = OperationKind.GENERIC,
        *,
        observers: Iterable[ProgressObserver] = (),
        cancel: threading.Event | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._operation: OperationKind = operation
        self._observers: list[ProgressObserver] = list(observers)
        self._cancel: threading.Event = cancel if cancel is not None else threading.Event()
        self._logger: FilteringBoundLogger = logger if logger is not None else get_logger()

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    @property
    def canceled(self) -> bool:
        return self._cancel.is_set()

    def subscribe(self, observer: ProgressObserver) -> None:
        self._observers.append(observer)

    def cancel(self) -> None:
        """Request that reading stop before the next chunk."""
        if not self._cancel.is_set():
            self._logger.debug("progress_cancel_requested", operation=str(self._operation))
        self._cancel.set()

    def publish(self, event: OperationProgress) -> None:
        """Deliver one event to every observer."""
        for observer in self._observers:
            if observer(event) is False:
                self.cancel()

    def watch(self, stream: Iterable[Chunk]) -> Iterator[OperationProgress]:
        """Parse a stream, publishing each event before yielding it."""
        for event in observe_progress(
            stream, self._operation, cancel=self._cancel, logger=self._logger
        ):
            self.publish(event)
            yield event

    def run(self, stream: Iterable[Chunk]) -> list[OperationProgress]:
        """Parse a whole stream and return every event published."""
        return list(self.watch(stream))


@dataclass(frozen=True, slots=True)
class _SourceFailure:
    error: Exception


def stream_progress_in_background(  # noqa: PLR0913
    stream: Iterable[Chunk],
    operation: OperationKind = OperationKind.GENERIC,
    *,
    queue_size: int | None = None,
    cancel: CancelFlag | None = None,
    parser: ProgressParser | None = None,
    logger: FilteringBoundLogger | None = None,
) -> Iterator[OperationProgress]:
    """Parse a stream on a producer thread and yield its events here.

    The producer hands events over through a bounded `queue.Queue`, so a slow
    consumer blocks the producer rather than buffering without limit. An
    exception raised by the source is re-raised from this iterator. Leaving
    the iterator early stops the producer.

    Args:
        stream: Output chunks, read on the producer thread.
        operation: Operation whose recognizer profile to use.
        queue_size: Queue capacity; defaults to the configured value.
        cancel: Checked by the producer before every read.
        parser: Parser to feed, instead of one built from configuration.
        logger: Logger for diagnostics.

    Yields:
        Events in output order.
    """
    log = logger if logger is not None else get_logger()
    config = _progress_config(log)
    if parser is None:
        parser = ProgressParser.from_config(operation, config, logger=log)
    events: queue.Queue[OperationProgress | _SourceFailure | None] = queue.Queue(
        maxsize=queue_size if queue_size is not None else config.queue_size
    )
    stop = threading.Event()

    def put(item: OperationProgress | _SourceFailure | None) -> bool:
        while not stop.is_set():
            try:
                events.put(item, timeout=_PUT_TIMEOUT)
            except queue.Full:
                continue
            return True
        return False

    def produce() -> None:
        try:
            for event in observe_progress(
                stream, operation, cancel=cancel, parser=parser, logger=log
            ):
                if not put(event):
                    return
        except Exception as e:  # noqa: BLE001
            log.debug("progress_producer_failed", operation=str(operation), error=str(e))
            put(_SourceFailure(e))
            return
        put(None)

    producer = threading.Thread(target=produce, name="gitproc-progress", daemon=True)
    producer.start()
    try:
        while True:
            item = events.get()
            if item is None:
                break
            if isinstance(item, _SourceFailure):
                raise item.error
            yield item
    finally:
        stop.set()
        producer.join(timeout=_JOIN_TIMEOUT)


def summarize_pull(events: Iterable[OperationProgress]) -> PullResult:
    """Derive the outcome of a pull from its progress events.

    A rewinding-head message marks the pull as a rebase, which turns an
    undecided result into `REBASE` and a conflict into `REBASE_CONFLICTS`.
    """
    result = PullResult.UNDEFINED
    is_rebase = False

    for event in events:
        match event:
            case RewindingHeadMessage():
                is_rebase = True
            case WarningMessage(message=message, severity=OperationErrorType.ERROR) if (
                message.startswith(("CONFLICT", "Automatic merge failed"))
            ):
                result = PullResult.CONFLICT
            case GenericOperationMessage(message=message) if message.startswith("Updating "):
                # git prints "Updating a..b" before a fast-forward checkout
                result = PullResult.FAST_FORWARD
            case MergeOperationMessage(message=message):
                if message.startswith("Already up") or (
                    message.startswith("Current branch ") and message.endswith(" is up to date.")
                ):
                    result = PullResult.ALREADY_UP_TO_DATE
                elif message.startswith("Fast-forward"):
                    result = PullResult.FAST_FORWARD
                elif message.startswith("Merge made by the"):
                    result = PullResult.NON_FAST_FORWARD
            case _:
                pass

    if is_rebase:
        if result is PullResult.UNDEFINED:
            return PullResult.REBASE
        if result is PullResult.CONFLICT:
            return PullResult.REBASE_CONFLICTS
    return result
