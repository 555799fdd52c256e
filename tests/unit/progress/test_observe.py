import threading
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import anyio
import pytest
from structlog.testing import CapturingLogger
from structlog.typing import FilteringBoundLogger

from gitproc.enums import OperationErrorType, OperationKind, PullResult
from gitproc.progress import (
    GenericOperationMessage,
    HintMessage,
    MergeOperationMessage,
    OperationProgress,
    ProgressMonitor,
    ProgressParser,
    RewindingHeadMessage,
    WarningMessage,
    aobserve_progress,
    observe_progress,
    stream_progress_in_background,
    summarize_pull,
)


def events_logged(capturing_logger: CapturingLogger) -> list[str]:
    return [call.kwargs["event"] for call in capturing_logger.calls]


class TestObserveProgress:
    def test_yields_events_and_flushes_at_end(self, logger: FilteringBoundLogger) -> None:
        events = list(observe_progress(["hint: a\nhi", "nt: b"], logger=logger))

        assert events == [HintMessage("a"), HintMessage("b")]

    def test_uses_configured_parser_settings(
        self, logger: FilteringBoundLogger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITPROC_PROGRESS__ENCODING", "latin-1")

        events = list(observe_progress([b"hint: caf\xe9\n"], logger=logger))

        assert events == [HintMessage("café")]

    def test_stops_reading_once_canceled(
        self, logger: FilteringBoundLogger, capturing_logger: CapturingLogger
    ) -> None:
        cancel = threading.Event()
        read: list[str] = []

        def chunks() -> Iterator[str]:
            for chunk in ("hint: a\n", "hint: b", "\nhint: c\n"):
                read.append(chunk)
                if len(read) == 2:
                    cancel.set()
                yield chunk

        events = list(observe_progress(chunks(), cancel=cancel, logger=logger))

        assert events == [HintMessage("a"), HintMessage("b")]
        assert len(read) == 2
        assert "progress_canceled" in events_logged(capturing_logger)

    def test_source_closed_mid_stream(
        self, logger: FilteringBoundLogger, capturing_logger: CapturingLogger
    ) -> None:
        def chunks() -> Iterator[str]:
            yield "hint: partial"
            msg = "I/O operation on closed file"
            raise ValueError(msg)

        events = list(observe_progress(chunks(), logger=logger))

        assert events == [HintMessage("partial")]
        assert "progress_source_closed" in events_logged(capturing_logger)

    def test_other_source_errors_propagate(self, logger: FilteringBoundLogger) -> None:
        def chunks() -> Iterator[str]:
            yield "hint: a\n"
            msg = "boom"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="boom"):
            _ = list(observe_progress(chunks(), logger=logger))

    def test_explicit_parser(self, logger: FilteringBoundLogger) -> None:
        parser = ProgressParser(OperationKind.MERGE, logger=logger)

        events = list(observe_progress(["Fast-forward\n"], parser=parser, logger=logger))

        assert events == [MergeOperationMessage("Fast-forward")]
        assert parser.closed

    def test_malformed_user_config_falls_back_to_defaults(
        self,
        user_config_path: Path,
        logger: FilteringBoundLogger,
        capturing_logger: CapturingLogger,
    ) -> None:
        user_config_path.parent.mkdir(parents=True)
        _ = user_config_path.write_text("[progress\n")

        events = list(observe_progress(["hello\n"], logger=logger))

        assert events == [GenericOperationMessage("hello")]
        assert "config_load_failed" in events_logged(capturing_logger)

    def test_malformed_user_config_without_logger(
        self, user_config_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        user_config_path.parent.mkdir(parents=True)
        _ = user_config_path.write_text("[progress\n")

        events = list(observe_progress(["hello\n"]))

        assert events == [GenericOperationMessage("hello")]
        assert "config_load_failed" in capsys.readouterr().err

    def test_invalid_environment_value_falls_back_to_defaults(
        self,
        logger: FilteringBoundLogger,
        capturing_logger: CapturingLogger,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("GITPROC_PROGRESS__MAX_HELD_LINES", "0")

        events = list(observe_progress(["hint: a\n"], logger=logger))

        assert events == [HintMessage("a")]
        assert "config_load_failed" in events_logged(capturing_logger)


class TestAsyncObserveProgress:
    @pytest.mark.anyio
    async def test_yields_events(self, logger: FilteringBoundLogger) -> None:
        async def chunks() -> AsyncIterator[str]:
            yield "hint: a\n"
            yield "hint: b"

        events = [event async for event in aobserve_progress(chunks(), logger=logger)]

        assert events == [HintMessage("a"), HintMessage("b")]

    @pytest.mark.anyio
    async def test_closed_stream_ends_observation(self, logger: FilteringBoundLogger) -> None:
        async def chunks() -> AsyncIterator[str]:
            yield "hint: a"
            raise anyio.ClosedResourceError

        events = [event async for event in aobserve_progress(chunks(), logger=logger)]

        assert events == [HintMessage("a")]

    @pytest.mark.anyio
    async def test_cancel(self, logger: FilteringBoundLogger) -> None:
        cancel = threading.Event()
        cancel.set()

        async def chunks() -> AsyncIterator[str]:
            yield "hint: a\n"

        events = [
            event async for event in aobserve_progress(chunks(), cancel=cancel, logger=logger)
        ]

        assert events == []


class TestProgressMonitor:
    def test_publishes_to_every_observer(self, logger: FilteringBoundLogger) -> None:
        first: list[OperationProgress] = []
        second: list[OperationProgress] = []
        monitor = ProgressMonitor(observers=[first.append], logger=logger)
        monitor.subscribe(second.append)

        events = monitor.run(["hint: a\nhint: b\n"])

        assert events == first == second == [HintMessage("a"), HintMessage("b")]
        assert not monitor.canceled

    def test_observer_returning_false_cancels(
        self, logger: FilteringBoundLogger, capturing_logger: CapturingLogger
    ) -> None:
        read: list[str] = []

        def chunks() -> Iterator[str]:
            for chunk in ("hint: stop\n", "hint: never\n"):
                read.append(chunk)
                yield chunk

        monitor = ProgressMonitor(
            observers=[lambda event: event != HintMessage("stop")], logger=logger
        )

        events = monitor.run(chunks())

        assert events == [HintMessage("stop")]
        assert monitor.canceled
        assert read == ["hint: stop\n"]
        assert events_logged(capturing_logger).count("progress_cancel_requested") == 1

    def test_shares_cancel_event(self, logger: FilteringBoundLogger) -> None:
        cancel = threading.Event()
        monitor = ProgressMonitor(OperationKind.FETCH, cancel=cancel, logger=logger)

        monitor.cancel()
        monitor.cancel()

        assert monitor.cancel_event is cancel
        assert cancel.is_set()
        assert monitor.run(["hint: a\n"]) == []


class TestStreamProgressInBackground:
    def test_yields_all_events_in_order(self, logger: FilteringBoundLogger) -> None:
        chunks = [f"hint: {index}\n" for index in range(50)]

        events = list(stream_progress_in_background(chunks, queue_size=2, logger=logger))

        assert events == [HintMessage(str(index)) for index in range(50)]

    def test_reraises_source_failure(
        self, logger: FilteringBoundLogger, capturing_logger: CapturingLogger
    ) -> None:
        def chunks() -> Iterator[str]:
            yield "hint: a\n"
            msg = "pipe exploded"
            raise RuntimeError(msg)

        seen: list[OperationProgress] = []
        with pytest.raises(RuntimeError, match="pipe exploded"):
            for event in stream_progress_in_background(chunks(), logger=logger):
                seen.append(event)

        assert seen == [HintMessage("a")]
        assert "progress_producer_failed" in events_logged(capturing_logger)

    def test_leaving_early_stops_producer(self, logger: FilteringBoundLogger) -> None:
        def chunks() -> Iterator[str]:
            while True:
                yield "hint: again\n"

        iterator = stream_progress_in_background(chunks(), queue_size=1, logger=logger)
        assert next(iterator) == HintMessage("again")
        iterator.close()

        assert not any(thread.name == "gitproc-progress" for thread in threading.enumerate())

    def test_malformed_user_config_uses_default_queue(
        self,
        user_config_path: Path,
        logger: FilteringBoundLogger,
        capturing_logger: CapturingLogger,
    ) -> None:
        user_config_path.parent.mkdir(parents=True)
        _ = user_config_path.write_text("[progress\n")
        chunks = [f"hint: {index}\n" for index in range(5)]

        events = list(stream_progress_in_background(chunks, logger=logger))

        assert events == [HintMessage(str(index)) for index in range(5)]
        assert "config_load_failed" in events_logged(capturing_logger)


class TestSummarizePull:
    @pytest.mark.parametrize(
        ("events", "expected"),
        [
            ([], PullResult.UNDEFINED),
            ([MergeOperationMessage("Already up to date.")], PullResult.ALREADY_UP_TO_DATE),
            (
                [MergeOperationMessage("Current branch main is up to date.")],
                PullResult.ALREADY_UP_TO_DATE,
            ),
            (
                [GenericOperationMessage("Updating 5ef3ff1..7072358")],
                PullResult.FAST_FORWARD,
            ),
            ([MergeOperationMessage("Fast-forward")], PullResult.FAST_FORWARD),
            (
                [MergeOperationMessage("Merge made by the 'ort' strategy.")],
                PullResult.NON_FAST_FORWARD,
            ),
            (
                [
                    WarningMessage(
                        "CONFLICT (content): Merge conflict in a.txt", OperationErrorType.ERROR
                    )
                ],
                PullResult.CONFLICT,
            ),
            ([RewindingHeadMessage("First, rewinding head")], PullResult.REBASE),
            (
                [
                    RewindingHeadMessage("First, rewinding head"),
                    WarningMessage("CONFLICT (content): x", OperationErrorType.ERROR),
                ],
                PullResult.REBASE_CONFLICTS,
            ),
            ([WarningMessage("CONFLICT (content): x")], PullResult.UNDEFINED),
        ],
    )
    def test_outcome(self, events: list[OperationProgress], expected: PullResult) -> None:
        assert summarize_pull(events) == expected

    def test_from_parsed_output(self, logger: FilteringBoundLogger) -> None:
        events = observe_progress(
            ["Updating 5ef3ff1..7072358\nFast-forward\n a.txt | 2 +-\n"],
            OperationKind.PULL,
            logger=logger,
        )

        assert summarize_pull(events) == PullResult.FAST_FORWARD
