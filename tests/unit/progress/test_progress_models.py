import pytest

from gitproc.enums import OperationErrorType, OperationProgressKind
from gitproc.progress import (
    AmbiguousReferenceWarningMessage,
    CheckingOutFilesProgress,
    CountingObjectsProgress,
    GenericOperationMessage,
    HintMessage,
    OperationError,
    OperationProgress,
    ReceivingObjectsProgress,
    ResolvingDeltasProgress,
    SubmoduleCheckoutCompleted,
    SubmoduleRegistrationCompleted,
    SubmoduleStepDone,
    WarningMessage,
    WritingObjectsProgress,
    dispatch_progress,
)
from gitproc.utils import MIB


class TestPercentageProgress:
    def test_receiving_objects_renders_like_git(self) -> None:
        event = ReceivingObjectsProgress(
            completed=0.23,
            objects_read=920,
            objects_total=4000,
            read_bytes=int(5.68 * MIB),
            read_rate=int(2.53 * MIB),
        )

        assert str(event) == "Receiving objects:  23% (920/4000), 5.68 MiB | 2.53 MiB/s"
        assert event.kind == OperationProgressKind.RECEIVING_OBJECTS

    @pytest.mark.parametrize(
        ("event", "expected"),
        [
            (CheckingOutFilesProgress(1.0, 12, 12), "Checking out files: 100% (12/12)"),
            (CountingObjectsProgress(0.5, 1, 2), "Counting objects:  50% (1/2)"),
            (ResolvingDeltasProgress(0.0, 0, 7), "Resolving deltas:   0% (0/7)"),
            (WritingObjectsProgress(0.07, 7, 100), "Writing objects:   7% (7/100)"),
        ],
    )
    def test_renders_percentage(self, event: OperationProgress, expected: str) -> None:
        assert str(event) == expected

    def test_events_are_frozen(self) -> None:
        event = WritingObjectsProgress(0.5, 1, 2)

        with pytest.raises(AttributeError):
            event.object_count = 2  # pyright: ignore[reportAttributeAccessIssue]


class TestMessages:
    def test_rejects_none_message(self) -> None:
        with pytest.raises(TypeError):
            _ = GenericOperationMessage(None)  # pyright: ignore[reportArgumentType]

    def test_rejects_empty_message(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            _ = HintMessage("")

    def test_ambiguous_reference_message(self) -> None:
        event = AmbiguousReferenceWarningMessage.from_reference_name("main")

        assert event.reference_name == "main"
        assert event.message == "Warning: reference name 'main' is ambiguous."
        assert str(event) == event.message

    def test_warning_exposes_error(self) -> None:
        event = WarningMessage("could not lock", OperationErrorType.ERROR)

        assert event.error == OperationError("could not lock", OperationErrorType.ERROR)
        assert str(event.error) == "error: could not lock"

    def test_warning_defaults_to_warning_severity(self) -> None:
        assert WarningMessage("careful").severity == OperationErrorType.WARNING


class TestOperationError:
    def test_rejects_none_message(self) -> None:
        with pytest.raises(TypeError):
            _ = OperationError(None)  # pyright: ignore[reportArgumentType]

    def test_default_severity(self) -> None:
        assert str(OperationError("odd")) == "unknown: odd"


class TestSubmoduleEvents:
    def test_render(self) -> None:
        assert (
            str(SubmoduleCheckoutCompleted("lib", "abc123"))
            == "Submodule path 'lib': checked out 'abc123'"
        )
        assert str(SubmoduleStepDone()) == "done."
        assert (
            str(SubmoduleRegistrationCompleted("lib", "https://example.com/lib.git", "vendor/lib"))
            == "Submodule 'lib' (https://example.com/lib.git) registered for path 'vendor/lib'"
        )


class TestDispatchProgress:
    def test_calls_handler_for_kind(self) -> None:
        seen: list[OperationProgress] = []
        event = HintMessage("use --force")

        handled = dispatch_progress(event, {OperationProgressKind.HINT_MESSAGE: seen.append})

        assert handled
        assert seen == [event]

    def test_ignores_unhandled_kinds(self) -> None:
        seen: list[OperationProgress] = []

        handled = dispatch_progress(
            SubmoduleStepDone(), {OperationProgressKind.HINT_MESSAGE: seen.append}
        )

        assert not handled
        assert seen == []
