import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from structlog.testing import CapturingLogger
from structlog.typing import FilteringBoundLogger

from gitproc.utils import reset_logger


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def user_config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Keep tests away from the real user config file and GITPROC_* variables."""
    for key in list(os.environ):
        if key.startswith("GITPROC_"):
            monkeypatch.delenv(key)

    path = tmp_path / "user-config" / "config.toml"
    monkeypatch.setattr("gitproc.config._load.get_user_config_path", lambda: path)
    reset_logger()
    yield path
    reset_logger()


@pytest.fixture
def capturing_logger() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture
def logger(capturing_logger: CapturingLogger) -> FilteringBoundLogger:
    """Debug-level logger whose calls are recorded by `capturing_logger`."""
    return structlog.wrap_logger(
        capturing_logger,
        processors=[],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
    )
