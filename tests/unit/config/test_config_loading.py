# pyright: reportAny=false, reportUnknownArgumentType=false
from pathlib import Path

import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from gitproc.config import (
    DEFAULT_CONFIG,
    GitProcConfig,
    LogFormat,
    LogLevel,
    deep_merge,
    load_config,
    parse_env_value,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from gitproc.exceptions import ConfigLoadError, ConfigValidationError


class TestReadTomlFile:
    def test_parses_valid_toml(self, fs: FakeFilesystem) -> None:
        path = Path("/test/config.toml")
        fs.create_file(path, contents='[progress]\nencoding = "latin-1"\n')

        assert read_toml_file(path) == {"progress": {"encoding": "latin-1"}}

    def test_raises_file_not_found_for_missing_file(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            _ = read_toml_file(Path("/test/missing.toml"))

    def test_raises_config_load_error_with_location(self, fs: FakeFilesystem) -> None:
        path = Path("/test/invalid.toml")
        fs.create_file(path, contents='[valid]\nkey = "value"\n\n[invalid section\n')

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)

        error = exc_info.value
        assert error.path == path
        assert error.line == 4
        assert error.column is not None
        assert error.__cause__ is not None

    def test_raises_config_load_error_for_truncated_file(self, fs: FakeFilesystem) -> None:
        path = Path("/test/truncated.toml")
        fs.create_file(path, contents="[progress\n")

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)

        assert exc_info.value.path == path
        assert exc_info.value.line == 1


class TestDeepMerge:
    def test_merges_nested_tables(self) -> None:
        base = {"logging": {"level": "warning", "format": "json"}}
        override = {"logging": {"level": "debug"}}

        assert deep_merge(base, override) == {"logging": {"level": "debug", "format": "json"}}

    def test_replaces_lists_and_scalars(self) -> None:
        base = {"items": [1, 2], "name": "a"}

        assert deep_merge(base, {"items": [3], "name": "b"}) == {"items": [3], "name": "b"}

    def test_does_not_mutate_inputs(self) -> None:
        base = {"progress": {"queue_size": 1}}
        override = {"progress": {"queue_size": 2}}

        merged = deep_merge(base, override)
        merged["progress"]["queue_size"] = 3

        assert base == {"progress": {"queue_size": 1}}
        assert override == {"progress": {"queue_size": 2}}


class TestEnvironment:
    def test_set_nested_key_creates_tables(self) -> None:
        data: dict[str, object] = {}

        set_nested_key(data, "progress.queue_size", 64)

        assert data == {"progress": {"queue_size": 64}}

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("FALSE", False),
            ("512", 512),
            ("0.5", 0.5),
            ('["a", "b"]', ["a", "b"]),
            ('{"a": 1}', {"a": 1}),
            ("utf-8", "utf-8"),
            ("[not json", "[not json"),
        ],
    )
    def test_parse_env_value(self, raw: str, expected: object) -> None:
        assert parse_env_value(raw) == expected

    def test_parse_env_vars_nests_and_lowercases(self) -> None:
        environ = {
            "GITPROC_PROGRESS__QUEUE_SIZE": "64",
            "GITPROC_LOGGING__FORMAT": "text",
            "GITPROC_DEBUG": "1",
            "GITPROC_LOG_LEVEL": "debug",
            "OTHER_VALUE": "x",
        }

        assert parse_env_vars(environ=environ) == {
            "progress": {"queue_size": 64},
            "logging": {"format": "text"},
        }


class TestLoadConfig:
    def test_defaults(self) -> None:
        config = load_config()

        assert config == GitProcConfig()
        assert config.logging.level == LogLevel.WARNING
        assert config.logging.format == LogFormat.JSON
        assert config.progress.encoding == DEFAULT_CONFIG["progress"]["encoding"]
        assert config.progress.max_held_lines == 256
        assert config.progress.queue_size == 1024

    def test_precedence(
        self,
        tmp_path: Path,
        user_config_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        user_config_path.parent.mkdir(parents=True)
        _ = user_config_path.write_text(
            '[logging]\nlevel = "info"\nformat = "text"\n[progress]\nqueue_size = 10\n'
        )
        explicit = tmp_path / "explicit.toml"
        _ = explicit.write_text("[progress]\nqueue_size = 20\nmax_held_lines = 5\n")
        monkeypatch.setenv("GITPROC_PROGRESS__MAX_HELD_LINES", "7")

        config = load_config(explicit, overrides={"logging": {"level": "error"}})

        assert config.logging.level == LogLevel.ERROR
        assert config.logging.format == LogFormat.TEXT
        assert config.progress.queue_size == 20
        assert config.progress.max_held_lines == 7

    def test_sources_can_be_skipped(
        self, user_config_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        user_config_path.parent.mkdir(parents=True)
        _ = user_config_path.write_text("[progress]\nqueue_size = 10\n")
        monkeypatch.setenv("GITPROC_PROGRESS__MAX_HELD_LINES", "7")

        config = load_config(include_user=False, include_env=False)

        assert config.progress.queue_size == 1024
        assert config.progress.max_held_lines == 256

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = load_config(tmp_path / "missing.toml")

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = load_config(overrides={"progress": {"queue_size": 0}})

        error = exc_info.value
        assert error.key == "progress.queue_size"
        assert error.value == 0
        assert error.source == "overrides"

    def test_invalid_enum_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITPROC_LOGGING__LEVEL", "chatty")

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = load_config()

        assert exc_info.value.key == "logging.level"
        assert exc_info.value.source == "env"

    def test_unknown_keys_are_ignored(self) -> None:
        config = load_config(overrides={"progress": {"colour": "blue"}, "extra": {"a": 1}})

        assert config == GitProcConfig()

    def test_config_is_frozen(self) -> None:
        config = load_config()

        with pytest.raises(ValueError, match="frozen"):
            config.progress.queue_size = 3  # pyright: ignore[reportAttributeAccessIssue]
