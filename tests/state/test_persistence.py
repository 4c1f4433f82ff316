"""Tests for JSON state file helpers."""

import logging as _logging
import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import skrills.errors as errors
import skrills.state.paths as paths
import skrills.state.persistence as persistence


class TestReadJson:
    def test_missing_returns_default(self, tmp_path: _pathlib.Path) -> None:
        assert persistence.read_json(tmp_path / "x.json", default=[]) == []

    def test_malformed_logs_warning(
        self, tmp_path: _pathlib.Path, caplog: _pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "x.json"
        path.write_text("not json")
        with caplog.at_level(_logging.WARNING, logger="skrills.state.persistence"):
            assert persistence.read_json(path, default={}) == {}
        assert "malformed" in caplog.text


class TestWriteJson:
    def test_pretty_with_trailing_newline(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "x.json"
        persistence.write_json(path, {"a": 1})
        assert path.read_text() == '{\n  "a": 1\n}\n'

    def test_no_temp_files_left(self, tmp_path: _pathlib.Path) -> None:
        persistence.write_json(tmp_path / "x.json", [1])
        persistence.write_json(tmp_path / "x.json", [2])
        assert [p.name for p in tmp_path.iterdir()] == ["x.json"]

    def test_failed_write_keeps_old_file(self, tmp_path: _pathlib.Path) -> None:
        """A failure before the rename leaves the previous content intact."""
        path = tmp_path / "x.json"
        persistence.write_json(path, ["old"])
        with _mock.patch.object(persistence._os, "replace", side_effect=OSError("boom")):
            with _pytest.raises(OSError):
                persistence.write_json(path, ["new"])
        assert persistence.read_json(path) == ["old"]
        assert [p.name for p in tmp_path.iterdir()] == ["x.json"]


class TestStateDir:
    def test_override_wins(self, tmp_path: _pathlib.Path, home: _pathlib.Path) -> None:
        assert paths.state_dir(tmp_path / "s") == tmp_path / "s"

    def test_env_var(
        self, tmp_path: _pathlib.Path, home: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SKRILLS_STATE_DIR", str(tmp_path / "env-state"))
        assert paths.state_dir() == tmp_path / "env-state"

    def test_default_under_home(self, home: _pathlib.Path) -> None:
        assert paths.state_dir() == home / ".codex"
        assert paths.pinned_file(paths.state_dir()).name == "skills-pinned.json"

    def test_unresolvable_home(self, home: _pathlib.Path) -> None:
        with _mock.patch.object(
            paths._pathlib.Path, "home", side_effect=RuntimeError("no home")
        ):
            with _pytest.raises(errors.StateDirectoryError):
                paths.state_dir()
