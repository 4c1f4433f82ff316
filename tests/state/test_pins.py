"""Tests for pin sources and the pin stores."""

import json as _json
import pathlib as _pathlib

import skrills.state.history as history
import skrills.state.pins as pins


class TestParseEnvPins:
    def test_splits_and_strips(self) -> None:
        assert pins.parse_env_pins(" a , b,,c ") == {"a", "b", "c"}

    def test_empty(self) -> None:
        assert pins.parse_env_pins("") == set()
        assert pins.parse_env_pins(None) == set()


class TestEffectivePins:
    """Union of manual, environment and auto pins."""

    def _history(self) -> list[history.HistoryEntry]:
        return [
            history.HistoryEntry(ts=1, skills=["tool-foo"]),
            history.HistoryEntry(ts=2, skills=[]),
            history.HistoryEntry(ts=3, skills=["tool-foo", "bar"]),
            history.HistoryEntry(ts=4, skills=[]),
            history.HistoryEntry(ts=5, skills=[]),
        ]

    def test_union_of_sources(self) -> None:
        result = pins.effective_pins({"manual"}, {"env"}, self._history(), True)
        assert result == {"manual", "env", "tool-foo"}

    def test_auto_pin_disabled(self) -> None:
        result = pins.effective_pins({"manual"}, set(), self._history(), False)
        assert result == {"manual"}

    def test_window_and_threshold_are_configurable(self) -> None:
        result = pins.effective_pins(
            set(), set(), self._history(), True, window=5, min_hits=1
        )
        assert result == {"tool-foo", "bar"}


class TestPinStore:
    def test_missing_file(self, tmp_path: _pathlib.Path) -> None:
        assert pins.PinStore(tmp_path / "p.json").load() == set()

    def test_pin_and_unpin(self, tmp_path: _pathlib.Path) -> None:
        store = pins.PinStore(tmp_path / "p.json")
        store.pin(["b/SKILL.md", "a/SKILL.md"])
        assert _json.loads((tmp_path / "p.json").read_text()) == ["a/SKILL.md", "b/SKILL.md"]

        assert store.unpin(["a/SKILL.md", "missing"]) == {"b/SKILL.md"}
        assert store.load() == {"b/SKILL.md"}

    def test_malformed_file(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "p.json"
        path.write_text('{"a": 1}')
        assert pins.PinStore(path).load() == set()

    def test_creates_parent_directory(self, tmp_path: _pathlib.Path) -> None:
        store = pins.PinStore(tmp_path / "deep" / "dir" / "p.json")
        store.save({"x"})
        assert store.load() == {"x"}


class TestAutoPinFlag:
    def test_default_false(self, tmp_path: _pathlib.Path) -> None:
        assert pins.AutoPinFlag(tmp_path / "f.json").load() is False

    def test_round_trip(self, tmp_path: _pathlib.Path) -> None:
        flag = pins.AutoPinFlag(tmp_path / "f.json")
        flag.save(True)
        assert flag.load() is True
        assert (tmp_path / "f.json").read_text().strip() == "true"

    def test_non_bool_value(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "f.json"
        path.write_text('"yes"')
        assert pins.AutoPinFlag(path).load() is False
