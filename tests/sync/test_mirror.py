"""Tests for mirroring Claude skills."""

import pathlib as _pathlib
import typing as _typing

import skrills.sync.mirror as mirror

WriteSkill = _typing.Callable[..., _pathlib.Path]


class TestSyncFromClaude:
    def test_missing_source(self, tmp_path: _pathlib.Path) -> None:
        report = mirror.sync_from_claude(tmp_path / "none", tmp_path / "mirror")
        assert report == mirror.SyncReport()
        assert not (tmp_path / "mirror").exists()

    def test_copies_new_and_changed(
        self, tmp_path: _pathlib.Path, write_skill: WriteSkill
    ) -> None:
        claude = tmp_path / "claude"
        dest = tmp_path / "mirror"
        write_skill(claude, "alpha", "v1")
        write_skill(claude, "nested/beta", "beta")

        first = mirror.sync_from_claude(claude, dest)
        assert first.copied == 2
        assert first.copied_names == ["alpha", "nested/beta"]
        assert (dest / "nested" / "beta" / "SKILL.md").read_text() == "beta\n"

        second = mirror.sync_from_claude(claude, dest)
        assert (second.copied, second.skipped) == (0, 2)

        write_skill(claude, "alpha", "v2")
        third = mirror.sync_from_claude(claude, dest)
        assert third.copied_names == ["alpha"]
        assert (dest / "alpha" / "SKILL.md").read_text() == "v2\n"

    def test_root_level_skill_name(
        self, tmp_path: _pathlib.Path, write_skill: WriteSkill
    ) -> None:
        write_skill(tmp_path / "claude", "")
        report = mirror.sync_from_claude(tmp_path / "claude", tmp_path / "mirror")
        assert report.copied_names == ["SKILL.md"]

    def test_only_skill_files_copied(
        self, tmp_path: _pathlib.Path, write_skill: WriteSkill
    ) -> None:
        claude = tmp_path / "claude"
        write_skill(claude, "alpha")
        (claude / "alpha" / "notes.md").write_text("x")
        mirror.sync_from_claude(claude, tmp_path / "mirror")
        assert not (tmp_path / "mirror" / "alpha" / "notes.md").exists()
