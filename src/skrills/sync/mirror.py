"""
Mirror Claude skills into the Codex mirror directory.

Each SKILL.md under the Claude skills root is copied to the same relative
path under the mirror root when the copy is missing or its content hash
differs. Nothing is ever deleted from the mirror.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import shutil as _shutil
import typing as _typing

import skrills.skills.discovery as discovery
import skrills.skills.skill as skill_module

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass
class SyncReport:
    """Outcome of one mirror sync."""

    copied: int = 0
    skipped: int = 0
    copied_names: list[str] = _dataclasses.field(default_factory=list)
    """Skill directories (relative to the root) that were copied."""

    failed: list[str] = _dataclasses.field(default_factory=list)
    """Relative paths that could not be copied."""

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "copied": self.copied,
            "skipped": self.skipped,
            "copied_names": list(self.copied_names),
            "failed": list(self.failed),
        }


def _needs_copy(src: _pathlib.Path, dest: _pathlib.Path) -> bool:
    if not dest.exists():
        return True
    return skill_module.hash_file(dest) != skill_module.hash_file(src)


def sync_from_claude(claude_root: _pathlib.Path, mirror_root: _pathlib.Path) -> SyncReport:
    """
    Copy new or changed SKILL.md files from ``claude_root`` to ``mirror_root``.

    A missing source root is not an error. Files that fail to copy are
    logged and listed in ``failed``.
    """
    report = SyncReport()
    for src in discovery.iter_skill_files(claude_root):
        rel = src.relative_to(claude_root)
        dest = mirror_root / rel
        try:
            if not _needs_copy(src, dest):
                report.skipped += 1
                continue
            dest.parent.mkdir(parents=True, exist_ok=True)
            _shutil.copyfile(src, dest)
        except OSError as e:
            _logger.warning("Failed to mirror %s: %s", src, e)
            report.failed.append(rel.as_posix())
            continue

        report.copied += 1
        parent = rel.parent.as_posix()
        report.copied_names.append(rel.as_posix() if parent == "." else parent)
        _logger.debug("Mirrored %s", rel.as_posix())

    return report
