"""
Skill discovery across source roots.

Each root is walked up to MAX_SKILL_DEPTH levels deep and every file named
exactly SKILL.md becomes a skill. When several roots provide the same skill
name, the copy from the highest-priority source wins and the others are
optionally recorded as duplicates.

Missing or unreadable roots simply contribute nothing.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import skrills.constants as constants
import skrills.skills.skill as skill_module
import skrills.skills.source as source_module

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass
class DuplicateInfo:
    """A skill name provided by more than one root."""

    name: str
    kept: skill_module.SkillMeta
    skipped: skill_module.SkillMeta

    @property
    def competing_sources(self) -> list[str]:
        return [self.kept.source.label, self.skipped.source.label]

    @property
    def identical(self) -> bool:
        """Whether both copies have the same content (hashes both files)."""
        try:
            return self.kept.hash == self.skipped.hash
        except OSError:
            return False

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "name": self.name,
            "kept_source": self.kept.source.label,
            "kept_root": str(self.kept.root),
            "skipped_source": self.skipped.source.label,
            "skipped_root": str(self.skipped.root),
        }


def iter_skill_files(
    root: _pathlib.Path,
    max_depth: int = constants.MAX_SKILL_DEPTH,
) -> _typing.Iterator[_pathlib.Path]:
    """
    Yield SKILL.md files under ``root`` in sorted, depth-bounded order.

    A file directly inside ``root`` is at depth 1. Symlinked directories
    are not followed and unreadable directories are skipped.
    """
    if not root.is_dir():
        return

    def _on_error(err: OSError) -> None:
        _logger.debug("Skipping unreadable path during discovery: %s", err)

    base_depth = len(root.parts)
    for dirpath, dirnames, filenames in _os.walk(root, onerror=_on_error):
        current = _pathlib.Path(dirpath)
        depth = len(current.parts) - base_depth
        # Files here are at depth + 1; children directories would be deeper
        if depth + 1 >= max_depth:
            dirnames[:] = []
        else:
            dirnames.sort()
        if constants.SKILL_FILE_NAME in filenames:
            candidate = current / constants.SKILL_FILE_NAME
            if not _os.access(candidate, _os.R_OK):
                _logger.debug("Skipping unreadable skill file: %s", candidate)
                continue
            yield candidate


def discover_skills(
    roots: _typing.Iterable[source_module.SkillRoot],
    duplicates: list[DuplicateInfo] | None = None,
    *,
    priority: _typing.Sequence[str] | None = None,
) -> list[skill_module.SkillMeta]:
    """
    Discover and deduplicate skills from the given roots.

    Args:
        roots: Roots to scan, in caller order.
        duplicates: When given, every discarded copy is appended here.
        priority: Source labels in priority order. Defaults to the built-in
                  order extended with one label per EXTRA root.

    Returns:
        Catalog sorted by (source priority, name) with unique names.
    """
    roots = list(roots)
    if priority is None:
        extra_count = sum(1 for r in roots if r.source.kind is source_module.SourceKind.EXTRA)
        priority = source_module.priority_labels(extra_count)

    winners: dict[str, skill_module.SkillMeta] = {}
    for root in roots:
        for path in iter_skill_files(root.path):
            skill = skill_module.SkillMeta.from_path(path, root.path, root.source)
            current = winners.get(skill.name)
            if current is None:
                winners[skill.name] = skill
                continue

            # Earlier priority wins; equal priority keeps the first seen
            if source_module.priority_index(
                skill.source.label, priority
            ) < source_module.priority_index(current.source.label, priority):
                kept, skipped = skill, current
                winners[skill.name] = skill
            else:
                kept, skipped = current, skill

            _logger.debug(
                "Duplicate skill %s: keeping %s, skipping %s",
                skill.name,
                kept.source.label,
                skipped.source.label,
            )
            if duplicates is not None:
                duplicates.append(DuplicateInfo(name=skill.name, kept=kept, skipped=skipped))

    return sorted(
        winners.values(),
        key=lambda s: (source_module.priority_index(s.source.label, priority), s.name),
    )


def discover(
    roots: _typing.Iterable[source_module.SkillRoot],
    *,
    record_duplicates: bool = False,
    priority: _typing.Sequence[str] | None = None,
) -> tuple[list[skill_module.SkillMeta], list[DuplicateInfo]]:
    """Discover skills and return ``(skills, duplicates)``."""
    duplicates: list[DuplicateInfo] | None = [] if record_duplicates else None
    skills = discover_skills(roots, duplicates, priority=priority)
    return skills, duplicates or []
