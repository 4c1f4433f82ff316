"""
Skill sources and their priority order.

Every skill comes from a root directory owned by some host tool. The
source kind is a tagged enumeration; precedence between sources lives in
an explicit ordered list of labels so new host tools only need a new kind
and a slot in the order.

Default order (earliest wins when two roots provide the same skill):
    codex-local, codex, mirror, claude-local, claude, agent, extra0, extra1, ...
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import pathlib as _pathlib
import typing as _typing


class SourceKind(_enum.Enum):
    """Kinds of skill roots, tagged with their label stem and location."""

    CODEX_LOCAL = ("codex-local", "local")
    CODEX = ("codex", "global")
    MIRROR = ("mirror", "global")
    CLAUDE_LOCAL = ("claude-local", "local")
    CLAUDE = ("claude", "global")
    AGENT = ("agent", "global")
    EXTRA = ("extra", "local")

    @property
    def stem(self) -> str:
        return self.value[0]

    @property
    def location(self) -> str:
        return self.value[1]


SECONDARY_KINDS: frozenset[SourceKind] = frozenset(
    {SourceKind.CLAUDE_LOCAL, SourceKind.CLAUDE}
)
"""Kinds mirrored elsewhere; only rendered when the include-claude flag is set."""

BASE_PRIORITY: tuple[SourceKind, ...] = (
    SourceKind.CODEX_LOCAL,
    SourceKind.CODEX,
    SourceKind.MIRROR,
    SourceKind.CLAUDE_LOCAL,
    SourceKind.CLAUDE,
    SourceKind.AGENT,
)


@_dataclasses.dataclass(frozen=True)
class SkillSource:
    """Where a skill was discovered from."""

    kind: SourceKind
    index: int = 0
    """Position of the directory among extra directories (EXTRA only)."""

    @classmethod
    def extra(cls, index: int) -> SkillSource:
        return cls(SourceKind.EXTRA, index)

    @property
    def label(self) -> str:
        """Human-readable label, unique per root (e.g. 'codex', 'extra1')."""
        if self.kind is SourceKind.EXTRA:
            return f"{self.kind.stem}{self.index}"
        return self.kind.stem

    @property
    def location(self) -> str:
        """'local' or 'global'."""
        return self.kind.location

    @property
    def is_secondary(self) -> bool:
        return self.kind in SECONDARY_KINDS

    def __str__(self) -> str:
        return self.label


@_dataclasses.dataclass(frozen=True)
class SkillRoot:
    """A directory to scan, paired with the source it represents."""

    path: _pathlib.Path
    source: SkillSource


def priority_labels(extra_count: int = 0) -> list[str]:
    """Return source labels in priority order (highest priority first)."""
    labels = [kind.stem for kind in BASE_PRIORITY]
    labels.extend(SkillSource.extra(i).label for i in range(extra_count))
    return labels


def priority_index(label: str, order: _typing.Sequence[str]) -> int:
    """0-based position of ``label`` in ``order``; unknown labels sort last."""
    try:
        return list(order).index(label)
    except ValueError:
        return len(order)


def priority_rank(label: str, order: _typing.Sequence[str]) -> int:
    """1-based rank shown in manifests; ``len(order) + 1`` when not listed."""
    return priority_index(label, order) + 1


def skill_roots(
    home: _pathlib.Path,
    project_root: _pathlib.Path | None = None,
    extra_dirs: _typing.Iterable[_pathlib.Path] = (),
) -> list[SkillRoot]:
    """
    Build the standard list of skill roots in priority order.

    Args:
        home: User home directory.
        project_root: Project directory for local roots. If None, local
                      roots are omitted.
        extra_dirs: Additional directories, ranked after all built-in roots.

    Returns:
        List of SkillRoot (highest priority first). Roots are not required
        to exist.
    """
    roots: list[SkillRoot] = []
    # A project at ~ would list the global roots twice
    if project_root is not None and project_root.resolve() == home.resolve():
        project_root = None
    if project_root is not None:
        roots.append(
            SkillRoot(project_root / ".codex" / "skills", SkillSource(SourceKind.CODEX_LOCAL))
        )
    roots.append(SkillRoot(home / ".codex" / "skills", SkillSource(SourceKind.CODEX)))
    roots.append(SkillRoot(home / ".codex" / "skills-mirror", SkillSource(SourceKind.MIRROR)))
    if project_root is not None:
        roots.append(
            SkillRoot(project_root / ".claude" / "skills", SkillSource(SourceKind.CLAUDE_LOCAL))
        )
    roots.append(SkillRoot(home / ".claude" / "skills", SkillSource(SourceKind.CLAUDE)))
    roots.append(SkillRoot(home / ".agent" / "skills", SkillSource(SourceKind.AGENT)))
    for i, extra in enumerate(extra_dirs):
        roots.append(SkillRoot(_pathlib.Path(extra).expanduser(), SkillSource.extra(i)))
    return roots
