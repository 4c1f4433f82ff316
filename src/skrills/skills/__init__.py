"""
Skill catalog for Skrills.

Skills are SKILL.md documents living under host-tool skill directories:
- <project>/.codex/skills, ~/.codex/skills, ~/.codex/skills-mirror
- <project>/.claude/skills, ~/.claude/skills
- ~/.agent/skills
- extra directories supplied by the caller

Names are paths relative to the root (``alpha/SKILL.md``). When two roots
provide the same name, the higher-priority source wins.
"""

from skrills.skills.discovery import (
    DuplicateInfo,
    discover,
    discover_skills,
    iter_skill_files,
)
from skrills.skills.skill import (
    SkillFrontmatter,
    SkillMeta,
    hash_file,
    parse_skill_markdown,
    skill_name,
)
from skrills.skills.source import (
    BASE_PRIORITY,
    SECONDARY_KINDS,
    SkillRoot,
    SkillSource,
    SourceKind,
    priority_index,
    priority_labels,
    priority_rank,
    skill_roots,
)

__all__ = [
    # Records
    "SkillMeta",
    "SkillFrontmatter",
    "parse_skill_markdown",
    "hash_file",
    "skill_name",
    # Sources
    "SourceKind",
    "SkillSource",
    "SkillRoot",
    "BASE_PRIORITY",
    "SECONDARY_KINDS",
    "priority_labels",
    "priority_index",
    "priority_rank",
    "skill_roots",
    # Discovery
    "DuplicateInfo",
    "discover",
    "discover_skills",
    "iter_skill_files",
]
