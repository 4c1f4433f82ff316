"""
The available-skills section of AGENTS.md.

The section is delimited by HTML comment markers so it can be regenerated
without touching anything the user wrote around it. Autoload ignores this
section when extracting preload terms.
"""

from __future__ import annotations

import html as _html
import logging as _logging
import pathlib as _pathlib
import time as _time
import typing as _typing

import skrills.constants as constants
import skrills.skills.skill as skill_module
import skrills.skills.source as source_module
import skrills.state.persistence as persistence

_logger = _logging.getLogger(__name__)

AGENTS_TEMPLATE = """\
# AGENTS

Skills are discovered from SKILL.md files under the Codex, Claude and agent
skill directories. The list below is regenerated by skrills sync-agents;
edits inside the markers are overwritten.

Skills mentioned in backticks outside the generated section are loaded on
every prompt."""


def render_available_skills_xml(
    skills: _typing.Sequence[skill_module.SkillMeta],
    priority: _typing.Sequence[str],
    generated_at: int | None = None,
) -> str:
    """
    Render the ``<available_skills>`` listing with a timestamp and paths.

    Args:
        skills: Skills to list, in output order.
        priority: Source labels in priority order.
        generated_at: Unix timestamp; defaults to now.
    """
    ts = int(_time.time()) if generated_at is None else generated_at
    esc = _html.escape
    lines = [
        f'<available_skills generated_at_utc="{ts}" priority="{esc(",".join(priority))}">'
    ]
    for skill in skills:
        label = skill.source.label
        rank = source_module.priority_rank(label, priority)
        lines.append(
            f'  <skill name="{esc(skill.name)}" source="{esc(label)}"'
            f' location="{skill.source.location}" path="{esc(str(skill.path))}"'
            f' priority_rank="{rank}" />'
        )
    lines.append("</available_skills>")
    return "\n".join(lines)


def replace_section(existing: str, section: str) -> str:
    """Replace the marker-delimited section, or append it when absent."""
    start = existing.find(constants.AGENTS_SECTION_START)
    end = existing.find(constants.AGENTS_SECTION_END)
    if start != -1 and end != -1 and end > start:
        end += len(constants.AGENTS_SECTION_END)
        # The section carries its own trailing newline
        if existing[end : end + 1] == "\n":
            end += 1
        return existing[:start] + section + existing[end:]
    return f"{existing.rstrip()}\n\n{section}"


def sync_agents_with_skills(
    path: _pathlib.Path,
    skills: _typing.Sequence[skill_module.SkillMeta],
    priority: _typing.Sequence[str],
    generated_at: int | None = None,
) -> str:
    """
    Write the available-skills section into ``path``.

    Creates the file from a short template when it does not exist.

    Returns:
        The new file content.
    """
    xml = render_available_skills_xml(skills, priority, generated_at)
    section = f"{constants.AGENTS_SECTION_START}\n{xml}\n{constants.AGENTS_SECTION_END}\n"

    try:
        existing = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        existing = None

    if existing is None:
        content = f"{AGENTS_TEMPLATE}\n\n{section}"
    else:
        content = replace_section(existing, section)

    persistence.write_text(path, content)
    _logger.info("Wrote %d skills to %s", len(skills), path)
    return content
