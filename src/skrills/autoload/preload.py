"""
Preload terms from the agents manifest (AGENTS.md).

Skills referenced by the user's own AGENTS.md text are always rendered.
References are backticked tokens (`python-testing`, `alpha/SKILL.md`) and
bare markdown paths (docs/alpha/SKILL.md). The section generated by
``skrills sync-agents`` lists every skill and is ignored, otherwise every
skill would be preloaded.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import re as _re

import skrills.constants as constants

_logger = _logging.getLogger(__name__)

_BACKTICK_RE = _re.compile(r"`([^`\n]{1,200})`")
_MD_PATH_RE = _re.compile(r"(?<![\w.-])((?:[\w.-]+/)*[\w.-]+\.md)\b", _re.IGNORECASE)


def strip_generated_section(text: str) -> str:
    """Remove the marker-delimited available-skills section, if present."""
    start = text.find(constants.AGENTS_SECTION_START)
    end = text.find(constants.AGENTS_SECTION_END)
    if start == -1 or end == -1 or end < start:
        return text
    return text[:start] + text[end + len(constants.AGENTS_SECTION_END) :]


def extract_refs_from_agents(text: str) -> list[str]:
    """
    Extract skill reference terms from AGENTS.md text.

    Returns:
        Lowercase terms, de-duplicated, in first-seen order.
    """
    text = strip_generated_section(text)
    terms: list[str] = []
    seen: set[str] = set()

    def _add(term: str) -> None:
        term = term.strip().strip("./").lower()
        # A bare "SKILL.md" names no skill in particular
        if term == constants.SKILL_FILE_NAME.lower():
            return
        if term and term not in seen:
            seen.add(term)
            terms.append(term)

    for match in _BACKTICK_RE.finditer(text):
        _add(match.group(1))
    for match in _MD_PATH_RE.finditer(text):
        path = match.group(1)
        _add(path)
        # 'skills/alpha/SKILL.md' should also name 'alpha/SKILL.md'
        parts = path.split("/")
        if len(parts) > 2 and parts[-1].upper() == constants.SKILL_FILE_NAME.upper():
            _add("/".join(parts[-2:]))

    return terms


def load_preload_terms(path: _pathlib.Path) -> list[str]:
    """Read and scan an agents manifest; a missing file yields no terms."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as e:
        _logger.warning("Cannot read agents manifest %s: %s", path, e)
        return []
    return extract_refs_from_agents(text)
