"""
Synchronization helpers: the Claude skill mirror and the AGENTS.md listing.
"""

from skrills.sync.agents import (
    AGENTS_TEMPLATE,
    render_available_skills_xml,
    replace_section,
    sync_agents_with_skills,
)
from skrills.sync.mirror import SyncReport, sync_from_claude

__all__ = [
    "SyncReport",
    "sync_from_claude",
    "AGENTS_TEMPLATE",
    "render_available_skills_xml",
    "replace_section",
    "sync_agents_with_skills",
]
