"""
Shared constants for Skrills.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Discovery
SKILL_FILE_NAME = "SKILL.md"
"""Exact file name that marks a skill document."""

MAX_SKILL_DEPTH = 6
"""Maximum walk depth below a skill root (a file directly in the root is depth 1)."""

# Autoload defaults
DEFAULT_MAX_BYTES = 16_000
"""Default byte budget for the rendered autoload payload."""

DEFAULT_EMBED_THRESHOLD = 0.3
"""Default similarity threshold (0-1) for prompt matching."""

# History and auto-pinning
HISTORY_LIMIT = 50
"""Maximum number of history entries to retain."""

AUTO_PIN_WINDOW = 5
"""Number of most recent history entries considered for auto-pinning."""

AUTO_PIN_MIN_HITS = 2
"""Minimum occurrences within the window for a skill to be auto-pinned."""

# Persisted state file names (under the state directory)
PINNED_FILE_NAME = "skills-pinned.json"
AUTO_PIN_FILE_NAME = "skills-autopin.json"
HISTORY_FILE_NAME = "skills-history.json"
RUNTIME_FILE_NAME = "skills-runtime.json"
AGENTS_FILE_NAME = "AGENTS.md"

# Generated section markers in AGENTS.md
AGENTS_SECTION_START = "<!-- available_skills:start -->"
AGENTS_SECTION_END = "<!-- available_skills:end -->"
