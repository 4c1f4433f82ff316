"""
Budgeted rendering of the autoload payload.

Given the catalog, a relevance verdict per skill and the options for one
invocation, select which skills to surface and render them as a manifest
(metadata per skill), their full text, or both.

Selection:
1. Pinned and preload-matched skills are guaranteed. They are always
   rendered, even when they alone exceed the byte budget.
2. Prompt-matched candidates follow in (source priority, name) order and
   are accepted while the payload stays within the budget. The first one
   that does not fit ends the walk.

Every skill in the catalog gets a SkillDecision explaining what happened
to it, collected in Diagnostics.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import html as _html
import logging as _logging
import typing as _typing

import skrills.autoload.relevance as relevance
import skrills.constants as constants
import skrills.skills.discovery as discovery
import skrills.skills.skill as skill_module
import skrills.skills.source as source_module

_logger = _logging.getLogger(__name__)

MANIFEST_TAG = "available_skills"

_BLOCK_SEPARATOR = "\n\n"


class RenderMode(_enum.Enum):
    """Shape of the rendered payload."""

    DUAL = "dual"
    """Manifest entries followed by full skill text."""

    MANIFEST_ONLY = "manifest"
    """Manifest entries only; bodies are fetched on demand."""

    CONTENT_ONLY = "content"
    """Concatenated skill text, no manifest (legacy)."""

    @property
    def has_manifest(self) -> bool:
        return self is not RenderMode.CONTENT_ONLY

    @property
    def has_content(self) -> bool:
        return self is not RenderMode.MANIFEST_ONLY


def manifest_render_mode(manifest_first: bool) -> RenderMode:
    """Render mode for the manifest-first setting."""
    return RenderMode.MANIFEST_ONLY if manifest_first else RenderMode.DUAL


@_dataclasses.dataclass(frozen=True)
class AutoloadOptions:
    """Options for one render. Built once per invocation."""

    include_claude: bool = False
    max_bytes: int | None = constants.DEFAULT_MAX_BYTES
    """Byte budget; None means unlimited."""

    prompt: str | None = None
    embed_threshold: float = constants.DEFAULT_EMBED_THRESHOLD
    preload_terms: tuple[str, ...] = ()
    pinned: frozenset[str] = frozenset()
    render_mode: RenderMode = RenderMode.DUAL
    minimal_manifest: bool = False
    diagnose: bool = False
    priority: tuple[str, ...] = _dataclasses.field(
        default_factory=lambda: tuple(source_module.priority_labels())
    )
    log_render_mode: bool = False


@_dataclasses.dataclass(frozen=True)
class SkillDecision:
    """What the renderer did with one skill."""

    name: str
    included: bool
    reason: str


@_dataclasses.dataclass
class Diagnostics:
    """Duplicate log, per-skill decisions and free-form notes for one render."""

    duplicates: list[discovery.DuplicateInfo] = _dataclasses.field(default_factory=list)
    decisions: list[SkillDecision] = _dataclasses.field(default_factory=list)
    notes: list[str] = _dataclasses.field(default_factory=list)

    def decision_for(self, name: str) -> SkillDecision | None:
        for decision in self.decisions:
            if decision.name == name:
                return decision
        return None

    def render(self) -> str:
        """Render as an HTML comment block appended after the payload."""
        lines = ["<!-- skrills diagnostics"]
        if self.duplicates:
            lines.append("duplicates:")
            for dup in self.duplicates:
                lines.append(
                    f"  {dup.name}: kept {dup.kept.source.label} ({dup.kept.root}),"
                    f" skipped {dup.skipped.source.label} ({dup.skipped.root})"
                )
        if self.decisions:
            lines.append("decisions:")
            for decision in self.decisions:
                mark = "+" if decision.included else "-"
                lines.append(f"  {mark} {decision.name}: {decision.reason}")
        if self.notes:
            lines.append("notes:")
            lines.extend(f"  {note}" for note in self.notes)
        lines.append("-->")
        # The comment must not be closed early by a skill name
        return "\n".join(line.replace("-->", "--&gt;") for line in lines[:-1]) + "\n-->"


@_dataclasses.dataclass
class RenderResult:
    """Rendered payload plus the names actually included."""

    payload: str
    matched: list[str]
    """Included skill names, in output order."""

    diagnostics: Diagnostics


# =============================================================================
# Rendering pieces
# =============================================================================


def _attr(value: str) -> str:
    return _html.escape(value, quote=True)


def manifest_header(priority: _typing.Sequence[str], minimal: bool = False) -> str:
    if minimal:
        return f"<{MANIFEST_TAG}>"
    return f'<{MANIFEST_TAG} priority="{_attr(",".join(priority))}">'


def manifest_footer() -> str:
    return f"</{MANIFEST_TAG}>"


def manifest_entry(
    skill: skill_module.SkillMeta,
    priority: _typing.Sequence[str],
    minimal: bool = False,
) -> str:
    """One manifest line for ``skill``."""
    if minimal:
        return f'  <skill name="{_attr(skill.name)}" />'
    label = skill.source.label
    rank = source_module.priority_rank(label, priority)
    return (
        f'  <skill name="{_attr(skill.name)}" source="{_attr(label)}"'
        f' location="{_attr(skill.source.location)}" priority_rank="{rank}" />'
    )


def content_block(skill: skill_module.SkillMeta) -> str:
    """Full text of ``skill`` wrapped in a named block."""
    return f'<skill name="{_attr(skill.name)}">\n{skill.read_text().strip()}\n</skill>'


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


class _Layout:
    """
    Byte accounting for one render mode.

    The payload is the manifest (header, one line per skill, footer)
    followed by the content blocks, all joined by blank lines. Adding the
    first skill costs its piece plus the fixed framing; every later skill
    costs its piece plus the joiner between blocks (if not already part of
    the piece).
    """

    def __init__(self, options: AutoloadOptions) -> None:
        self.mode = options.render_mode
        self.priority = options.priority
        self.minimal = options.minimal_manifest and self.mode.has_manifest
        self.header = manifest_header(self.priority, self.minimal)
        self.footer = manifest_footer()

        if self.mode.has_manifest:
            self.framing = _utf8_len(self.header) + 1 + _utf8_len(self.footer)
            self.joiner = 0
        else:
            self.framing = 0
            self.joiner = len(_BLOCK_SEPARATOR)

    def piece(self, skill: skill_module.SkillMeta) -> tuple[str | None, str | None, int]:
        """Manifest entry, content block and their combined byte cost."""
        entry = block = None
        size = 0
        if self.mode.has_manifest:
            entry = manifest_entry(skill, self.priority, self.minimal)
            size += _utf8_len(entry) + 1
        if self.mode.has_content:
            block = content_block(skill)
            size += _utf8_len(block)
            if self.mode.has_manifest:
                # Separator between the manifest (or previous block) and this block
                size += len(_BLOCK_SEPARATOR)
        return entry, block, size

    def cost(self, size: int, first: bool) -> int:
        return size + (self.framing if first else self.joiner)

    def assemble(self, entries: list[str], blocks: list[str]) -> str:
        parts: list[str] = []
        if self.mode.has_manifest and entries:
            parts.append("\n".join([self.header, *entries, self.footer]))
        if self.mode.has_content:
            parts.extend(blocks)
        return _BLOCK_SEPARATOR.join(parts)


def _as_relevance(value: relevance.Relevance | relevance.Verdict | None) -> relevance.Relevance:
    if value is None:
        return relevance.Relevance(relevance.Verdict.NO_MATCH)
    if isinstance(value, relevance.Verdict):
        return relevance.Relevance(value)
    return value


def _inclusion_reason(name: str, rel: relevance.Relevance, pinned: frozenset[str]) -> str:
    if name in pinned:
        return "pinned"
    if rel.verdict is relevance.Verdict.PRELOAD_MATCH:
        return "preload"
    return f"prompt match ({rel.score:.2f})"


# =============================================================================
# Selection
# =============================================================================


def render_autoload(
    catalog: _typing.Sequence[skill_module.SkillMeta],
    verdicts: _typing.Mapping[str, relevance.Relevance | relevance.Verdict],
    options: AutoloadOptions,
    duplicates: _typing.Sequence[discovery.DuplicateInfo] = (),
) -> RenderResult:
    """
    Select and render skills under the byte budget.

    Args:
        catalog: Deduplicated skills.
        verdicts: Relevance per skill name; missing names count as NO_MATCH.
        options: Render options, including the effective pin set.
        duplicates: Duplicate log from discovery, copied into diagnostics.

    Returns:
        RenderResult. The payload is empty when nothing is included.
    """
    diagnostics = Diagnostics(duplicates=list(duplicates))
    priority = options.priority

    def sort_key(skill: skill_module.SkillMeta) -> tuple[int, str]:
        return (source_module.priority_index(skill.source.label, priority), skill.name)

    guaranteed: list[skill_module.SkillMeta] = []
    eligible: list[skill_module.SkillMeta] = []
    decisions: dict[str, SkillDecision] = {}
    rels: dict[str, relevance.Relevance] = {}

    for skill in catalog:
        rel = _as_relevance(verdicts.get(skill.name))
        rels[skill.name] = rel
        if skill.source.is_secondary and not options.include_claude:
            decisions[skill.name] = SkillDecision(
                skill.name, False, "skipped: claude source disabled"
            )
            continue
        if not skill.is_readable():
            decisions[skill.name] = SkillDecision(skill.name, False, "skipped: unreadable")
            continue
        if skill.name in options.pinned or rel.verdict is relevance.Verdict.PRELOAD_MATCH:
            guaranteed.append(skill)
        elif rel.verdict is relevance.Verdict.PROMPT_MATCH:
            eligible.append(skill)
        else:
            decisions[skill.name] = SkillDecision(skill.name, False, "skipped: no match")

    guaranteed.sort(key=sort_key)
    eligible.sort(key=sort_key)

    layout = _Layout(options)
    entries: list[str] = []
    blocks: list[str] = []
    matched: list[str] = []
    total = 0

    def include(
        skill: skill_module.SkillMeta, entry: str | None, block: str | None, cost: int
    ) -> None:
        nonlocal total
        total += cost
        matched.append(skill.name)
        if entry is not None:
            entries.append(entry)
        if block is not None:
            blocks.append(block)
        decisions[skill.name] = SkillDecision(
            skill.name, True, _inclusion_reason(skill.name, rels[skill.name], options.pinned)
        )

    for skill in guaranteed:
        entry, block, size = layout.piece(skill)
        include(skill, entry, block, layout.cost(size, first=not matched))

    limit = options.max_bytes
    if limit is not None and total > limit:
        note = f"over budget: guaranteed skills use {total} bytes (limit {limit})"
        diagnostics.notes.append(note)
        _logger.warning(note)

    budget_exhausted = False
    for skill in eligible:
        if budget_exhausted:
            decisions[skill.name] = SkillDecision(skill.name, False, "omitted: budget")
            continue
        entry, block, size = layout.piece(skill)
        cost = layout.cost(size, first=not matched)
        if limit is not None and total + cost > limit:
            budget_exhausted = True
            decisions[skill.name] = SkillDecision(skill.name, False, "omitted: budget")
            continue
        include(skill, entry, block, cost)

    payload = layout.assemble(entries, blocks)

    diagnostics.decisions = [decisions[s.name] for s in sorted(catalog, key=sort_key)]

    if options.log_render_mode:
        _logger.info(
            "Render mode %s%s: %d skills, %d bytes (limit %s)",
            options.render_mode.value,
            " minimal" if layout.minimal else "",
            len(matched),
            _utf8_len(payload),
            "none" if limit is None else limit,
        )

    return RenderResult(payload=payload, matched=matched, diagnostics=diagnostics)
