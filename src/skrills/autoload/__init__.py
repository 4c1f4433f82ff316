"""
Autoload: choose which skills to surface for a prompt, under a byte budget.

The pipeline is relevance scoring (relevance), selection and rendering
(render), and the end-to-end invocation with pins and history (emit).
"""

from skrills.autoload.emit import (
    HOOK_EVENT_NAME,
    AutoloadArgs,
    emit_autoload,
    hook_envelope,
    run_autoload,
)
from skrills.autoload.preload import extract_refs_from_agents, load_preload_terms
from skrills.autoload.relevance import (
    LexicalSimilarity,
    Relevance,
    RelevanceEngine,
    Similarity,
    Verdict,
    dice_coefficient,
    tokenize,
)
from skrills.autoload.render import (
    AutoloadOptions,
    Diagnostics,
    RenderMode,
    RenderResult,
    SkillDecision,
    manifest_render_mode,
    render_autoload,
)

__all__ = [
    # Relevance
    "Verdict",
    "Relevance",
    "Similarity",
    "LexicalSimilarity",
    "RelevanceEngine",
    "dice_coefficient",
    "tokenize",
    # Preload
    "extract_refs_from_agents",
    "load_preload_terms",
    # Rendering
    "RenderMode",
    "AutoloadOptions",
    "SkillDecision",
    "Diagnostics",
    "RenderResult",
    "manifest_render_mode",
    "render_autoload",
    # Invocation
    "HOOK_EVENT_NAME",
    "AutoloadArgs",
    "run_autoload",
    "emit_autoload",
    "hook_envelope",
]
