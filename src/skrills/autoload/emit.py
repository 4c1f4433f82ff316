"""
One autoload invocation, end to end.

discover -> pins -> preload terms -> relevance -> render -> record history

The result is wrapped in the hook envelope expected by the client:

    {"hookSpecificOutput": {"hookEventName": "UserPromptSubmit",
                            "additionalContext": "<payload>"}}
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import skrills.autoload.preload as preload
import skrills.autoload.relevance as relevance
import skrills.autoload.render as render
import skrills.skills.discovery as discovery
import skrills.skills.source as source_module
import skrills.state.history as history_module
import skrills.state.paths as state_paths
import skrills.state.pins as pins_module
import skrills.state.runtime as runtime_module

if _typing.TYPE_CHECKING:
    import skrills.config.settings as settings_module

_logger = _logging.getLogger(__name__)

HOOK_EVENT_NAME = "UserPromptSubmit"


class AutoloadArgs(_pydantic.BaseModel):
    """
    Caller-provided options for one autoload.

    Every field is optional; unset fields fall back to settings.
    """

    model_config = _pydantic.ConfigDict(extra="ignore")

    include_claude: bool | None = None
    max_bytes: int | None = _pydantic.Field(default=None, ge=0)
    prompt: str | None = None
    embed_threshold: float | None = _pydantic.Field(default=None, ge=0.0, le=1.0)
    auto_pin: bool | None = None
    diagnose: bool | None = None

    @classmethod
    def from_json(cls, text: str | None) -> AutoloadArgs:
        """
        Parse a JSON object; blank input gives all-default args.

        Raises:
            pydantic.ValidationError: If the text is not a valid args object.
        """
        if not text or not text.strip():
            return cls()
        return cls.model_validate_json(text)

    def merged(self, **updates: _typing.Any) -> AutoloadArgs:
        """Copy with the given non-None values replaced."""
        changes = {k: v for k, v in updates.items() if v is not None}
        return self.model_copy(update=changes)


def hook_envelope(payload: str) -> dict[str, _typing.Any]:
    return {
        "hookSpecificOutput": {
            "hookEventName": HOOK_EVENT_NAME,
            "additionalContext": payload,
        }
    }


def _resolve_overrides(
    runtime: runtime_module.RuntimeOverrides | runtime_module.RuntimeOverridesCache | None,
    state: _pathlib.Path,
) -> runtime_module.RuntimeOverrides:
    if runtime is None:
        return runtime_module.RuntimeOverrides.load(state_paths.runtime_overrides_file(state))
    if isinstance(runtime, runtime_module.RuntimeOverridesCache):
        return runtime.get()
    return runtime


def run_autoload(
    args: AutoloadArgs,
    settings: settings_module.Settings,
    *,
    runtime: runtime_module.RuntimeOverrides | runtime_module.RuntimeOverridesCache | None = None,
    extra_dirs: _typing.Iterable[str] = (),
    engine: relevance.RelevanceEngine | None = None,
    home: _pathlib.Path | None = None,
    now: int | None = None,
) -> render.RenderResult:
    """
    Discover, select and render skills, then record the render in history.

    Args:
        args: Per-invocation options; unset values fall back to settings.
        settings: Loaded settings.
        runtime: Runtime overrides, a caller-owned cache, or None to load
                 them from the state directory.
        extra_dirs: Extra skill directories from the command line.
        engine: Relevance engine (default lexical similarity).
        home: Home directory override.
        now: Timestamp for the history entry.

    Returns:
        The RenderResult (payload, matched names, diagnostics).

    Raises:
        StateDirectoryError: If the home/state directory cannot be resolved.
    """
    home = home if home is not None else state_paths.home_dir()
    state = settings.resolved_state_dir()
    defaults = settings.autoload

    extra_paths = settings.extra_dir_paths(extra_dirs)
    roots = source_module.skill_roots(home, settings.resolved_project_root(), extra_paths)
    priority = source_module.priority_labels(len(extra_paths))

    include_claude = (
        args.include_claude if args.include_claude is not None else defaults.include_claude
    )
    if not include_claude:
        # A disabled Claude copy must not shadow a lower-ranked copy in dedup
        roots = [r for r in roots if not r.source.is_secondary]

    diagnose = args.diagnose if args.diagnose is not None else defaults.diagnose
    skills, duplicates = discovery.discover(
        roots, record_duplicates=diagnose, priority=priority
    )
    _logger.debug("Discovered %d skills from %d roots", len(skills), len(roots))

    history_store = history_module.HistoryStore(
        state_paths.history_file(state), settings.history.limit
    )
    history = history_store.load()

    auto_pin = args.auto_pin
    if auto_pin is None:
        auto_pin = defaults.auto_pin
    if auto_pin is None:
        auto_pin = pins_module.AutoPinFlag(state_paths.auto_pin_file(state)).load()

    pinned = pins_module.effective_pins(
        pins_module.PinStore(state_paths.pinned_file(state)).load(),
        pins_module.parse_env_pins(settings.pinned),
        history,
        auto_pin,
        window=settings.history.auto_pin_window,
        min_hits=settings.history.auto_pin_min_hits,
    )

    preload_terms = preload.load_preload_terms(state_paths.agents_manifest_file(state))
    prompt = args.prompt if args.prompt is not None else settings.prompt
    threshold = (
        args.embed_threshold if args.embed_threshold is not None else defaults.embed_threshold
    )
    engine = engine or relevance.RelevanceEngine()
    verdicts = engine.assess_all(skills, prompt, threshold, preload_terms)

    overrides = _resolve_overrides(runtime, state)
    options = render.AutoloadOptions(
        include_claude=include_claude,
        max_bytes=args.max_bytes if args.max_bytes is not None else defaults.max_bytes,
        prompt=prompt,
        embed_threshold=threshold,
        preload_terms=tuple(preload_terms),
        pinned=frozenset(pinned),
        render_mode=render.manifest_render_mode(
            overrides.effective_manifest_first(settings.manifest)
        ),
        minimal_manifest=overrides.effective_manifest_minimal(settings.manifest),
        diagnose=diagnose,
        priority=tuple(priority),
        log_render_mode=overrides.effective_render_mode_log(settings.manifest),
    )

    result = render.render_autoload(skills, verdicts, options, duplicates)
    history_store.record(result.matched, ts=now)
    return result


def emit_autoload(
    args: AutoloadArgs,
    settings: settings_module.Settings,
    **kwargs: _typing.Any,
) -> dict[str, _typing.Any]:
    """
    Run one autoload and return the hook envelope.

    Keyword arguments are passed to run_autoload. With diagnostics enabled
    the rendered diagnostics block follows the payload; it does not count
    against the byte budget.
    """
    result = run_autoload(args, settings, **kwargs)
    payload = result.payload
    diagnose = args.diagnose if args.diagnose is not None else settings.autoload.diagnose
    if diagnose:
        block = result.diagnostics.render()
        payload = f"{payload}\n\n{block}" if payload else block
    return hook_envelope(payload)
