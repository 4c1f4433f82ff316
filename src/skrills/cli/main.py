"""
Main CLI entry point for Skrills.

Provides the command-line interface using Click. ``emit-autoload`` is the
hook entry point: it prints the hook envelope JSON on stdout, so logging
and errors always go to stderr.
"""

import contextlib as _contextlib
import datetime as _datetime
import json as _json
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic

import skrills
import skrills.autoload as autoload
import skrills.config as config
import skrills.constants as constants
import skrills.errors as errors
import skrills.logging as logging
import skrills.skills as skills
import skrills.state as state
import skrills.sync as sync

_logger = logging.get_logger("cli")

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


@_contextlib.contextmanager
def _reporting_errors() -> _typing.Iterator[None]:
    """Turn fatal Skrills errors into a message on stderr and exit code 1."""
    try:
        yield
    except errors.SkrillsError as e:
        _click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None


def _settings(ctx: _click.Context) -> config.Settings:
    settings: config.Settings = ctx.obj["settings"]
    return settings


def _state_dir(ctx: _click.Context) -> _pathlib.Path:
    with _reporting_errors():
        return _settings(ctx).resolved_state_dir()


def _discover(
    ctx: _click.Context, record_duplicates: bool = False
) -> tuple[list[skills.SkillMeta], list[skills.DuplicateInfo], list[str]]:
    """Discover the catalog using settings plus --skill-dir options."""
    settings = _settings(ctx)
    with _reporting_errors():
        home = state.home_dir()
    extra = settings.extra_dir_paths(ctx.obj["skill_dirs"])
    roots = skills.skill_roots(home, settings.resolved_project_root(), extra)
    priority = skills.priority_labels(len(extra))
    _logger.debug("Scanning %d skill roots", len(roots))
    catalog, duplicates = skills.discover(
        roots, record_duplicates=record_duplicates, priority=priority
    )
    return catalog, duplicates, priority


def _resolve_names(names: _typing.Iterable[str], catalog: list[skills.SkillMeta]) -> list[str]:
    """Map 'alpha' shorthand to 'alpha/SKILL.md' when the catalog has it."""
    known = {s.name for s in catalog}
    resolved: list[str] = []
    for name in names:
        if name in known:
            resolved.append(name)
            continue
        candidate = f"{name.rstrip('/')}/{constants.SKILL_FILE_NAME}"
        if candidate in known:
            resolved.append(candidate)
            continue
        _click.echo(f"Warning: skill not found in catalog: {name}", err=True)
        resolved.append(name)
    return resolved


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(skrills.__version__, "-V", "--version", prog_name="skrills")
@_click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging on stderr",
)
@_click.option(
    "--log-json",
    is_flag=True,
    help="Write log records to stderr as JSON lines",
)
@_click.option(
    "--skill-dir",
    "skill_dirs",
    multiple=True,
    type=_click.Path(file_okay=False, path_type=str),
    help="Extra skill directory (repeatable; ranked after built-in roots)",
)
@_click.pass_context
def cli(
    ctx: _click.Context, verbose: bool, log_json: bool, skill_dirs: tuple[str, ...]
) -> None:
    """
    Skrills - skill catalog and autoload renderer.

    \b
    Examples:
        skrills list                              # Discovered skills
        skrills pin python-testing                # Always load a skill
        skrills emit-autoload --prompt "fix CI"   # Hook payload for a prompt
        skrills sync                              # Mirror Claude skills
    """
    logging.setup_logging("DEBUG" if verbose else "WARNING", json_output=log_json)

    with _reporting_errors():
        settings = config.Settings()
    for key in sorted(settings.collect_all_extra_fields()):
        _click.echo(f"Warning: unknown config key: {key}", err=True)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["skill_dirs"] = skill_dirs
    ctx.obj["verbose"] = verbose


# =============================================================================
# Catalog
# =============================================================================


@cli.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@_click.option("--duplicates", is_flag=True, help="Also show shadowed copies")
@_click.pass_context
def list_skills(ctx: _click.Context, json_output: bool, duplicates: bool) -> None:
    """List discovered skills in priority order."""
    catalog, dups, priority = _discover(ctx, record_duplicates=duplicates)

    if json_output:
        data: dict[str, _typing.Any] = {
            "priority": priority,
            "skills": [s.to_dict() for s in catalog],
        }
        if duplicates:
            data["duplicates"] = [d.to_dict() for d in dups]
        _click.echo(_json.dumps(data, indent=2))
        return

    if not catalog:
        _click.echo("No skills found.")
        return

    import rich.console as _rich_console
    import rich.table as _rich_table

    table = _rich_table.Table(title=f"Skills ({len(catalog)})")
    table.add_column("Name", no_wrap=True)
    table.add_column("Source")
    table.add_column("Location")
    table.add_column("Rank", justify="right")
    for s in catalog:
        table.add_row(
            s.name,
            s.source.label,
            s.source.location,
            str(skills.priority_rank(s.source.label, priority)),
        )
    _rich_console.Console().print(table)

    if duplicates and dups:
        _click.echo("Shadowed copies:")
        for d in dups:
            same = " (identical)" if d.identical else ""
            _click.echo(f"  {d.name}: {d.skipped.source.label} -> kept {d.kept.source.label}{same}")


# =============================================================================
# Pins
# =============================================================================


@cli.command(name="list-pinned")
@_click.pass_context
def list_pinned(ctx: _click.Context) -> None:
    """Show manually pinned skills."""
    pins = state.PinStore(state.pinned_file(_state_dir(ctx))).load()
    if not pins:
        _click.echo("(no pinned skills)")
        return
    for name in sorted(pins):
        _click.echo(name)


@cli.command()
@_click.argument("names", nargs=-1, required=True)
@_click.pass_context
def pin(ctx: _click.Context, names: tuple[str, ...]) -> None:
    """Pin skills so they load on every prompt."""
    catalog, _, _ = _discover(ctx)
    resolved = _resolve_names(names, catalog)
    state.PinStore(state.pinned_file(_state_dir(ctx))).pin(resolved)
    _click.echo(f"Pinned: {', '.join(resolved)}")


@cli.command()
@_click.argument("names", nargs=-1, required=True)
@_click.pass_context
def unpin(ctx: _click.Context, names: tuple[str, ...]) -> None:
    """Remove manual pins."""
    store = state.PinStore(state.pinned_file(_state_dir(ctx)))
    current = store.load()
    targets = set(names)
    # Accept the same directory shorthand as pin
    targets.update(f"{n.rstrip('/')}/{constants.SKILL_FILE_NAME}" for n in names)
    removed = sorted(current & targets)
    store.unpin(targets)
    if removed:
        _click.echo(f"Unpinned: {', '.join(removed)}")
    else:
        _click.echo("Nothing to unpin.")


@cli.command(name="auto-pin")
@_click.option("--enable/--disable", default=None, help="Turn history-based pinning on or off")
@_click.pass_context
def auto_pin(ctx: _click.Context, enable: bool | None) -> None:
    """Show or set history-based auto-pinning."""
    flag = state.AutoPinFlag(state.auto_pin_file(_state_dir(ctx)))
    if enable is not None:
        flag.save(enable)
    _click.echo(f"auto-pin: {'enabled' if flag.load() else 'disabled'}")


# =============================================================================
# History
# =============================================================================


def _format_ts(ts: int) -> str:
    return _datetime.datetime.fromtimestamp(ts, tz=_datetime.timezone.utc).strftime(
        "%Y-%m-%dT%H:%M:%SZ"
    )


@cli.command()
@_click.option("--limit", type=_click.IntRange(min=1), default=10, show_default=True)
@_click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@_click.pass_context
def history(ctx: _click.Context, limit: int, json_output: bool) -> None:
    """Show recent autoload renders, newest first."""
    settings = _settings(ctx)
    store = state.HistoryStore(state.history_file(_state_dir(ctx)), settings.history.limit)
    entries = state.recent(store.load(), limit)

    if json_output:
        _click.echo(_json.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        _click.echo("(no history)")
        return
    for entry in entries:
        _click.echo(f"{_format_ts(entry.ts)} | {', '.join(entry.skills)}")


# =============================================================================
# Autoload
# =============================================================================


def _read_args_json(value: str | None) -> autoload.AutoloadArgs:
    text = _sys.stdin.read() if value == "-" else value
    try:
        return autoload.AutoloadArgs.from_json(text)
    except _pydantic.ValidationError as e:
        raise _click.BadParameter(str(e), param_hint="--args-json") from None


@cli.command(name="emit-autoload")
@_click.option("--prompt", type=str, default=None, help="Prompt text to match skills against")
@_click.option("--max-bytes", type=_click.IntRange(min=0), default=None, help="Byte budget")
@_click.option(
    "--embed-threshold",
    type=_click.FloatRange(0.0, 1.0),
    default=None,
    help="Similarity threshold for prompt matches (0-1)",
)
@_click.option("--include-claude/--no-include-claude", default=None, help="Render Claude skills")
@_click.option("--auto-pin/--no-auto-pin", "auto_pin_opt", default=None, help="Pin from history")
@_click.option("--diagnose", is_flag=True, default=None, help="Append a diagnostics block")
@_click.option(
    "--args-json",
    type=str,
    default=None,
    help="Options as a JSON object ('-' reads stdin); flags take precedence",
)
@_click.pass_context
def emit_autoload(
    ctx: _click.Context,
    prompt: str | None,
    max_bytes: int | None,
    embed_threshold: float | None,
    include_claude: bool | None,
    auto_pin_opt: bool | None,
    diagnose: bool | None,
    args_json: str | None,
) -> None:
    """
    Print the autoload hook payload as JSON.

    \b
    Examples:
        skrills emit-autoload --prompt "write pytest fixtures"
        echo '{"prompt": "fix ci", "max_bytes": 4000}' | skrills emit-autoload --args-json -
    """
    args = _read_args_json(args_json).merged(
        prompt=prompt,
        max_bytes=max_bytes,
        embed_threshold=embed_threshold,
        include_claude=include_claude,
        auto_pin=auto_pin_opt,
        diagnose=diagnose or None,
    )
    settings = _settings(ctx)
    with _reporting_errors():
        cache = state.RuntimeOverridesCache(
            state.runtime_overrides_file(settings.resolved_state_dir())
        )
        envelope = autoload.emit_autoload(
            args, settings, runtime=cache, extra_dirs=ctx.obj["skill_dirs"]
        )
    _click.echo(_json.dumps(envelope))


# =============================================================================
# Sync
# =============================================================================


@cli.command(name="sync")
@_click.option("--json", "json_output", is_flag=True, help="Output the report as JSON")
@_click.pass_context
def sync_cmd(ctx: _click.Context, json_output: bool) -> None:
    """Mirror ~/.claude/skills into ~/.codex/skills-mirror."""
    with _reporting_errors():
        home = state.home_dir()
    report = sync.sync_from_claude(home / ".claude" / "skills", home / ".codex" / "skills-mirror")
    if json_output:
        _click.echo(_json.dumps(report.to_dict(), indent=2))
        if report.failed:
            raise SystemExit(1)
        return
    _click.echo(f"copied: {report.copied}, skipped: {report.skipped}")
    for name in report.copied_names:
        _click.echo(f"  + {name}")
    for name in report.failed:
        _click.echo(f"  ! {name}", err=True)
    if report.failed:
        raise SystemExit(1)


@cli.command(name="sync-agents")
@_click.option(
    "--path",
    type=_click.Path(dir_okay=False, path_type=_pathlib.Path),
    default=None,
    help="AGENTS.md to update (default: in the state directory)",
)
@_click.pass_context
def sync_agents(ctx: _click.Context, path: _pathlib.Path | None) -> None:
    """Write the available-skills listing into AGENTS.md."""
    catalog, _, priority = _discover(ctx)
    target = path or state.agents_manifest_file(_state_dir(ctx))
    sync.sync_agents_with_skills(target, catalog, priority)
    _click.echo(f"Wrote {len(catalog)} skills to {target}")


# =============================================================================
# Runtime overrides
# =============================================================================


@cli.command(name="runtime-status")
@_click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@_click.pass_context
def runtime_status(ctx: _click.Context, json_output: bool) -> None:
    """Show runtime overrides and the effective render settings."""
    settings = _settings(ctx)
    overrides = state.RuntimeOverrides.load(state.runtime_overrides_file(_state_dir(ctx)))
    effective = {
        "manifest_first": overrides.effective_manifest_first(settings.manifest),
        "render_mode_log": overrides.effective_render_mode_log(settings.manifest),
        "manifest_minimal": overrides.effective_manifest_minimal(settings.manifest),
    }

    if json_output:
        data = {"overrides": overrides.model_dump(), "effective": effective}
        _click.echo(_json.dumps(data, indent=2))
        return

    raw = overrides.model_dump()
    for key, value in effective.items():
        source = "default" if raw[key] is None else "override"
        _click.echo(f"{key}: {str(value).lower()} ({source})")


@cli.command(name="set-runtime-options")
@_click.option("--manifest-first/--no-manifest-first", default=None, help="Render manifest only")
@_click.option(
    "--manifest-minimal/--no-manifest-minimal", default=None, help="Name-only manifest entries"
)
@_click.option("--render-mode-log/--no-render-mode-log", default=None, help="Log the render mode")
@_click.option("--reset", is_flag=True, help="Clear all overrides first")
@_click.pass_context
def set_runtime_options(
    ctx: _click.Context,
    manifest_first: bool | None,
    manifest_minimal: bool | None,
    render_mode_log: bool | None,
    reset: bool,
) -> None:
    """Persist runtime overrides for manifest rendering."""
    path = state.runtime_overrides_file(_state_dir(ctx))
    current = state.RuntimeOverrides() if reset else state.RuntimeOverrides.load(path)
    updated = current.merged(
        manifest_first=manifest_first,
        manifest_minimal=manifest_minimal,
        render_mode_log=render_mode_log,
    )
    updated.save(path)
    _click.echo(_json.dumps(updated.model_dump(), indent=2))


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="skrills")


if __name__ == "__main__":
    main()
