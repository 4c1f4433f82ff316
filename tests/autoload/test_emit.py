"""Tests for the end-to-end autoload invocation."""

import json as _json
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pytest as _pytest

import skrills.autoload.emit as emit
import skrills.config as config
import skrills.state as state

WriteSkill = _typing.Callable[..., _pathlib.Path]


def _context(envelope: dict[str, _typing.Any]) -> str:
    output = envelope["hookSpecificOutput"]
    assert output["hookEventName"] == "UserPromptSubmit"
    context: str = output["additionalContext"]
    return context


@_pytest.fixture
def codex_skills(home: _pathlib.Path, write_skill: WriteSkill) -> _pathlib.Path:
    root = home / ".codex" / "skills"
    write_skill(root, "docker-compose", "Run services with docker compose.")
    write_skill(root, "tool-foo", "Foo tool usage notes.")
    write_skill(root, "sourdough", "Bake bread with a starter.")
    return root


class TestAutoloadArgs:
    def test_blank_json(self) -> None:
        assert emit.AutoloadArgs.from_json("  ") == emit.AutoloadArgs()

    def test_parses_fields(self) -> None:
        args = emit.AutoloadArgs.from_json('{"prompt": "hi", "max_bytes": 10, "unknown": 1}')
        assert args.prompt == "hi"
        assert args.max_bytes == 10

    def test_rejects_invalid_values(self) -> None:
        with _pytest.raises(_pydantic.ValidationError):
            emit.AutoloadArgs.from_json('{"embed_threshold": 2}')
        with _pytest.raises(_pydantic.ValidationError):
            emit.AutoloadArgs.from_json("not json")

    def test_merged_skips_none(self) -> None:
        args = emit.AutoloadArgs(prompt="a").merged(prompt=None, max_bytes=5)
        assert args.prompt == "a"
        assert args.max_bytes == 5


class TestEmitAutoload:
    """Full pipeline against an isolated home directory."""

    def test_prompt_match(self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path) -> None:
        settings = config.Settings.construct_without_dotenv()
        envelope = emit.emit_autoload(emit.AutoloadArgs(prompt="docker"), settings, now=42)

        context = _context(envelope)
        assert "Run services with docker compose." in context
        assert "Bake bread" not in context

        saved = _json.loads((state_dir / "skills-history.json").read_text())
        assert saved == [{"ts": 42, "skills": ["docker-compose/SKILL.md"]}]

    def test_no_prompt_no_pins_is_empty_but_recorded(
        self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path
    ) -> None:
        settings = config.Settings.construct_without_dotenv()
        envelope = emit.emit_autoload(emit.AutoloadArgs(), settings, now=1)
        assert _context(envelope) == ""
        history = state.HistoryStore(state.history_file(state_dir)).load()
        assert history == [state.HistoryEntry(ts=1, skills=[])]

    def test_auto_pin_from_history(
        self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path
    ) -> None:
        """A skill in 2 of the last 5 renders is pinned when auto-pin is on."""
        store = state.HistoryStore(state.history_file(state_dir))
        for ts, names in enumerate(
            [["tool-foo/SKILL.md"], [], ["tool-foo/SKILL.md"], [], []]
        ):
            store.record(names, ts=ts)

        settings = config.Settings.construct_without_dotenv()
        result = emit.run_autoload(emit.AutoloadArgs(auto_pin=True), settings)
        assert result.matched == ["tool-foo/SKILL.md"]

        result = emit.run_autoload(emit.AutoloadArgs(auto_pin=False), settings)
        assert result.matched == []

    def test_persisted_auto_pin_flag_is_default(
        self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path
    ) -> None:
        store = state.HistoryStore(state.history_file(state_dir))
        store.record(["sourdough/SKILL.md"], ts=1)
        store.record(["sourdough/SKILL.md"], ts=2)
        state.AutoPinFlag(state.auto_pin_file(state_dir)).save(True)

        settings = config.Settings.construct_without_dotenv()
        result = emit.run_autoload(emit.AutoloadArgs(), settings)
        assert result.matched == ["sourdough/SKILL.md"]

    def test_manual_and_env_pins(
        self,
        codex_skills: _pathlib.Path,
        state_dir: _pathlib.Path,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        state.PinStore(state.pinned_file(state_dir)).pin(["sourdough/SKILL.md"])
        monkeypatch.setenv("SKRILLS_PINNED", "tool-foo/SKILL.md")

        settings = config.Settings.construct_without_dotenv()
        result = emit.run_autoload(emit.AutoloadArgs(), settings)
        assert sorted(result.matched) == ["sourdough/SKILL.md", "tool-foo/SKILL.md"]
        # Environment pins are never persisted
        assert state.PinStore(state.pinned_file(state_dir)).load() == {"sourdough/SKILL.md"}

    def test_preload_from_agents_manifest(
        self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path
    ) -> None:
        (state_dir / "AGENTS.md").write_text("Always load `sourdough`.\n")
        settings = config.Settings.construct_without_dotenv()
        result = emit.run_autoload(emit.AutoloadArgs(), settings)
        assert result.matched == ["sourdough/SKILL.md"]

    def test_prompt_from_environment(
        self, codex_skills: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SKRILLS_PROMPT", "bread")
        settings = config.Settings.construct_without_dotenv()
        result = emit.run_autoload(emit.AutoloadArgs(), settings)
        assert result.matched == ["sourdough/SKILL.md"]

    def test_manifest_first_override(
        self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path
    ) -> None:
        settings = config.Settings.construct_without_dotenv()
        overrides = state.RuntimeOverrides(manifest_first=True, manifest_minimal=True)
        envelope = emit.emit_autoload(
            emit.AutoloadArgs(prompt="docker"), settings, runtime=overrides
        )
        assert _context(envelope) == (
            '<available_skills>\n  <skill name="docker-compose/SKILL.md" />\n</available_skills>'
        )

    def test_runtime_cache_is_used(
        self, codex_skills: _pathlib.Path, state_dir: _pathlib.Path
    ) -> None:
        path = state.runtime_overrides_file(state_dir)
        state.RuntimeOverrides(manifest_first=True).save(path)
        cache = state.RuntimeOverridesCache(path)
        settings = config.Settings.construct_without_dotenv()

        envelope = emit.emit_autoload(
            emit.AutoloadArgs(prompt="docker"), settings, runtime=cache
        )
        assert "Run services" not in _context(envelope)
        assert 'source="codex"' in _context(envelope)

    def test_budget_from_args(self, codex_skills: _pathlib.Path) -> None:
        settings = config.Settings.construct_without_dotenv()
        result = emit.run_autoload(
            emit.AutoloadArgs(prompt="docker", max_bytes=0), settings
        )
        assert result.payload == ""

    def test_claude_skills_need_flag(
        self, home: _pathlib.Path, write_skill: WriteSkill
    ) -> None:
        write_skill(home / ".claude" / "skills", "claude-only", "Claude docker helper.")
        settings = config.Settings.construct_without_dotenv()

        result = emit.run_autoload(emit.AutoloadArgs(prompt="docker"), settings)
        assert result.matched == []

        result = emit.run_autoload(
            emit.AutoloadArgs(prompt="docker", include_claude=True), settings
        )
        assert result.matched == ["claude-only/SKILL.md"]

    def test_disabled_claude_copy_does_not_shadow_pin(
        self,
        home: _pathlib.Path,
        write_skill: WriteSkill,
        monkeypatch: _pytest.MonkeyPatch,
    ) -> None:
        write_skill(home / ".claude" / "skills", "x", "claude copy")
        write_skill(home / ".agent" / "skills", "x", "agent copy")
        monkeypatch.setenv("SKRILLS_PINNED", "x/SKILL.md")
        settings = config.Settings.construct_without_dotenv()

        result = emit.run_autoload(emit.AutoloadArgs(diagnose=True), settings)
        assert result.matched == ["x/SKILL.md"]
        assert "agent copy" in result.payload
        assert "claude copy" not in result.payload
        assert result.diagnostics.duplicates == []

        result = emit.run_autoload(
            emit.AutoloadArgs(diagnose=True, include_claude=True), settings
        )
        assert "claude copy" in result.payload

    def test_extra_dirs(
        self, home: _pathlib.Path, tmp_path: _pathlib.Path, write_skill: WriteSkill
    ) -> None:
        extra = tmp_path / "extra-skills"
        write_skill(extra, "kubectl", "kubernetes cluster commands")
        settings = config.Settings.construct_without_dotenv()

        result = emit.run_autoload(
            emit.AutoloadArgs(prompt="kubernetes"), settings, extra_dirs=[str(extra)]
        )
        assert result.matched == ["kubectl/SKILL.md"]
        assert 'source="extra0"' in result.payload

    def test_diagnose_appends_block(
        self, home: _pathlib.Path, write_skill: WriteSkill
    ) -> None:
        write_skill(home / ".codex" / "skills", "shared", "docker codex")
        write_skill(home / ".agent" / "skills", "shared", "docker agent")
        settings = config.Settings.construct_without_dotenv()

        envelope = emit.emit_autoload(
            emit.AutoloadArgs(prompt="docker", diagnose=True), settings
        )
        context = _context(envelope)
        payload, _, block = context.partition("\n\n<!-- skrills diagnostics")
        assert "docker codex" in payload
        assert "shared/SKILL.md: kept codex" in block
        assert "+ shared/SKILL.md: prompt match" in block
