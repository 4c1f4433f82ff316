"""
Shared pytest fixtures for Skrills tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import skrills.config as config
import skrills.skills as skills


def _is_skrills_key(key: str) -> bool:
    return key.startswith("SKRILLS_")


@_pytest.fixture
def home(tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> _pathlib.Path:
    """
    A fresh home directory with SKRILLS_* variables cleared.

    The working directory is moved to an empty project directory so the
    project-local skill roots and config are under test control too.
    """
    for key in list(_os.environ):
        if _is_skrills_key(key):
            monkeypatch.delenv(key)

    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))

    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return home_dir


@_pytest.fixture
def project(home: _pathlib.Path) -> _pathlib.Path:
    """The project directory used as cwd by the ``home`` fixture."""
    return home.parent / "project"


@_pytest.fixture
def state_dir(home: _pathlib.Path) -> _pathlib.Path:
    """Default state directory (~/.codex) inside the isolated home."""
    return home / ".codex"


@_pytest.fixture
def clean_settings(home: _pathlib.Path) -> config.Settings:
    """Settings built from defaults only (isolated home, no SKRILLS_* env)."""
    return config.Settings.construct_without_dotenv()


def write_skill_file(
    root: _pathlib.Path,
    rel_dir: str,
    body: str = "Skill body.",
    *,
    name: str | None = None,
    description: str | None = None,
) -> _pathlib.Path:
    """Create ``root/rel_dir/SKILL.md`` with optional frontmatter."""
    directory = root / rel_dir if rel_dir else root
    directory.mkdir(parents=True, exist_ok=True)
    frontmatter = ""
    if name is not None or description is not None:
        lines = ["---"]
        if name is not None:
            lines.append(f"name: {name}")
        if description is not None:
            lines.append(f"description: {description}")
        lines.append("---")
        frontmatter = "\n".join(lines) + "\n"
    path = directory / "SKILL.md"
    path.write_text(frontmatter + body + "\n", encoding="utf-8")
    return path


@_pytest.fixture
def write_skill() -> _typing.Callable[..., _pathlib.Path]:
    """Factory writing SKILL.md files (see write_skill_file)."""
    return write_skill_file


@_pytest.fixture
def make_skill(
    tmp_path: _pathlib.Path,
) -> _typing.Callable[..., skills.SkillMeta]:
    """
    Factory for on-disk SkillMeta records.

    Usage:
        skill = make_skill("alpha", body="Use for alpha work", kind=skills.SourceKind.CODEX)
    """

    def _create(
        rel_dir: str,
        body: str = "Skill body.",
        *,
        kind: skills.SourceKind = skills.SourceKind.CODEX,
        index: int = 0,
        description: str | None = None,
    ) -> skills.SkillMeta:
        source = skills.SkillSource(kind, index)
        root = tmp_path / "roots" / source.label
        path = write_skill_file(root, rel_dir, body, description=description)
        return skills.SkillMeta.from_path(path, root, source)

    return _create
