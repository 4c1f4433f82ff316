"""
Skill records and SKILL.md parsing.

A skill is a single SKILL.md file. Records are cheap to build: the file is
only read (and hashed) when something asks for its text or hash, so copies
dropped during deduplication are never touched.

Frontmatter is optional. When present it is YAML between ``---`` fences and
may carry a ``name`` and ``description``; anything else is preserved but
ignored.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import functools as _functools
import hashlib as _hashlib
import logging as _logging
import pathlib as _pathlib
import re as _re
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import skrills.constants as constants
import skrills.skills.source as source_module

_logger = _logging.getLogger(__name__)

# Regex to extract YAML frontmatter from markdown
_FRONTMATTER_RE = _re.compile(
    r"^---\s*\n(.*?)\n---\s*\n?(.*)$",
    _re.DOTALL,
)

_HASH_CHUNK = 64 * 1024


class SkillFrontmatter(_pydantic.BaseModel):
    """
    Frontmatter parsed from a SKILL.md file.

    Unlike authored skill packages, mirrored and ad hoc skills often have
    no frontmatter at all, so every field is optional.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    name: str | None = _pydantic.Field(
        default=None,
        max_length=128,
        description="Display name declared by the skill author",
    )

    description: str | None = _pydantic.Field(
        default=None,
        description="What the skill does and when to use it",
    )


def parse_skill_markdown(content: str) -> tuple[SkillFrontmatter | None, str]:
    """
    Split a SKILL.md document into frontmatter and body.

    Args:
        content: Raw markdown content.

    Returns:
        Tuple of (frontmatter or None, body). Missing or malformed
        frontmatter yields None and the whole document as body.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None, content.strip()

    body = match.group(2).strip()
    try:
        data = _yaml.safe_load(match.group(1)) or {}
        if not isinstance(data, dict):
            return None, content.strip()
        return SkillFrontmatter.model_validate(data), body
    except (_yaml.YAMLError, _pydantic.ValidationError) as e:
        _logger.debug("Ignoring malformed frontmatter: %s", e)
        return None, content.strip()


def hash_file(path: _pathlib.Path) -> str:
    """SHA-256 hex digest of a file's bytes."""
    digest = _hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_HASH_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def skill_name(root: _pathlib.Path, path: _pathlib.Path) -> str:
    """Skill name: path relative to its root, with '/' separators."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


@_dataclasses.dataclass(eq=False)
class SkillMeta:
    """
    A discovered skill document.

    The name is directory-qualified (``alpha/SKILL.md``) so skills that
    share a file name in different folders stay distinct.
    """

    name: str
    """Path relative to the source root, e.g. 'alpha/SKILL.md'."""

    path: _pathlib.Path
    """Absolute location of the SKILL.md file."""

    source: source_module.SkillSource
    """Root this skill was discovered under."""

    root: _pathlib.Path
    """The root directory itself."""

    @classmethod
    def from_path(
        cls,
        path: _pathlib.Path,
        root: _pathlib.Path,
        source: source_module.SkillSource,
    ) -> SkillMeta:
        return cls(name=skill_name(root, path), path=path, source=source, root=root)

    @_functools.cached_property
    def hash(self) -> str:
        """Content hash, computed on first access."""
        return hash_file(self.path)

    @_functools.cached_property
    def _text(self) -> str:
        return self.path.read_text(encoding="utf-8", errors="replace")

    def read_text(self) -> str:
        """
        Full file text.

        Raises:
            OSError: If the file cannot be read.
        """
        return self._text

    @_functools.cached_property
    def _parsed(self) -> tuple[SkillFrontmatter | None, str]:
        try:
            return parse_skill_markdown(self.read_text())
        except OSError as e:
            _logger.debug("Cannot read skill %s: %s", self.path, e)
            return None, ""

    @property
    def frontmatter(self) -> SkillFrontmatter | None:
        return self._parsed[0]

    @property
    def body(self) -> str:
        return self._parsed[1]

    @property
    def description(self) -> str:
        fm = self.frontmatter
        return fm.description if fm and fm.description else ""

    @property
    def directory(self) -> str:
        """Name without the trailing file name ('alpha/SKILL.md' -> 'alpha')."""
        suffix = "/" + constants.SKILL_FILE_NAME
        if self.name.endswith(suffix):
            return self.name[: -len(suffix)]
        return "" if self.name == constants.SKILL_FILE_NAME else self.name

    @property
    def descriptive_text(self) -> str:
        """Text used for relevance scoring: name, description and body."""
        parts = [self.directory.replace("/", " ").replace("-", " ")]
        fm = self.frontmatter
        if fm and fm.name:
            parts.append(fm.name)
        if self.description:
            parts.append(self.description)
        parts.append(self.body)
        return "\n".join(p for p in parts if p)

    def is_readable(self) -> bool:
        try:
            self.read_text()
        except OSError:
            return False
        return True

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "source": self.source.label,
            "location": self.source.location,
            "root": str(self.root),
            "description": self.description,
        }

    def __repr__(self) -> str:
        return f"SkillMeta(name={self.name!r}, source={self.source.label!r})"
