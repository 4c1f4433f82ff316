"""
Relevance scoring of skills against a prompt.

A skill is relevant when it is named by a preload term (always wins), or
when its text is similar enough to the prompt. Similarity is pluggable:
anything implementing ``Similarity`` can replace the default lexical
scorer without changing the rest of the pipeline.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import functools as _functools
import re as _re
import typing as _typing

import skrills.skills.skill as skill_module

_WORD_RE = _re.compile(r"[a-z0-9][a-z0-9_]*")

_MIN_TOKEN_LENGTH = 3

_STOPWORDS = frozenset(
    """
    the and for with that this from into your you are was were will would can
    could should have has had not but all any our out use using how what when
    where which who why please about there their them then than also just
    """.split()
)


class Verdict(_enum.Enum):
    """Outcome of relevance scoring."""

    PRELOAD_MATCH = "preload"
    PROMPT_MATCH = "prompt"
    NO_MATCH = "none"


@_dataclasses.dataclass(frozen=True)
class Relevance:
    """Verdict plus the similarity score behind it (0.0 when not scored)."""

    verdict: Verdict
    score: float = 0.0


class Similarity(_typing.Protocol):
    """Scores how well ``text`` answers ``query`` on a 0..1 scale."""

    def __call__(self, query: str, text: str) -> float: ...


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens worth matching on."""
    return [
        t
        for t in _WORD_RE.findall(text.lower())
        if len(t) >= _MIN_TOKEN_LENGTH and t not in _STOPWORDS
    ]


@_functools.lru_cache(maxsize=4096)
def _bigrams(word: str) -> frozenset[str]:
    return frozenset(word[i : i + 2] for i in range(len(word) - 1))


def dice_coefficient(a: str, b: str) -> float:
    """Sorensen-Dice similarity of two words over character bigrams."""
    if a == b:
        return 1.0
    ba, bb = _bigrams(a), _bigrams(b)
    if not ba or not bb:
        return 0.0
    return 2.0 * len(ba & bb) / (len(ba) + len(bb))


class LexicalSimilarity:
    """
    Cheap typo-tolerant keyword matching.

    Each prompt token scores 1.0 when it appears verbatim in the skill text,
    otherwise its best bigram Dice coefficient against the skill's tokens.
    The overall score is the best token score.
    """

    def __init__(self, max_length_delta: int = 2) -> None:
        self._max_length_delta = max_length_delta

    def __call__(self, query: str, text: str) -> float:
        query_tokens = set(tokenize(query))
        if not query_tokens:
            return 0.0
        text_tokens = set(tokenize(text))
        if not text_tokens:
            return 0.0

        best = 0.0
        for q in query_tokens:
            if q in text_tokens:
                return 1.0
            for t in text_tokens:
                if abs(len(q) - len(t)) > self._max_length_delta:
                    continue
                best = max(best, dice_coefficient(q, t))
        return best


def preload_keys(skill: skill_module.SkillMeta) -> set[str]:
    """Identifiers under which a preload term can name ``skill``."""
    keys = {skill.name.lower()}
    directory = skill.directory
    if directory:
        keys.add(directory.lower())
        keys.add(directory.rsplit("/", 1)[-1].lower())
    fm = skill.frontmatter
    if fm and fm.name:
        keys.add(fm.name.lower())
    return keys


class RelevanceEngine:
    """Assigns a Verdict to each skill for one prompt."""

    def __init__(self, similarity: Similarity | None = None) -> None:
        self._similarity: Similarity = similarity or LexicalSimilarity()

    def assess(
        self,
        skill: skill_module.SkillMeta,
        prompt: str | None,
        threshold: float,
        preload_terms: _typing.Collection[str] = (),
    ) -> Relevance:
        """
        Score one skill.

        Args:
            skill: Skill to score.
            prompt: Free-text prompt; blank or None never matches.
            threshold: Minimum similarity (0..1) for a prompt match.
            preload_terms: Reference tokens that force inclusion (case-insensitive).

        Returns:
            Relevance with verdict and score.
        """
        terms = {t.lower() for t in preload_terms}
        if terms and not preload_keys(skill).isdisjoint(terms):
            return Relevance(Verdict.PRELOAD_MATCH, 1.0)

        if not prompt or not prompt.strip():
            return Relevance(Verdict.NO_MATCH)

        score = float(self._similarity(prompt, skill.descriptive_text))
        if score >= threshold:
            return Relevance(Verdict.PROMPT_MATCH, score)
        return Relevance(Verdict.NO_MATCH, score)

    def score(
        self,
        skill: skill_module.SkillMeta,
        prompt: str | None,
        threshold: float,
        preload_terms: _typing.Collection[str] = (),
    ) -> Verdict:
        """Verdict only (see assess)."""
        return self.assess(skill, prompt, threshold, preload_terms).verdict

    def assess_all(
        self,
        skills: _typing.Iterable[skill_module.SkillMeta],
        prompt: str | None,
        threshold: float,
        preload_terms: _typing.Collection[str] = (),
    ) -> dict[str, Relevance]:
        """Relevance for every skill, keyed by name."""
        terms = frozenset(t.lower() for t in preload_terms)
        return {s.name: self.assess(s, prompt, threshold, terms) for s in skills}
