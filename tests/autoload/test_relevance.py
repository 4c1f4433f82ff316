"""Tests for relevance scoring."""

import typing as _typing

import pytest as _pytest

import skrills.autoload.relevance as relevance
import skrills.skills as skills

MakeSkill = _typing.Callable[..., skills.SkillMeta]


class TestTokenize:
    def test_drops_short_tokens_and_stopwords(self) -> None:
        assert relevance.tokenize("How do I use the PDF extractor?") == ["pdf", "extractor"]


class TestDiceCoefficient:
    def test_identical(self) -> None:
        assert relevance.dice_coefficient("pytest", "pytest") == 1.0

    def test_typo_scores_high(self) -> None:
        assert relevance.dice_coefficient("pytset", "pytest") > 0.3

    def test_unrelated_scores_low(self) -> None:
        assert relevance.dice_coefficient("docker", "pytest") < 0.2


class TestLexicalSimilarity:
    def test_exact_token_hit(self) -> None:
        sim = relevance.LexicalSimilarity()
        assert sim("write some pytest fixtures", "Pytest fixture patterns") == 1.0

    def test_no_overlap(self) -> None:
        sim = relevance.LexicalSimilarity()
        assert sim("kubernetes deployment", "watercolor painting") < 0.3

    def test_empty_query(self) -> None:
        assert relevance.LexicalSimilarity()("a an", "anything") == 0.0


class _FixedSimilarity:
    def __init__(self, value: float) -> None:
        self.value = value
        self.calls: list[tuple[str, str]] = []

    def __call__(self, query: str, text: str) -> float:
        self.calls.append((query, text))
        return self.value


class TestRelevanceEngine:
    """Verdict precedence and thresholds."""

    def test_preload_match_wins_regardless_of_prompt(self, make_skill: MakeSkill) -> None:
        skill = make_skill("python-testing")
        sim = _FixedSimilarity(0.0)
        engine = relevance.RelevanceEngine(sim)

        rel = engine.assess(skill, "", 0.99, ["Python-Testing"])

        assert rel.verdict is relevance.Verdict.PRELOAD_MATCH
        assert sim.calls == []

    @_pytest.mark.parametrize(
        "term", ["group/tool/SKILL.md", "group/tool", "tool", "Fancy Tool"]
    )
    def test_preload_keys(self, make_skill: MakeSkill, term: str) -> None:
        skill = make_skill("group/tool", "---\nname: Fancy Tool\n---\nbody")
        verdict = relevance.RelevanceEngine().score(skill, None, 0.5, [term])
        assert verdict is relevance.Verdict.PRELOAD_MATCH

    def test_blank_prompt_never_matches(self, make_skill: MakeSkill) -> None:
        engine = relevance.RelevanceEngine(_FixedSimilarity(1.0))
        assert engine.score(make_skill("a"), "   ", 0.0) is relevance.Verdict.NO_MATCH

    def test_threshold_is_inclusive(self, make_skill: MakeSkill) -> None:
        skill = make_skill("a")
        engine = relevance.RelevanceEngine(_FixedSimilarity(0.4))
        assert engine.score(skill, "query", 0.4) is relevance.Verdict.PROMPT_MATCH
        assert engine.score(skill, "query", 0.41) is relevance.Verdict.NO_MATCH

    def test_prompt_match_reports_score(self, make_skill: MakeSkill) -> None:
        skill = make_skill("pdf-tools", "Extract tables from PDF documents.")
        rel = relevance.RelevanceEngine().assess(skill, "extract a pdf table", 0.3)
        assert rel.verdict is relevance.Verdict.PROMPT_MATCH
        assert rel.score == 1.0

    def test_unreadable_skill_scores_zero(self, make_skill: MakeSkill) -> None:
        skill = make_skill("zzz-unique", "quantum entanglement")
        skill.path.unlink()
        rel = relevance.RelevanceEngine().assess(skill, "quantum", 0.3)
        assert rel.verdict is relevance.Verdict.NO_MATCH

    def test_assess_all_keys_by_name(self, make_skill: MakeSkill) -> None:
        a = make_skill("a", "docker compose")
        b = make_skill("b", "sourdough bread")
        result = relevance.RelevanceEngine().assess_all([a, b], "docker", 0.5)
        assert result[a.name].verdict is relevance.Verdict.PROMPT_MATCH
        assert result[b.name].verdict is relevance.Verdict.NO_MATCH
