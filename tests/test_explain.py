"""
Tests for explanation generation and skill analysis.
"""

import pytest

from conftest import EXPLANATION_PROMPT_MARKER, FakeClient, failing
from jobmatch.explain import NO_ANALYSIS, NO_DETAILS, ExplanationGenerator, truncate_explanation
from jobmatch.models import CandidateProfile, JobPosting
from jobmatch.skills import parse_skills


JOB = JobPosting(id="j1", title="Data Analyst", description="Dashboards", required_skills="SQL,Tableau")
CANDIDATE = CandidateProfile(
    id="c1",
    skills="SQL, Python",
    major="Economics",
    university="State University",
    graduation_year=2024,
)


def explain(generator):
    return generator.explain(JOB, parse_skills(JOB.required_skills), CANDIDATE, parse_skills(CANDIDATE.skills))


class TestTruncateExplanation:
    def test_short_text_unchanged(self):
        assert truncate_explanation("Good fit.", limit=20) == "Good fit."

    def test_exact_limit_unchanged(self):
        assert truncate_explanation("x" * 2000) == "x" * 2000

    def test_long_text_is_cut_with_marker(self):
        result = truncate_explanation("y" * 2500)
        assert len(result) == 2000
        assert result == "y" * 1997 + "..."


class TestExplanationGenerator:
    """Test the narrative produced for each match."""

    def test_returns_model_text(self):
        generator = ExplanationGenerator(FakeClient(lambda p: "Strong SQL overlap."))
        assert explain(generator) == "Strong SQL overlap."

    def test_prompt_contents(self):
        client = FakeClient(lambda p: "ok")
        explain(ExplanationGenerator(client))

        prompt = client.prompts[0]
        assert EXPLANATION_PROMPT_MARKER in prompt
        assert "max 1500 characters" in prompt
        assert "University: State University" in prompt
        assert "Graduation Year: 2024" in prompt
        assert "SQL, Tableau" in prompt

    def test_failure_gives_placeholder(self, metrics):
        assert explain(ExplanationGenerator(FakeClient(failing))) == NO_DETAILS
        assert metrics.get_metrics()["fallbacks"]["explanation"] == 1

    def test_unexpected_error_gives_placeholder(self):
        def boom(prompt):
            raise KeyError("candidates")

        assert explain(ExplanationGenerator(FakeClient(boom))) == NO_DETAILS

    def test_long_reply_is_truncated(self):
        generator = ExplanationGenerator(FakeClient(lambda p: "z" * 5000))
        result = explain(generator)
        assert len(result) == 2000
        assert result.endswith("...")

    def test_custom_limit(self):
        client = FakeClient(lambda p: "abcdefghij")
        result = explain(ExplanationGenerator(client, max_chars=8))
        assert result == "abcde..."
        assert "max 8 characters" in client.prompts[0]


class TestAnalyzeSkills:
    def test_returns_analysis(self):
        client = FakeClient(lambda p: "You cover SQL; learn Tableau.")
        result = ExplanationGenerator(client).analyze_skills(parse_skills("SQL"), parse_skills("SQL,Tableau"))
        assert result == "You cover SQL; learn Tableau."
        assert "CANDIDATE SKILLS:\nSQL" in client.prompts[0]
        assert "JOB REQUIRED SKILLS:\nSQL, Tableau" in client.prompts[0]

    def test_no_api_key_skips_call(self):
        client = FakeClient(api_key=False)
        result = ExplanationGenerator(client).analyze_skills(parse_skills("SQL"), parse_skills("Go"))
        assert result == NO_ANALYSIS
        assert client.prompts == []

    def test_failure_gives_placeholder(self):
        generator = ExplanationGenerator(FakeClient(failing))
        assert generator.analyze_skills(parse_skills("SQL"), parse_skills("Go")) == NO_ANALYSIS


class TestExplanationLimit:
    def test_limit_above_column_width_is_capped(self):
        """Explanations never exceed the 2000-character stored limit."""
        generator = ExplanationGenerator(FakeClient(lambda p: "w" * 3000), max_chars=5000)

        result = explain(generator)

        assert generator.max_chars == 2000
        assert len(result) == 2000
        assert result.endswith("...")
