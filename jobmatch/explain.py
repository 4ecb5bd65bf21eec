"""Human-readable match explanations from the AI collaborator."""
from __future__ import annotations

from .config import EXPLANATION_MAX_CHARS
from .errors import ExternalServiceError, ParseError
from .logger import get_logger
from .models import CandidateProfile, JobPosting
from .prompts import build_explanation_prompt, build_skill_analysis_prompt
from .skills import SkillSet

logger = get_logger()

NO_DETAILS = "No match details available."
NO_ANALYSIS = "Unable to generate AI analysis."
TRUNCATION_MARKER = "..."


def truncate_explanation(text: str, limit: int = EXPLANATION_MAX_CHARS) -> str:
    """Cut text to at most `limit` characters, ending with "..." when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


class ExplanationGenerator:
    def __init__(self, client, max_chars: int = EXPLANATION_MAX_CHARS):
        self.client = client
        # Stored text never exceeds the job_matches.match_details column.
        self.max_chars = min(max_chars, EXPLANATION_MAX_CHARS)

    def _generate(self, prompt: str, fallback: str, **context) -> str:
        try:
            return self.client.generate(prompt).text
        except (ExternalServiceError, ParseError) as e:
            logger.warning("AI explanation unavailable", error=str(e), **context)
        except Exception as e:
            logger.error(
                "Unexpected error from AI collaborator",
                error_type=type(e).__name__,
                error=str(e),
                **context,
            )
        logger.record_fallback("explanation")
        return fallback

    def explain(
        self,
        job: JobPosting,
        job_skills: SkillSet,
        candidate: CandidateProfile,
        candidate_skills: SkillSet,
    ) -> str:
        """Narrative for one (candidate, job) pair, never longer than max_chars."""
        # Requested length stays below the stored limit.
        prompt = build_explanation_prompt(
            job, job_skills, candidate, candidate_skills,
            max_chars=min(1500, self.max_chars),
        )
        text = self._generate(prompt, NO_DETAILS, job_id=job.id)
        return truncate_explanation(text, self.max_chars)

    def has_api_key(self) -> bool:
        check = getattr(self.client, "has_api_key", None)
        return bool(check()) if callable(check) else True

    def analyze_skills(self, candidate_skills: SkillSet, job_skills: SkillSet) -> str:
        """Free-form gap analysis between two skill lists."""
        if not self.has_api_key():
            return NO_ANALYSIS
        prompt = build_skill_analysis_prompt(candidate_skills, job_skills)
        return self._generate(prompt, NO_ANALYSIS)
