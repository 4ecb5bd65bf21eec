"""
Match scoring.

Two tiers: a deterministic skill overlap computed locally, and a semantic
score from the AI collaborator that is only consulted when the overlap is
below the acceptance threshold.

Invariant:
SemanticScorer.score() always returns a value in [1, 100] and never raises.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .config import ACCEPTANCE_THRESHOLD
from .errors import ExternalServiceError, ParseError
from .logger import get_logger
from .models import CandidateProfile, JobPosting
from .prompts import build_score_prompt
from .skills import SkillSet

logger = get_logger()

MIN_SCORE = 1.0
MAX_SCORE = 100.0


@dataclass(frozen=True)
class SkillOverlap:
    percentage: float
    matched: tuple[str, ...]
    missing: tuple[str, ...]


def _skill_matches(job_skill: str, candidate_skills: tuple[str, ...]) -> bool:
    for skill in candidate_skills:
        if skill == job_skill or skill in job_skill or job_skill in skill:
            return True
    return False


def score_overlap(job_skills: SkillSet, candidate_skills: SkillSet) -> SkillOverlap:
    """Percentage of the job's required skills covered by the candidate.

    Matching is case-insensitive equality or substring containment in either
    direction. A job with no required skills scores 0.
    """
    matched: list[str] = []
    missing: list[str] = []
    for skill, folded in zip(job_skills, job_skills.folded):
        if _skill_matches(folded, candidate_skills.folded):
            matched.append(skill)
        else:
            missing.append(skill)

    if not len(job_skills):
        percentage = 0.0
    else:
        percentage = len(matched) / len(job_skills) * 100
    return SkillOverlap(percentage=percentage, matched=tuple(matched), missing=tuple(missing))


def clamp_score(value: float) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, value))


def parse_score(text: str) -> float:
    """Read the model's numeric reply; raises ParseError if it isn't one."""
    try:
        value = float(text.strip())
    except (AttributeError, ValueError) as e:
        raise ParseError(f"Non-numeric score reply: {text!r}") from e
    if math.isnan(value):
        raise ParseError("Score reply is NaN")
    return clamp_score(value)


class SemanticScorer:
    """Ask the AI collaborator for a 1-100 score when skill overlap is weak.

    `client` is anything with a generate(prompt) method returning an object
    with a `text` attribute (see gemini.GeminiClient).
    """

    def __init__(self, client, threshold: float = ACCEPTANCE_THRESHOLD):
        self.client = client
        self.threshold = threshold

    def needs_escalation(self, deterministic: float) -> bool:
        return deterministic < self.threshold

    def score(
        self,
        job: JobPosting,
        job_skills: SkillSet,
        candidate: CandidateProfile,
        candidate_skills: SkillSet,
        deterministic: float,
    ) -> float:
        fallback = max(deterministic, MIN_SCORE)
        prompt = build_score_prompt(job, job_skills, candidate, candidate_skills)
        try:
            reply = self.client.generate(prompt)
            score = parse_score(reply.text)
        except (ExternalServiceError, ParseError) as e:
            logger.warning(
                "Semantic score unavailable, using skill overlap",
                job_id=job.id,
                error=str(e),
                fallback=fallback,
            )
            logger.record_fallback("semantic_score")
            return fallback
        except Exception as e:
            logger.error(
                "Unexpected error from AI collaborator, using skill overlap",
                job_id=job.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            logger.record_fallback("semantic_score")
            return fallback

        logger.debug("Semantic score received", job_id=job.id, score=score)
        return score
