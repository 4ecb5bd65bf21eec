"""
Match Orchestrator.

Responsibilities:
- Resolve the candidate and the active job catalog.
- Score every job: skill overlap first, semantic score when overlap is weak.
- Attach an explanation to every score and persist one record per job.
- Return the new records ranked by score.

Non-Responsibilities:
- No prompt construction or response parsing.
- No de-duplication of earlier records for the same (candidate, job).

Invariant:
A failure while processing one job never prevents the other jobs in the
same run from being scored and stored.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterator, Optional

import requests
from sqlalchemy.orm import Session

from .catalog import JobCatalog
from .config import Settings
from .errors import NotFoundError
from .explain import ExplanationGenerator
from .gemini import GeminiClient
from .logger import get_logger
from .models import CandidateProfile, JobPosting, MatchRecord
from .repository import CandidateRepository, JobRepository, MatchRecordStore
from .scoring import MIN_SCORE, SemanticScorer, score_overlap
from .skills import SkillSet, parse_skills

logger = get_logger()

# (score, explanation) or the exception raised while computing them
Outcome = tuple[Optional[tuple[float, str]], Optional[BaseException]]


class MatchOrchestrator:
    def __init__(
        self,
        candidates: CandidateRepository,
        catalog: JobCatalog,
        store: MatchRecordStore,
        scorer: SemanticScorer,
        explainer: ExplanationGenerator,
        max_workers: int = 1,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.candidates = candidates
        self.catalog = catalog
        self.store = store
        self.scorer = scorer
        self.explainer = explainer
        self.max_workers = max(1, max_workers)
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: Session,
        http: Optional[requests.Session] = None,
    ) -> "MatchOrchestrator":
        """Wire the default collaborators around one DB session and one HTTP session."""
        http = http or requests.Session()
        client = GeminiClient.from_settings(settings, session=http)
        return cls(
            candidates=CandidateRepository(session),
            catalog=JobCatalog(
                JobRepository(session),
                listing_url=settings.job_listing_url,
                session=http,
                timeout=settings.job_listing_timeout,
            ),
            store=MatchRecordStore(session),
            scorer=SemanticScorer(client, threshold=settings.acceptance_threshold),
            explainer=ExplanationGenerator(client, max_chars=settings.explanation_max_chars),
            max_workers=settings.match_workers,
        )

    def _require_candidate(self, candidate_id: str) -> CandidateProfile:
        candidate = self.candidates.get_profile(candidate_id)
        if candidate is None:
            raise NotFoundError(f"Candidate not found: {candidate_id}")
        return candidate

    def compute_matches(self, candidate_id: str, min_score: Optional[float] = None) -> list[MatchRecord]:
        """Score the candidate against every active job and persist the results.

        Args:
            candidate_id: Candidate to match
            min_score: Optional cut-off applied to the returned list only

        Returns:
            Newly created records, highest score first

        Raises:
            NotFoundError: If the candidate does not exist
        """
        candidate = self._require_candidate(candidate_id)

        jobs = self.catalog.active_jobs()
        if not jobs:
            logger.warning("No jobs available for matching", candidate_id=candidate_id)
            return []

        candidate_skills = parse_skills(candidate.skills)
        logger.info(
            f"Matching candidate against {len(jobs)} active jobs",
            candidate_id=candidate_id,
            skills=candidate_skills.as_list(),
        )

        matches: list[MatchRecord] = []
        for job, (result, error) in self._evaluate_all(jobs, candidate, candidate_skills):
            if error is not None:
                self._job_failed(job, error)
                continue
            score, explanation = result
            record = MatchRecord(
                candidate_id=candidate.id,
                job_id=job.id,
                score=score,
                explanation=explanation,
                matched_at=self.clock(),
                job_title=job.title,
            )
            try:
                saved = self.store.save(record)
            except Exception as e:
                self._job_failed(job, e)
                continue
            logger.record_job_processed()
            logger.debug("Match saved", match_id=saved.id, job_id=job.id, score=score)
            matches.append(saved)

        matches.sort(key=lambda m: m.score, reverse=True)
        logger.info(f"Total matches found: {len(matches)}", candidate_id=candidate_id)

        if min_score is not None:
            matches = [m for m in matches if m.score >= min_score]
        return matches

    def _job_failed(self, job: JobPosting, error: BaseException):
        logger.error(
            "Error processing job",
            job_id=job.id,
            error_type=type(error).__name__,
            error=str(error),
        )
        logger.record_job_failure(type(error).__name__)

    def _evaluate_all(
        self,
        jobs: list[JobPosting],
        candidate: CandidateProfile,
        candidate_skills: SkillSet,
    ) -> Iterator[tuple[JobPosting, Outcome]]:
        """Yield each job with its outcome, in catalog order."""
        if self.max_workers == 1 or len(jobs) == 1:
            for job in jobs:
                yield job, self._run(job, candidate, candidate_skills)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                (job, pool.submit(self._run, job, candidate, candidate_skills))
                for job in jobs
            ]
            for job, future in futures:
                yield job, future.result()

    def _run(self, job: JobPosting, candidate: CandidateProfile, candidate_skills: SkillSet) -> Outcome:
        try:
            return self._evaluate(job, candidate, candidate_skills), None
        except Exception as e:
            return None, e

    def _evaluate(
        self,
        job: JobPosting,
        candidate: CandidateProfile,
        candidate_skills: SkillSet,
    ) -> tuple[float, str]:
        job_skills = parse_skills(job.required_skills)
        overlap = score_overlap(job_skills, candidate_skills)
        logger.debug(
            f"Direct skill match: {len(overlap.matched)}/{len(job_skills)} "
            f"({round(overlap.percentage)}%)",
            job_id=job.id,
            title=job.title,
        )

        if self.scorer.needs_escalation(overlap.percentage):
            logger.record_escalation()
            score = self.scorer.score(job, job_skills, candidate, candidate_skills, overlap.percentage)
        else:
            score = overlap.percentage
        score = max(score, MIN_SCORE)

        explanation = self.explainer.explain(job, job_skills, candidate, candidate_skills)
        return score, explanation

    def list_matches(self, candidate_id: str, min_score: Optional[float] = None) -> list[MatchRecord]:
        """Stored matches for a candidate, highest score first."""
        if min_score is None:
            records = self.store.find_by_candidate_order_by_score_desc(candidate_id)
        else:
            records = self.store.find_by_candidate_min_score(candidate_id, min_score)
        for record in records:
            job = self.catalog.find(record.job_id)
            if job is not None:
                record.job_title = job.title
        return records

    def get_match(self, match_id: str) -> MatchRecord:
        record = self.store.find_by_id(match_id)
        if record is None:
            raise NotFoundError(f"Job match not found: {match_id}")
        return record
