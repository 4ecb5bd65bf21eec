"""
Repositories over the SQLAlchemy session.

Responsibilities:
- Map ORM rows to the dataclasses in models.py and back.
- Commit writes; roll back and re-raise on failure.

Non-Responsibilities:
- No scoring.
- No ownership checks.

Invariant:
Repositories must not encode matching decisions.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .database import Candidate, Job, JobMatch, Resume
from .models import CandidateProfile, JobPosting, MatchRecord


def _to_record(row: JobMatch) -> MatchRecord:
    return MatchRecord(
        id=row.id,
        candidate_id=row.candidate_id,
        job_id=row.job_id,
        score=row.match_score,
        explanation=row.match_details or "",
        matched_at=row.matched_at,
        viewed=bool(row.viewed),
    )


def _to_posting(row: Job) -> JobPosting:
    return JobPosting(
        id=row.id,
        title=row.title,
        description=row.description or "",
        required_skills=row.required_skills or "",
        active=bool(row.active),
    )


class MatchRecordStore:
    def __init__(self, session: Session):
        self.session = session

    def save(self, record: MatchRecord) -> MatchRecord:
        """Insert or update a match record; assigns id and matched_at when missing."""
        row = self.session.get(JobMatch, record.id) if record.id else None
        if row is None:
            row = JobMatch(id=record.id) if record.id else JobMatch()
            self.session.add(row)
        row.candidate_id = record.candidate_id
        row.job_id = record.job_id
        row.match_score = record.score
        row.match_details = record.explanation
        row.matched_at = record.matched_at or datetime.now()
        row.viewed = record.viewed
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        record.id = row.id
        record.matched_at = row.matched_at
        return record

    def find_by_id(self, match_id: str) -> Optional[MatchRecord]:
        row = self.session.get(JobMatch, match_id)
        return _to_record(row) if row is not None else None

    def find_by_candidate_order_by_score_desc(self, candidate_id: str) -> list[MatchRecord]:
        rows = (
            self.session.query(JobMatch)
            .filter(JobMatch.candidate_id == candidate_id)
            .order_by(JobMatch.match_score.desc(), JobMatch.matched_at.desc())
            .all()
        )
        return [_to_record(r) for r in rows]

    def find_by_candidate_min_score(self, candidate_id: str, min_score: float) -> list[MatchRecord]:
        rows = (
            self.session.query(JobMatch)
            .filter(JobMatch.candidate_id == candidate_id, JobMatch.match_score >= min_score)
            .order_by(JobMatch.match_score.desc(), JobMatch.matched_at.desc())
            .all()
        )
        return [_to_record(r) for r in rows]


class CandidateRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_profile(self, candidate_id: str) -> Optional[CandidateProfile]:
        """Candidate with the text of their active resume, if any."""
        row = self.session.get(Candidate, candidate_id)
        if row is None:
            return None
        resume_text = None
        if row.active_resume_id:
            resume = self.session.get(Resume, row.active_resume_id)
            if resume is not None:
                resume_text = resume.parsed_resume
        return CandidateProfile(
            id=row.id,
            skills=row.skills or "",
            major=row.major,
            university=row.university,
            graduation_year=row.graduation_year,
            resume_text=resume_text,
        )


class JobRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_active(self) -> list[JobPosting]:
        rows = self.session.query(Job).filter(Job.active.is_(True)).order_by(Job.created_at).all()
        return [_to_posting(r) for r in rows]

    def find_by_id(self, job_id: str) -> Optional[JobPosting]:
        row = self.session.get(Job, job_id)
        return _to_posting(row) if row is not None else None
