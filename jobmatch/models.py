"""Data models for candidates, jobs and match records."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class CandidateProfile:
    id: str
    skills: str = ""
    major: Optional[str] = None
    university: Optional[str] = None
    graduation_year: Optional[int] = None
    resume_text: Optional[str] = None


_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def parse_flag(value: Any) -> bool:
    """Listing flags may arrive as JSON booleans or as strings like "false"."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class JobPosting:
    id: str
    title: str
    description: str = ""
    required_skills: str = ""
    active: bool = True

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "JobPosting":
        """Build a posting from a listing endpoint item (camelCase or snake_case)."""
        job_id = data.get("id")
        if job_id is None or str(job_id).strip() == "":
            raise ValueError("Job listing item has no id")
        required = data.get("requiredSkills", data.get("required_skills")) or ""
        if isinstance(required, list):
            required = ", ".join(str(s) for s in required)
        active = data.get("active", data.get("isActive", True))
        return cls(
            id=str(job_id),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            required_skills=str(required),
            active=parse_flag(active),
        )


@dataclass
class MatchRecord:
    candidate_id: str
    job_id: str
    score: float
    explanation: str
    matched_at: Optional[datetime] = None
    viewed: bool = False
    id: Optional[str] = None
    job_title: Optional[str] = field(default=None, compare=False)
