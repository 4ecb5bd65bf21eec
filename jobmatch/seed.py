"""
Load candidates and jobs from a JSON file into the database.

Expected shape:
    {
      "candidates": [{"id": ..., "skills": "Java, React", "major": ...,
                      "university": ..., "graduation_year": 2025,
                      "resume": "parsed resume text"}],
      "jobs": [{"id": ..., "title": ..., "description": ...,
                "required_skills": "Java,Spring Boot", "active": true}]
    }
"""

import json
from pathlib import Path
from typing import Any, Dict

from .database import Candidate, Job, Resume, get_session, init_database, new_id
from .models import parse_flag
from .logger import get_logger

logger = get_logger()

REQUIRED_JOB_FIELDS = ["title"]


def _skills_text(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value or "")


def seed_from_json(json_path: Path, db_path: Path, dry_run: bool = False) -> Dict[str, int]:
    """
    Insert candidates and jobs from a JSON file.

    Records whose id already exists are left untouched; jobs without a
    title are skipped.

    Args:
        json_path: Path to JSON seed file
        db_path: Path to SQLite database file
        dry_run: If True, count what would be inserted without writing

    Returns:
        Counts of inserted candidates, resumes, jobs and skipped records
    """
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    counts = {"candidates": 0, "resumes": 0, "jobs": 0, "skipped": 0}
    candidates = data.get("candidates", [])
    jobs = data.get("jobs", [])

    if dry_run:
        counts["candidates"] = len(candidates)
        counts["resumes"] = sum(1 for c in candidates if c.get("resume"))
        for job in jobs:
            if all(job.get(field) for field in REQUIRED_JOB_FIELDS):
                counts["jobs"] += 1
            else:
                counts["skipped"] += 1
        return counts

    init_database(db_path)
    session = get_session(db_path)
    seen_candidates, seen_jobs = set(), set()
    try:
        for item in candidates:
            candidate_id = str(item.get("id") or new_id())
            if candidate_id in seen_candidates or session.get(Candidate, candidate_id) is not None:
                counts["skipped"] += 1
                continue
            candidate = Candidate(
                id=candidate_id,
                skills=_skills_text(item.get("skills")),
                major=item.get("major"),
                university=item.get("university"),
                graduation_year=item.get("graduation_year"),
            )
            if item.get("resume"):
                resume = Resume(id=new_id(), candidate_id=candidate_id, parsed_resume=item["resume"])
                session.add(resume)
                candidate.active_resume_id = resume.id
                counts["resumes"] += 1
            session.add(candidate)
            seen_candidates.add(candidate_id)
            counts["candidates"] += 1

        for item in jobs:
            if not all(item.get(field) for field in REQUIRED_JOB_FIELDS):
                logger.warning("Skipping job without required fields", job=item.get("id"))
                counts["skipped"] += 1
                continue
            job_id = str(item.get("id") or new_id())
            if job_id in seen_jobs or session.get(Job, job_id) is not None:
                counts["skipped"] += 1
                continue
            session.add(Job(
                id=job_id,
                title=item["title"],
                description=item.get("description") or "",
                required_skills=_skills_text(item.get("required_skills", item.get("requiredSkills"))),
                active=parse_flag(item.get("active", True)),
            ))
            seen_jobs.add(job_id)
            counts["jobs"] += 1

        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    logger.info("Seed complete", **counts)
    return counts
