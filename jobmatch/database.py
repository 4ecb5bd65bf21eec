"""
Database schema and connection management.

Uses SQLite with SQLAlchemy. Candidates, resumes and jobs are owned by the
surrounding system and only read here; job_matches is written by matching.
"""

import uuid
from datetime import datetime
from pathlib import Path

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class Candidate(Base):
    """Candidate profile (read-only to matching)."""

    __tablename__ = "candidates"

    id = Column(String, primary_key=True, default=new_id)
    skills = Column(Text, nullable=False, default="")
    major = Column(String, nullable=True)
    university = Column(String, nullable=True)
    graduation_year = Column(Integer, nullable=True)
    active_resume_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Resume(Base):
    """Parsed resume text attached to a candidate."""

    __tablename__ = "resumes"

    id = Column(String, primary_key=True, default=new_id)
    candidate_id = Column(String, nullable=False, index=True)
    parsed_resume = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


class Job(Base):
    """Job posting (read-only to matching)."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    required_skills = Column(Text, nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class JobMatch(Base):
    """Scored (candidate, job) pair.

    No uniqueness on (candidate_id, job_id): every matching run adds rows.
    job_id is not a foreign key because jobs may come from the listing
    endpoint rather than this database.
    """

    __tablename__ = "job_matches"

    id = Column(String, primary_key=True, default=new_id)
    candidate_id = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False)
    match_score = Column(Float, nullable=False)
    match_details = Column(String(2000), nullable=True)
    matched_at = Column(DateTime, nullable=False, default=datetime.now)
    viewed = Column(Boolean, nullable=False, default=False)


def _engine(db_path: Path):
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(_engine(db_path))


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=_engine(db_path), expire_on_commit=False)
    return Session()
