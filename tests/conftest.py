"""
Pytest configuration and shared fixtures.
"""

import os

# Keep test runs from writing daily log files into the working tree.
os.environ.setdefault("JOBMATCH_LOG_TO_FILE", "0")

from pathlib import Path
from typing import Callable, List, Optional

import pytest
import requests

from jobmatch.database import Candidate, Job, Resume, get_session, init_database
from jobmatch.errors import ExternalServiceError
from jobmatch.gemini import GenerationResult


SCORE_PROMPT_MARKER = "Only return the numeric score"
EXPLANATION_PROMPT_MARKER = "Provide a brief explanation"


class FakeClient:
    """Stands in for GeminiClient; `respond` maps a prompt to reply text or raises."""

    def __init__(self, respond: Optional[Callable[[str], str]] = None, api_key: bool = True):
        self.respond = respond or (lambda prompt: "50")
        self.prompts: List[str] = []
        self._api_key = api_key

    def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        return GenerationResult(text=self.respond(prompt))

    def has_api_key(self) -> bool:
        return self._api_key

    @property
    def score_prompts(self) -> List[str]:
        return [p for p in self.prompts if SCORE_PROMPT_MARKER in p]

    @property
    def explanation_prompts(self) -> List[str]:
        return [p for p in self.prompts if EXPLANATION_PROMPT_MARKER in p]


def failing(prompt: str) -> str:
    raise ExternalServiceError("AI collaborator unavailable")


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, json_error: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value")
        return self._payload


class FakeHTTPSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


def gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def db_path(tmp_path) -> Path:
    path = tmp_path / "test.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Create a temporary database and return a session."""
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def add_candidate(db_session):
    def _add(candidate_id: str, skills: str, major: str = "Computer Science", resume: str = None, **extra):
        candidate = Candidate(id=candidate_id, skills=skills, major=major, **extra)
        if resume is not None:
            row = Resume(id=f"{candidate_id}-cv", candidate_id=candidate_id, parsed_resume=resume)
            db_session.add(row)
            candidate.active_resume_id = row.id
        db_session.add(candidate)
        db_session.commit()
        return candidate
    return _add


@pytest.fixture
def add_job(db_session):
    def _add(job_id: str, required_skills: str, title: str = None, active: bool = True, description: str = ""):
        job = Job(
            id=job_id,
            title=title or f"Job {job_id}",
            description=description,
            required_skills=required_skills,
            active=active,
        )
        db_session.add(job)
        db_session.commit()
        return job
    return _add


@pytest.fixture
def metrics():
    """The logger shared by the jobmatch modules, with metrics zeroed."""
    from jobmatch.matcher import logger as shared

    shared.reset_metrics()
    yield shared
    shared.reset_metrics()


SETTING_KEYS = [
    "GEMINI_API_KEY",
    "GEMINI_API_URL",
    "AI_TIMEOUT",
    "AI_MAX_RETRIES",
    "MATCH_ACCEPTANCE_THRESHOLD",
    "EXPLANATION_MAX_CHARS",
    "JOB_LISTING_URL",
    "JOB_LISTING_TIMEOUT",
    "JOBMATCH_DB",
    "MATCH_WORKERS",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every settings variable for the duration of a test."""
    # setenv first so anything load_env writes is undone at teardown
    for key in SETTING_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch
