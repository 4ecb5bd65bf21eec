"""Client for the Gemini text-generation API.

The scorer and the explanation generator both talk to the model through
GeminiClient.generate(), which either returns a GenerationResult or raises
ExternalServiceError / ParseError. Callers decide on the fallback.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import requests

from .config import DEFAULT_GEMINI_API_URL, Settings
from .errors import ExternalServiceError, ParseError
from .logger import get_logger
from .retry import RetryError, exponential_backoff, is_transient_error

logger = get_logger()


@dataclass(frozen=True)
class GenerationResult:
    text: str


def _first(value: Any, what: str) -> Any:
    if not isinstance(value, list) or not value:
        raise ParseError(f"Response has no {what}")
    return value[0]


def decode_generation(payload: Any) -> GenerationResult:
    """Extract the first candidate's first text part from a response body.

    Expected shape: {"candidates": [{"content": {"parts": [{"text": ...}]}}]}.
    A list of content blocks is accepted too, in which case the first block
    is used. Any missing level raises ParseError.
    """
    if not isinstance(payload, dict):
        raise ParseError("Response body is not a JSON object")
    candidate = _first(payload.get("candidates"), "candidates")
    if not isinstance(candidate, dict):
        raise ParseError("Candidate is not an object")

    content = candidate.get("content")
    if isinstance(content, list):
        content = _first(content, "content blocks")
    if not isinstance(content, dict):
        raise ParseError("Candidate has no content")

    part = _first(content.get("parts"), "content parts")
    if not isinstance(part, dict):
        raise ParseError("Content part is not an object")

    text = part.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Content part has no text")
    return GenerationResult(text=text)


class GeminiClient:
    """Thin wrapper over the generateContent endpoint.

    The HTTP session is injected so timeouts, adapters and test doubles
    live in one place.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_GEMINI_API_URL,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_retries: int = 0,
    ):
        self.api_key = (api_key or "").strip()
        self.api_url = api_url
        self.session = session or requests.Session()
        self.timeout = timeout
        self._post = exponential_backoff(
            max_retries=max_retries,
            base_delay=1.0,
            exceptions=(requests.exceptions.RequestException,),
            retry_if=is_transient_error,
            on_retry=self._log_retry,
        )(self._post_once)

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            api_url=settings.gemini_api_url,
            session=session,
            timeout=settings.ai_timeout,
            max_retries=settings.ai_max_retries,
        )

    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def _log_retry(attempt: int, exc: BaseException, delay: float):
        logger.warning("AI request failed, retrying", attempt=attempt, delay=delay, error=str(exc))

    def _post_once(self, body: dict) -> requests.Response:
        resp = self.session.post(
            self.api_url,
            json=body,
            headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp

    def generate(self, prompt: str) -> GenerationResult:
        """Send a single-text prompt and return the model's reply."""
        if not self.has_api_key():
            raise ExternalServiceError("GEMINI_API_KEY is not configured")

        body = {"contents": [{"parts": [{"text": prompt}]}]}
        logger.record_ai_call()
        try:
            resp = self._post(body)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            logger.record_ai_failure(f"HTTPError_{status}")
            raise ExternalServiceError(f"AI request failed ({status})") from e
        except requests.exceptions.Timeout as e:
            logger.record_ai_failure("Timeout")
            raise ExternalServiceError("AI request timed out") from e
        except (requests.exceptions.RequestException, RetryError) as e:
            logger.record_ai_failure(type(e).__name__)
            raise ExternalServiceError(f"AI request error: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            logger.record_ai_failure("InvalidJSON")
            raise ParseError("AI response is not valid JSON") from e

        try:
            return decode_generation(payload)
        except ParseError:
            logger.record_ai_failure("MalformedResponse")
            raise
