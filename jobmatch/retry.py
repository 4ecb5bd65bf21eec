"""
Retry policy for calls to the AI collaborator.

Matching attempts each external call once by default. When a retry budget
is configured, only transient failures are retried with exponential
backoff; everything else surfaces immediately so the caller can fall back.
"""

import functools
import time
from typing import Callable, Optional, Tuple, Type

import requests


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


RETRYABLE_STATUS_CODES = {
    408,  # Request Timeout
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}


def should_retry_http_status(status_code: int) -> bool:
    """Check if HTTP status code indicates a retryable error."""
    return status_code in RETRYABLE_STATUS_CODES


def is_transient_error(exception: BaseException) -> bool:
    """
    Determine if an exception is likely transient and worth retrying.

    Args:
        exception: Exception to check

    Returns:
        True for timeouts, connection failures and retryable HTTP statuses
    """
    if isinstance(exception, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return True
    if isinstance(exception, requests.exceptions.HTTPError):
        response = exception.response
        return response is not None and should_retry_http_status(response.status_code)

    error_str = str(exception).lower()
    transient_keywords = [
        'timeout',
        'timed out',
        'connection reset',
        'temporary failure',
        'service unavailable',
    ]
    return any(keyword in error_str for keyword in transient_keywords)


def exponential_backoff(
    max_retries: int = 0,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    retry_if: Optional[Callable[[BaseException], bool]] = None,
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = single attempt)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        retry_if: Optional predicate; exceptions it rejects are re-raised as-is
        on_retry: Optional callback function(attempt, exception, delay)

    Example:
        @exponential_backoff(max_retries=2, retry_if=is_transient_error)
        def post(url, payload):
            return session.post(url, json=payload)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if retry_if is not None and not retry_if(e):
                        raise
                    if max_retries == 0:
                        raise

                    if attempt < max_retries:
                        current_delay = min(delay, max_delay)

                        if on_retry:
                            on_retry(attempt + 1, e, current_delay)

                        time.sleep(current_delay)
                        delay *= exponential_base
                    else:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {str(e)}"
                        ) from e

        return wrapper
    return decorator
