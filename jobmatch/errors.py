"""Exception taxonomy for matching.

Only NotFoundError and OwnershipError are meant to reach callers of the
matching service. ExternalServiceError and ParseError are raised inside the
scoring and explanation code and converted to fallback values there.
"""


class JobMatchError(Exception):
    """Base class for all jobmatch errors."""


class NotFoundError(JobMatchError):
    """A candidate, job or match record does not exist."""


class OwnershipError(JobMatchError, PermissionError):
    """An actor tried to change a match record it does not own."""


class ExternalServiceError(JobMatchError):
    """The AI collaborator or the job listing endpoint failed."""


class ParseError(JobMatchError):
    """A skill string or AI response could not be interpreted."""
