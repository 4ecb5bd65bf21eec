"""Active job catalog: local store first, listing endpoint as fallback."""
from __future__ import annotations

from typing import Optional

import requests

from .logger import get_logger
from .models import JobPosting
from .repository import JobRepository

logger = get_logger()


class JobCatalog:
    def __init__(
        self,
        jobs: JobRepository,
        listing_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
    ):
        self.jobs = jobs
        self.listing_url = listing_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def active_jobs(self) -> list[JobPosting]:
        """Active postings from the store, or from the listing endpoint if the store has none."""
        jobs = self.jobs.find_active()
        if jobs:
            return jobs
        logger.info("No active jobs in store, trying listing endpoint", url=self.listing_url)
        return self.fetch_listing()

    def fetch_listing(self) -> list[JobPosting]:
        """One GET against the listing endpoint. Failures yield an empty list."""
        if not self.listing_url:
            return []
        try:
            resp = self.session.get(self.listing_url, timeout=self.timeout)
            resp.raise_for_status()
            items = resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "HTTPError"
            logger.error("Job listing request failed", url=self.listing_url, status=status)
            return []
        except requests.exceptions.Timeout:
            logger.warning("Job listing request timed out", url=self.listing_url)
            return []
        except requests.exceptions.RequestException as e:
            logger.error("Job listing request error", url=self.listing_url, error=str(e))
            return []
        except ValueError:
            logger.error("Job listing response is not JSON", url=self.listing_url)
            return []

        if not isinstance(items, list):
            logger.error("Job listing response is not a list", url=self.listing_url)
            return []

        postings = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                posting = JobPosting.from_api(item)
            except ValueError as e:
                logger.warning("Skipping malformed job listing item", error=str(e))
                continue
            if posting.active:
                postings.append(posting)
        logger.info("Fetched jobs from listing endpoint", count=len(postings))
        return postings

    def find(self, job_id: str) -> Optional[JobPosting]:
        return self.jobs.find_by_id(job_id)
