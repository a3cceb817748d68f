"""Remotive remote-jobs connector."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from app.db import JobStorePort
from app.domain import (
    JobPost,
    domain_add_months,
    domain_extract_requirements,
    domain_map_employment_type,
    domain_parse_salary_range,
    domain_parse_timestamp_or_now,
    domain_utc_now,
)

from ..base import BaseJobConnector
from ..errors import ConnectorPayloadError
from ..watermark import connector_deduplicate_batch, connector_filter_newer_than

logger = logging.getLogger(__name__)


class RemotiveConnector(BaseJobConnector):
    """Connector for the public Remotive JSON API. Every posting is remote."""

    CONNECTOR_ID = "remotive"
    DISPLAY_NAME = "Remotive"
    ID_PREFIX = "remotive-"
    API_URL = "https://remotive.com/api/remote-jobs"

    def __init__(
        self,
        job_store: JobStorePort | None = None,
        request_timeout_seconds: float = 30.0,
        page_limit: int = 50,
    ):
        super().__init__(job_store=job_store, request_timeout_seconds=request_timeout_seconds)
        if page_limit < 1:
            raise ValueError("page_limit must be >= 1")
        self._page_limit = page_limit

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Fetch the latest Remotive postings newer than the stored watermark.

        Returns:
            list[JobPost]: Normalized postings unique by id.

        Raises:
            ConnectorError: Raised on transport, HTTP status, or payload failure.
        """

        watermark = self._connector_watermark()
        fetched_at = domain_utc_now()
        payload = self._connector_request_json("GET", self.API_URL, params={"limit": self._page_limit})
        if not isinstance(payload, dict) or not isinstance(payload.get("jobs"), list):
            raise ConnectorPayloadError("remotive response is missing the jobs list")

        jobs = [
            self._remotive_transform_job(job_value, fetched_at)
            for job_value in payload["jobs"]
            if isinstance(job_value, dict) and job_value.get("id") is not None
        ]
        new_jobs = connector_filter_newer_than(jobs, watermark)
        logger.info("remotive fetched=%d new=%d watermark=%s", len(jobs), len(new_jobs), watermark)
        return connector_deduplicate_batch(new_jobs)

    def _remotive_transform_job(self, job_value: dict[str, Any], fetched_at: datetime) -> JobPost:
        """Map one Remotive job object to a normalized posting."""

        title = str(job_value.get("title") or "")
        company = str(job_value.get("company_name") or "")
        description = str(job_value.get("description") or "") or f"Remote {title} position at {company}"
        salary = str(job_value.get("salary") or "")
        salary_min, salary_max, salary_currency = domain_parse_salary_range(salary)
        posted_date = domain_parse_timestamp_or_now(job_value.get("publication_date"), fetched_at)
        tags = [tag for tag in job_value.get("tags") or [] if isinstance(tag, str)]
        category = str(job_value.get("category") or "")

        requirements = domain_extract_requirements(f"{title} {description}", seed_tags=tags)
        if category and category not in requirements:
            requirements.append(category)

        return JobPost(
            job_id=f"{self.ID_PREFIX}{job_value['id']}",
            title=title,
            company=company,
            description=description,
            location=str(job_value.get("candidate_required_location") or "") or "Remote",
            salary=salary,
            salary_min=salary_min,
            salary_max=salary_max,
            salary_currency=salary_currency,
            is_remote=True,
            url=str(job_value.get("url") or ""),
            employment_type=domain_map_employment_type(job_value.get("job_type")),
            experience_level="Mid-level",
            posted_date=posted_date,
            expires_date=domain_add_months(posted_date, 2),
            requirements=requirements,
            benefits=["Remote work"],
            fields={
                "source": self.CONNECTOR_ID,
                "original_id": job_value["id"],
                "category": category,
                "tags": tags,
                "fetched_at": fetched_at.isoformat(),
            },
        )
