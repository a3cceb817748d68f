"""RemoteOK connector."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from app.domain import (
    JobPost,
    domain_add_months,
    domain_extract_requirements,
    domain_parse_timestamp,
    domain_utc_now,
)

from ..base import BaseJobConnector
from ..errors import ConnectorPayloadError
from ..watermark import connector_deduplicate_batch, connector_filter_newer_than

logger = logging.getLogger(__name__)


class RemoteOKConnector(BaseJobConnector):
    """Connector for the RemoteOK JSON feed.

    The feed is a JSON array whose first element is a legal/metadata notice,
    not a posting.
    """

    CONNECTOR_ID = "remoteok"
    DISPLAY_NAME = "RemoteOK"
    ID_PREFIX = "remoteok-"
    API_URL = "https://remoteok.com/api"

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Fetch RemoteOK postings newer than the stored watermark.

        Returns:
            list[JobPost]: Normalized postings unique by id.

        Raises:
            ConnectorError: Raised on transport, HTTP status, or payload failure.
        """

        watermark = self._connector_watermark()
        fetched_at = domain_utc_now()
        payload = self._connector_request_json("GET", self.API_URL)
        if not isinstance(payload, list):
            raise ConnectorPayloadError("remoteok response is not a JSON array")

        jobs = [
            self._remoteok_transform_job(job_value, fetched_at)
            for job_value in payload[1:]
            if isinstance(job_value, dict) and job_value.get("id") not in (None, "")
        ]
        new_jobs = connector_filter_newer_than(jobs, watermark)
        logger.info("remoteok fetched=%d new=%d watermark=%s", len(jobs), len(new_jobs), watermark)
        return connector_deduplicate_batch(new_jobs)

    def _remoteok_transform_job(self, job_value: dict[str, Any], fetched_at: datetime) -> JobPost:
        """Map one RemoteOK job object to a normalized posting."""

        original_id = str(job_value["id"])
        title = str(job_value.get("position") or "")
        company = str(job_value.get("company") or "")
        description = str(job_value.get("description") or "") or f"Remote {title} position at {company}"
        tags = [tag for tag in job_value.get("tags") or [] if isinstance(tag, str)]
        posted_date = (
            domain_parse_timestamp(job_value.get("date"))
            or domain_parse_timestamp(job_value.get("epoch"))
            or fetched_at
        )

        location = str(job_value.get("location") or "")
        if location and location != "Remote":
            location = f"{location} (Remote)"
        else:
            location = "Remote"

        url = str(job_value.get("url") or "")
        if not url:
            url = f"https://remoteok.com/remote-jobs/{job_value.get('slug') or original_id}"

        return JobPost(
            job_id=f"{self.ID_PREFIX}{original_id}",
            title=title,
            company=company,
            description=description,
            location=location,
            salary_currency="USD",
            is_remote=True,
            url=url,
            employment_type="Full-time",
            experience_level="Mid-level",
            posted_date=posted_date,
            expires_date=domain_add_months(posted_date, 2),
            requirements=domain_extract_requirements(f"{title} {description}", seed_tags=tags),
            benefits=["Remote work"],
            fields={
                "source": self.CONNECTOR_ID,
                "original_id": original_id,
                "slug": job_value.get("slug") or "",
                "tags": tags,
                "apply_url": job_value.get("apply_url") or "",
                "fetched_at": fetched_at.isoformat(),
            },
        )
