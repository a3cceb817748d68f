"""Arbetsförmedlingen (Swedish Public Employment Service) JobTech links connector."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Final

from app.domain import (
    JobPost,
    domain_map_employment_type,
    domain_parse_salary_range,
    domain_parse_timestamp,
    domain_parse_timestamp_or_now,
    domain_utc_now,
)

from ..base import BaseJobConnector
from ..errors import ConnectorPayloadError
from ..watermark import connector_deduplicate_batch, connector_filter_newer_than

logger = logging.getLogger(__name__)

_AF_REMOTE_KEYWORDS: Final[tuple[str, ...]] = (
    "distans",
    "remote",
    "hemarbete",
    "hemifrån",
    "fjärr",
    "work from home",
    "wfh",
    "anywhere",
    "var som helst",
)


class ArbetsformedlingenConnector(BaseJobConnector):
    """Connector for developer postings from the JobTech `joblinks` search API."""

    CONNECTOR_ID = "arbetsformedlingen"
    DISPLAY_NAME = "Arbetsförmedlingen"
    ID_PREFIX = "af-"
    API_URL = "https://links.api.jobtechdev.se/joblinks"
    SEARCH_QUERY = "utvecklare OR programmer OR software"
    PAGE_LIMIT = 20

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Fetch the newest developer postings, keeping only those past the watermark.

        Returns:
            list[JobPost]: Normalized postings unique by id.

        Raises:
            ConnectorError: Raised on transport, HTTP status, or payload failure.
        """

        watermark = self._connector_watermark()
        fetched_at = domain_utc_now()
        payload = self._connector_request_json(
            "GET",
            self.API_URL,
            params={"q": self.SEARCH_QUERY, "limit": self.PAGE_LIMIT, "sort": "pubdate-desc"},
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("hits"), list):
            raise ConnectorPayloadError("arbetsformedlingen response is missing the hits list")

        jobs = [
            self._af_transform_job(hit, fetched_at)
            for hit in payload["hits"]
            if isinstance(hit, dict) and hit.get("id")
        ]
        new_jobs = connector_filter_newer_than(jobs, watermark)
        logger.info("arbetsformedlingen fetched=%d new=%d watermark=%s", len(jobs), len(new_jobs), watermark)
        return connector_deduplicate_batch(new_jobs)

    def _af_transform_job(self, hit: dict[str, Any], fetched_at: datetime) -> JobPost:
        """Map one JobTech hit to a normalized posting."""

        original_id = str(hit["id"])
        headline = str(hit.get("headline") or "")
        description_text = str(_af_nested(hit, "description", "text") or "")
        information = [
            item for item in _af_nested(hit, "application_details", "information") or [] if isinstance(item, dict)
        ]
        address = hit.get("workplace_address") if isinstance(hit.get("workplace_address"), dict) else {}
        location = ", ".join(
            str(address.get(key)) for key in ("municipality", "region", "country") if address.get(key)
        )
        salary = str(hit.get("salary_description") or "")
        salary_min, salary_max, salary_currency = domain_parse_salary_range(salary, default_currency="SEK")
        experience_required = hit.get("experience_required") is True

        description_parts = [description_text] if description_text else []
        description_parts.extend(
            f"{item.get('headline') or ''}: {item['text']}" for item in information if item.get("text")
        )

        requirements = ["Work experience required"] if experience_required else []
        benefits: list[str] = []
        for item in information:
            item_headline = str(item.get("headline") or "").lower()
            item_text = str(item.get("text") or "")
            if not item_text:
                continue
            if "krav" in item_headline or "requirements" in item_headline:
                requirements.append(item_text)
            if "förmån" in item_headline or "benefit" in item_headline:
                benefits.append(item_text)

        source_links = [link for link in hit.get("source_links") or [] if isinstance(link, dict) and link.get("url")]
        url = str(source_links[0]["url"]) if source_links else (
            f"https://arbetsformedlingen.se/platsbanken/annonser/{original_id}"
        )

        searchable_text = f"{location} {description_text} {headline}".lower()
        return JobPost(
            job_id=f"{self.ID_PREFIX}{original_id}",
            title=headline,
            company=str(_af_nested(hit, "employer", "name") or ""),
            description="\n\n".join(description_parts),
            location=location,
            salary=salary,
            salary_min=salary_min,
            salary_max=salary_max,
            salary_currency=salary_currency,
            is_remote=any(keyword in searchable_text for keyword in _AF_REMOTE_KEYWORDS),
            url=url,
            employment_type=domain_map_employment_type(_af_nested(hit, "employment_type", "concept_label")),
            experience_level="Mid-level" if experience_required else "Entry-level",
            posted_date=domain_parse_timestamp_or_now(hit.get("publication_date"), fetched_at),
            expires_date=domain_parse_timestamp(hit.get("last_application_date")),
            requirements=requirements,
            benefits=benefits,
            fields={
                "source": self.CONNECTOR_ID,
                "original_id": original_id,
                "country": address.get("country") or "",
                "region": address.get("region") or "",
                "municipality": address.get("municipality") or "",
                "fetched_at": fetched_at.isoformat(),
            },
        )


def _af_nested(value: dict[str, Any], *keys: str) -> Any:
    """Return a nested value following keys, or None when any level is missing."""

    current: Any = value
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current
