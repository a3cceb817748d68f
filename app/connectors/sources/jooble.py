"""Jooble job aggregator connector."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Callable, Final

from app.db import JobStorePort
from app.domain import (
    JobPost,
    domain_add_months,
    domain_extract_requirements,
    domain_map_employment_type,
    domain_parse_timestamp,
    domain_utc_now,
)

from ..base import BaseJobConnector
from ..errors import ConnectorError, ConnectorPayloadError
from ..watermark import connector_deduplicate_batch, connector_filter_newer_than

logger = logging.getLogger(__name__)

JOOBLE_QUERIES: Final[tuple[str, ...]] = ("developer", "engineer", "designer", "manager", "sales", "marketing")

_JOOBLE_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
_JOOBLE_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")
_JOOBLE_REMOTE_KEYWORDS: Final[tuple[str, ...]] = (
    "remote",
    "distans",
    "hemarbete",
    "hemifrån",
    "work from home",
    "wfh",
    "anywhere",
)


class JoobleConnector(BaseJobConnector):
    """Connector posting keyword searches to the Jooble REST API.

    One search runs per query with a pause in between. A failing query is
    logged and skipped; the fetch only fails when every query failed. The API
    key is part of the request path and is masked in raised errors.
    """

    CONNECTOR_ID = "jooble"
    DISPLAY_NAME = "Jooble"
    ID_PREFIX = "jooble-"
    API_URL = "https://jooble.org/api"

    def __init__(
        self,
        api_key: str | None,
        job_store: JobStorePort | None = None,
        request_timeout_seconds: float = 30.0,
        page_delay_seconds: float = 2.0,
        location: str = "Stockholm",
        queries: tuple[str, ...] = JOOBLE_QUERIES,
        sleep_provider: Callable[[float], None] | None = None,
    ):
        """Initialize Jooble connector.

        Args:
            api_key: Jooble API key; blank disables fetching.
            job_store: Optional store used for watermarks and the sync cycle.
            request_timeout_seconds: HTTP request timeout in seconds.
            page_delay_seconds: Pause between search queries.
            location: Location filter sent with every search.
            queries: Search keywords, one request each.
            sleep_provider: Optional sleep function.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the query list is empty.
        """

        super().__init__(
            job_store=job_store,
            request_timeout_seconds=request_timeout_seconds,
            page_delay_seconds=page_delay_seconds,
            sleep_provider=sleep_provider,
        )
        if not queries:
            raise ValueError("queries must not be empty")
        self._api_key = (api_key or "").strip()
        self._location = location.strip()
        self._queries = queries

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Run every search query and keep postings newer than the watermark.

        Returns:
            list[JobPost]: Normalized postings unique by id; empty without an API key.

        Raises:
            ConnectorError: Raised with the last query error when every query failed.
        """

        if not self._api_key:
            logger.warning("jooble connector has no API key, returning an empty batch")
            return []

        watermark = self._connector_watermark()
        fetched_at = domain_utc_now()
        jobs: list[JobPost] = []
        last_error: ConnectorError | None = None
        succeeded_queries = 0

        for index, query in enumerate(self._queries):
            if index > 0:
                self._connector_pause()
            try:
                query_jobs = self._jooble_search(query, fetched_at)
            except ConnectorError as error:
                last_error = error
                logger.warning("jooble query failed query=%s error=%s", query, error)
                continue
            succeeded_queries += 1
            jobs.extend(query_jobs)

        if succeeded_queries == 0 and last_error is not None:
            raise ConnectorError(f"all jooble queries failed, last error: {last_error}") from last_error

        new_jobs = connector_filter_newer_than(jobs, watermark)
        logger.info(
            "jooble fetched=%d new=%d queries_ok=%d/%d watermark=%s",
            len(jobs),
            len(new_jobs),
            succeeded_queries,
            len(self._queries),
            watermark,
        )
        return connector_deduplicate_batch(new_jobs)

    def _jooble_search(self, query: str, fetched_at: datetime) -> list[JobPost]:
        """Post one keyword search.

        Args:
            query: Search keywords.
            fetched_at: Fetch timestamp used for the posted-date fallback.

        Returns:
            list[JobPost]: Normalized postings of that search.

        Raises:
            ConnectorError: Raised on transport, HTTP status, or payload failure.
        """

        try:
            payload = self._connector_request_json(
                "POST",
                f"{self.API_URL}/{self._api_key}",
                json_body={"keywords": query, "location": self._location},
            )
        except ConnectorError as error:
            raise type(error)(str(error).replace(self._api_key, "***"), status_code=error.status_code) from error

        if not isinstance(payload, dict) or not isinstance(payload.get("jobs"), list):
            raise ConnectorPayloadError(f"jooble response for query={query} is missing the jobs list")

        jobs: list[JobPost] = []
        for job_value in payload["jobs"]:
            if not isinstance(job_value, dict):
                continue
            original_id = _jooble_original_id(job_value)
            if not original_id:
                logger.warning("skipping jooble job without id or link query=%s", query)
                continue
            jobs.append(self._jooble_transform_job(job_value, original_id, fetched_at))
        return jobs

    def _jooble_transform_job(self, job_value: dict[str, Any], original_id: str, fetched_at: datetime) -> JobPost:
        """Map one Jooble job object to a normalized posting."""

        title = str(job_value.get("title") or "").strip()
        description = _jooble_clean_text(str(job_value.get("snippet") or ""))
        raw_location = str(job_value.get("location") or "")
        link = str(job_value.get("link") or "")
        job_type = str(job_value.get("type") or "")
        posted_date = domain_parse_timestamp(job_value.get("updated")) or fetched_at - timedelta(days=7)
        searchable_text = f"{title} {description} {raw_location}".lower()

        return JobPost(
            job_id=f"{self.ID_PREFIX}{original_id}",
            title=title,
            company=str(job_value.get("company") or "").strip(),
            description=description,
            location=_jooble_format_location(raw_location),
            salary=str(job_value.get("salary") or "").strip(),
            salary_currency="SEK",
            is_remote=any(keyword in searchable_text for keyword in _JOOBLE_REMOTE_KEYWORDS),
            url=link,
            employment_type=_jooble_employment_type(job_type),
            experience_level="Mid-level",
            posted_date=posted_date,
            expires_date=domain_add_months(posted_date, 1),
            requirements=domain_extract_requirements(f"{title} {description}"),
            fields={
                "source": self.CONNECTOR_ID,
                "source_url": link,
                "original_id": original_id,
                "jooble_source": job_value.get("source") or "",
                "jooble_type": job_type,
                "fetched_at": fetched_at.isoformat(),
            },
        )


def _jooble_original_id(job_value: dict[str, Any]) -> str:
    """Return the numeric Jooble id, else the last path segment of the link."""

    raw_id = job_value.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool) and raw_id != 0:
        return str(raw_id)
    if isinstance(raw_id, str) and raw_id.strip() not in ("", "0"):
        return raw_id.strip()

    link = str(job_value.get("link") or "")
    return link.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1] if "/" in link else ""


def _jooble_clean_text(text: str) -> str:
    without_tags = _JOOBLE_HTML_TAG_PATTERN.sub("", text).strip()
    return _JOOBLE_BLANK_LINES_PATTERN.sub("\n\n", without_tags)


def _jooble_format_location(location: str) -> str:
    stripped_location = location.strip()
    if not stripped_location:
        return "Sweden"
    lowered_location = stripped_location.lower()
    if "sweden" in lowered_location or "sverige" in lowered_location:
        return stripped_location
    return f"{stripped_location}, Sweden"


def _jooble_employment_type(job_type: str) -> str:
    lowered_type = job_type.lower()
    # Jooble sends free text such as "Full-time, Permanent"
    for marker, label in (
        ("full", "Full-time"),
        ("heltid", "Full-time"),
        ("part", "Part-time"),
        ("deltid", "Part-time"),
        ("contract", "Contract"),
        ("kontrakt", "Contract"),
        ("temporary", "Temporary"),
        ("tillfällig", "Temporary"),
    ):
        if marker in lowered_type:
            return label
    return domain_map_employment_type(job_type)
