"""EURES connector backed by the Adzuna multi-country search API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Final

from app.db import JobStorePort
from app.domain import (
    JobPost,
    domain_add_months,
    domain_extract_requirements,
    domain_map_employment_type,
    domain_parse_timestamp_or_now,
    domain_utc_now,
)

from ..base import BaseJobConnector
from ..errors import ConnectorError, ConnectorPayloadError
from ..watermark import connector_deduplicate_batch, connector_max_days_old

logger = logging.getLogger(__name__)

EURES_COUNTRIES: Final[tuple[str, ...]] = ("de", "nl", "at", "ch", "be", "fr", "es", "it", "pl", "gb")


class EuresConnector(BaseJobConnector):
    """Connector querying Adzuna once per European country.

    Incremental fetch is pushed to the API through `max_days_old`, derived
    from the watermark of previously stored `adzuna-` postings. A failing
    country is logged and skipped; the fetch only fails when every country
    failed.
    """

    CONNECTOR_ID = "eures"
    DISPLAY_NAME = "EURES"
    ID_PREFIX = "adzuna-"
    API_URL = "https://api.adzuna.com/v1/api/jobs"
    SEARCH_QUERY = "developer OR programmer OR software"
    RESULTS_PER_PAGE = 100

    def __init__(
        self,
        app_id: str | None,
        app_key: str | None,
        job_store: JobStorePort | None = None,
        request_timeout_seconds: float = 30.0,
        page_delay_seconds: float = 1.0,
        countries: tuple[str, ...] = EURES_COUNTRIES,
        sleep_provider: Callable[[float], None] | None = None,
    ):
        """Initialize EURES connector.

        Args:
            app_id: Adzuna application id; blank disables fetching.
            app_key: Adzuna application key; blank disables fetching.
            job_store: Optional store used for watermarks and the sync cycle.
            request_timeout_seconds: HTTP request timeout in seconds.
            page_delay_seconds: Pause between country queries.
            countries: Adzuna country codes to query in order.
            sleep_provider: Optional sleep function.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the country list is empty.
        """

        super().__init__(
            job_store=job_store,
            request_timeout_seconds=request_timeout_seconds,
            page_delay_seconds=page_delay_seconds,
            sleep_provider=sleep_provider,
        )
        if not countries:
            raise ValueError("countries must not be empty")
        self._app_id = (app_id or "").strip()
        self._app_key = (app_key or "").strip()
        self._countries = countries

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Fetch postings from every configured country.

        Returns:
            list[JobPost]: Normalized postings unique by id; empty without credentials.

        Raises:
            ConnectorError: Raised with the last country error when every country failed.
        """

        if not self._app_id or not self._app_key:
            logger.warning("eures connector has no Adzuna credentials, returning an empty batch")
            return []

        max_days_old = connector_max_days_old(self._connector_watermark())
        fetched_at = domain_utc_now()
        jobs: list[JobPost] = []
        last_error: ConnectorError | None = None
        succeeded_countries = 0

        for index, country in enumerate(self._countries):
            if index > 0:
                self._connector_pause()
            try:
                country_jobs = self._eures_fetch_country(country, max_days_old, fetched_at)
            except ConnectorError as error:
                last_error = error
                logger.warning("eures country query failed country=%s error=%s", country, error)
                continue
            succeeded_countries += 1
            jobs.extend(country_jobs)

        if succeeded_countries == 0 and last_error is not None:
            raise ConnectorError(f"all eures country queries failed, last error: {last_error}") from last_error

        logger.info(
            "eures fetched=%d countries_ok=%d/%d max_days_old=%s",
            len(jobs),
            succeeded_countries,
            len(self._countries),
            max_days_old,
        )
        return connector_deduplicate_batch(jobs)

    def _eures_fetch_country(self, country: str, max_days_old: int | None, fetched_at: datetime) -> list[JobPost]:
        """Query one Adzuna country endpoint.

        Args:
            country: Adzuna country code.
            max_days_old: Optional age filter in days.
            fetched_at: Fetch timestamp used as posted-date fallback.

        Returns:
            list[JobPost]: Normalized postings of that country.

        Raises:
            ConnectorError: Raised on transport, HTTP status, or payload failure.
        """

        params: dict[str, object] = {
            "app_id": self._app_id,
            "app_key": self._app_key,
            "results_per_page": self.RESULTS_PER_PAGE,
            "what": self.SEARCH_QUERY,
        }
        if max_days_old is not None:
            params["max_days_old"] = max_days_old

        payload = self._connector_request_json("GET", f"{self.API_URL}/{country}/search/1", params=params)
        if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
            raise ConnectorPayloadError(f"adzuna response for country={country} is missing the results list")

        return [
            self._eures_transform_job(result, country, fetched_at)
            for result in payload["results"]
            if isinstance(result, dict) and result.get("id") not in (None, "")
        ]

    def _eures_transform_job(self, result: dict[str, Any], country: str, fetched_at: datetime) -> JobPost:
        """Map one Adzuna result to a normalized posting."""

        original_id = str(result["id"])
        title = str(result.get("title") or "")
        description = str(result.get("description") or "")
        company = result.get("company") if isinstance(result.get("company"), dict) else {}
        location = result.get("location") if isinstance(result.get("location"), dict) else {}
        areas = [area for area in location.get("area") or [] if isinstance(area, str)]
        posted_date = domain_parse_timestamp_or_now(result.get("created"), fetched_at)
        salary_min = _eures_positive_int(result.get("salary_min"))
        salary_max = _eures_positive_int(result.get("salary_max"))

        return JobPost(
            job_id=f"{self.ID_PREFIX}{original_id}",
            title=title,
            company=str(company.get("display_name") or ""),
            description=description,
            location=", ".join(areas),
            salary=_eures_format_salary(salary_min, salary_max),
            salary_min=salary_min,
            salary_max=salary_max,
            salary_currency="EUR" if salary_min or salary_max else "",
            url=str(result.get("redirect_url") or ""),
            employment_type=domain_map_employment_type(result.get("contract_time")),
            experience_level="Mid-level",
            posted_date=posted_date,
            expires_date=domain_add_months(posted_date, 1),
            requirements=domain_extract_requirements(f"{title} {description}"),
            fields={
                "source": "adzuna",
                "original_id": original_id,
                "country": country,
                "contract_type": result.get("contract_type") or "",
                "contract_time": result.get("contract_time") or "",
                "location_area": areas,
                "fetched_at": fetched_at.isoformat(),
            },
        )


def _eures_positive_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return int(value)


def _eures_format_salary(salary_min: int | None, salary_max: int | None) -> str:
    if salary_min and salary_max:
        return f"€{salary_min} - €{salary_max}"
    if salary_min:
        return f"€{salary_min}+"
    if salary_max:
        return f"Up to €{salary_max}"
    return ""
