"""Shared connector base class with pooled HTTP transport and sync delegation."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Final

import httpx

from app.db import JobStorePort
from app.domain import ConnectorIdentity, JobPost, SyncLogRecord

from .errors import (
    ConnectorConnectionError,
    ConnectorHTTPStatusError,
    ConnectorPayloadError,
    ConnectorTimeoutError,
)
from .interfaces import ConnectorPort
from .sync_cycle import connector_run_sync_cycle
from .watermark import connector_resolve_watermark

logger = logging.getLogger(__name__)

_ERROR_BODY_PREVIEW_CHARS: Final[int] = 500


class BaseJobConnector(ConnectorPort):
    """Base class for built-in connectors.

    Subclasses set `CONNECTOR_ID`, `DISPLAY_NAME` and `ID_PREFIX` and implement
    `connector_fetch_jobs()`. The full sync cycle is inherited.
    """

    CONNECTOR_ID: str = ""
    DISPLAY_NAME: str = ""
    ID_PREFIX: str = ""
    USER_AGENT: Final[str] = "openjobs/1.0 (+https://github.com/openjobs; python-httpx)"

    def __init__(
        self,
        job_store: JobStorePort | None = None,
        request_timeout_seconds: float = 30.0,
        page_delay_seconds: float = 1.0,
        sleep_provider: Callable[[float], None] | None = None,
    ):
        """Initialize shared connector configuration.

        Args:
            job_store: Optional store used for watermarks and the sync cycle.
            request_timeout_seconds: HTTP request timeout in seconds.
            page_delay_seconds: Pause between consecutive source queries.
            sleep_provider: Optional sleep function, defaults to `time.sleep`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when configuration values are invalid.
        """

        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        if page_delay_seconds < 0:
            raise ValueError("page_delay_seconds must be >= 0")

        self._job_store = job_store
        self._request_timeout_seconds = request_timeout_seconds
        self._page_delay_seconds = page_delay_seconds
        self._sleep_provider = sleep_provider or time.sleep
        self._http_client: httpx.Client | None = None

    def connector_identify(self) -> ConnectorIdentity:
        """Return the connector registry key and display name.

        Returns:
            ConnectorIdentity: Stable identity from class attributes.

        Raises:
            ValueError: Raised when a subclass left its identity blank.
        """

        return ConnectorIdentity(connector_id=self.CONNECTOR_ID, display_name=self.DISPLAY_NAME)

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Fetch jobs from the source; implemented by subclasses."""

        raise NotImplementedError

    def connector_sync_jobs(self) -> SyncLogRecord:
        """Run one sync cycle against the configured job store.

        Returns:
            SyncLogRecord: Audit entry describing the attempt.

        Raises:
            RuntimeError: Raised when no job store is configured.
            ConnectorError: Raised after the error audit entry is written when the fetch fails.
        """

        if self._job_store is None:
            raise RuntimeError(f"connector {self.CONNECTOR_ID} has no job store configured")
        return connector_run_sync_cycle(connector=self, job_store=self._job_store)

    def connector_close(self) -> None:
        """Close the pooled HTTP client when one was opened."""

        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _connector_watermark(self) -> datetime | None:
        """Return the source watermark, or None when no store is configured."""

        if self._job_store is None:
            return None
        return connector_resolve_watermark(job_store=self._job_store, id_prefix=self.ID_PREFIX)

    def _connector_pause(self) -> None:
        """Sleep for the configured inter-query delay."""

        if self._page_delay_seconds > 0:
            self._sleep_provider(self._page_delay_seconds)

    def _connector_request_json(
        self,
        method: str,
        url: str,
        params: dict[str, object] | None = None,
        json_body: object | None = None,
    ) -> object:
        """Send one HTTP request and decode the JSON response body.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            params: Optional query parameters.
            json_body: Optional JSON request body.

        Returns:
            object: Decoded JSON document.

        Raises:
            ConnectorTimeoutError: Raised when the request times out.
            ConnectorConnectionError: Raised on transport failure.
            ConnectorHTTPStatusError: Raised on a non-2xx response.
            ConnectorPayloadError: Raised when the body is not valid JSON.
        """

        client = self._connector_http_client()
        try:
            response = client.request(method, url, params=params, json=json_body)
        except httpx.TimeoutException as error:
            raise ConnectorTimeoutError(f"{self.CONNECTOR_ID or 'connector'} request timed out: {method} {url}") from error
        except httpx.HTTPError as error:
            raise ConnectorConnectionError(
                f"{self.CONNECTOR_ID or 'connector'} request failed: {method} {url}: {error}"
            ) from error

        if not 200 <= response.status_code < 300:
            body_preview = response.text[:_ERROR_BODY_PREVIEW_CHARS]
            raise ConnectorHTTPStatusError(
                f"{method} {url} returned HTTP {response.status_code}: {body_preview}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as error:
            raise ConnectorPayloadError(f"{method} {url} returned a non-JSON body") from error

    def _connector_http_client(self) -> httpx.Client:
        """Return the pooled HTTP client, creating it on first use."""

        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=self._request_timeout_seconds,
                follow_redirects=True,
                headers={"User-Agent": self.USER_AGENT, "Accept": "application/json"},
            )
        return self._http_client
