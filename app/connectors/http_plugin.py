"""Connector proxy for a connector hosted in a remote plugin service."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Final

from app.db import SyncLogRepositoryPort
from app.domain import (
    SYNC_STATUS_ERROR,
    SYNC_STATUS_SUCCESS,
    ConnectorIdentity,
    JobPost,
    SyncLogRecord,
    domain_parse_timestamp,
    domain_utc_now,
)

from .base import BaseJobConnector
from .errors import ConnectorError, PluginProtocolError
from .sync_cycle import connector_write_sync_log
from .watermark import connector_deduplicate_batch

logger = logging.getLogger(__name__)

DEFAULT_PLUGIN_TIMEOUT_SECONDS: Final[float] = 360.0

PLUGIN_DISPLAY_NAMES: Final[dict[str, str]] = {
    "arbetsformedlingen": "Arbetsförmedlingen",
    "eures": "EURES",
    "remotive": "Remotive",
    "remoteok": "RemoteOK",
    "indeed-chrome": "Indeed Chrome",
    "jooble": "Jooble",
}


class HTTPPluginConnector(BaseJobConnector):
    """Connector that delegates fetch and sync to a plugin over HTTP.

    The plugin answers `GET /jobs` and `POST /sync` with the envelope
    `{success, data?, error?, message?}`. The remote side writes its own audit
    entries; when a sync-log repository is configured here, a failed remote
    sync is recorded locally as one `error` entry.
    """

    def __init__(
        self,
        plugin_id: str,
        display_name: str,
        base_url: str,
        request_timeout_seconds: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS,
        sync_log_repository: SyncLogRepositoryPort | None = None,
    ):
        """Initialize HTTP plugin connector.

        Args:
            plugin_id: Connector id served by the plugin.
            display_name: Human-readable connector name.
            base_url: Plugin service base URL.
            request_timeout_seconds: HTTP timeout; plugins may scrape for minutes.
            sync_log_repository: Optional audit log for recording remote sync failures.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when identity or base URL values are blank.
        """

        super().__init__(job_store=None, request_timeout_seconds=request_timeout_seconds, page_delay_seconds=0)

        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")

        self._identity = ConnectorIdentity(connector_id=plugin_id.strip(), display_name=display_name.strip())
        self._base_url = normalized_base_url.rstrip("/")
        self._sync_log_repository = sync_log_repository

    def connector_identify(self) -> ConnectorIdentity:
        """Return the identity configured for the remote plugin."""

        return self._identity

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Fetch the plugin's current batch via `GET /jobs`.

        Returns:
            list[JobPost]: Decoded postings unique by id.

        Raises:
            ConnectorError: Raised on transport, HTTP status, or envelope failure.
        """

        fetched_at = domain_utc_now()
        envelope = self._plugin_call("GET", "/jobs")
        data_value = envelope.get("data")
        if not isinstance(data_value, list):
            raise PluginProtocolError(f"plugin {self._identity.display_name} returned invalid data format")

        jobs: list[JobPost] = []
        for job_value in data_value:
            if not isinstance(job_value, dict):
                raise PluginProtocolError(f"plugin {self._identity.display_name} returned invalid job data format")
            job = self._plugin_decode_job(job_value, fetched_at)
            if job is None:
                logger.warning("skipping plugin job without id plugin=%s", self._identity.connector_id)
                continue
            jobs.append(job)

        logger.info("fetched %d jobs from plugin id=%s url=%s", len(jobs), self._identity.connector_id, self._base_url)
        return connector_deduplicate_batch(jobs)

    def connector_sync_jobs(self) -> SyncLogRecord:
        """Trigger the plugin's own sync cycle via `POST /sync`.

        Returns:
            SyncLogRecord: Local summary of the accepted remote sync; counts live
            in the audit entry the plugin wrote itself.

        Raises:
            ConnectorError: Raised after recording an error entry when the remote call failed.
        """

        started_at_utc = domain_utc_now()
        try:
            envelope = self._plugin_call("POST", "/sync", json_body={})
        except ConnectorError as error:
            if self._sync_log_repository is not None:
                connector_write_sync_log(
                    sync_log_repository=self._sync_log_repository,
                    record=SyncLogRecord(
                        connector_name=self._identity.connector_id,
                        started_at_utc=started_at_utc,
                        completed_at_utc=domain_utc_now(),
                        jobs_fetched=0,
                        jobs_inserted=0,
                        jobs_duplicates=0,
                        status=SYNC_STATUS_ERROR,
                        error_message=str(error),
                    ),
                )
            raise

        logger.info(
            "plugin sync accepted id=%s message=%s",
            self._identity.connector_id,
            envelope.get("message") or "",
        )
        return SyncLogRecord(
            connector_name=self._identity.connector_id,
            started_at_utc=started_at_utc,
            completed_at_utc=domain_utc_now(),
            jobs_fetched=0,
            jobs_inserted=0,
            jobs_duplicates=0,
            status=SYNC_STATUS_SUCCESS,
        )

    def _plugin_call(self, method: str, path: str, json_body: object | None = None) -> dict[str, Any]:
        """Call one plugin endpoint and validate the response envelope.

        Args:
            method: HTTP method.
            path: Endpoint path.
            json_body: Optional JSON request body.

        Returns:
            dict[str, Any]: Envelope with `success=true`.

        Raises:
            ConnectorError: Raised on transport or HTTP status failure.
            PluginProtocolError: Raised on malformed envelope or `success=false`.
        """

        envelope = self._connector_request_json(method, f"{self._base_url}{path}", json_body=json_body)
        if not isinstance(envelope, dict):
            raise PluginProtocolError(f"plugin {self._identity.display_name} returned a non-object envelope")
        if envelope.get("success") is not True:
            remote_error = envelope.get("error") or envelope.get("message") or "unknown error"
            raise PluginProtocolError(f"plugin {self._identity.display_name} error: {remote_error}")
        return envelope

    def _plugin_decode_job(self, job_value: dict[str, Any], fetched_at: datetime) -> JobPost | None:
        """Decode one job object field by field; wrongly typed fields fall back to defaults.

        Args:
            job_value: Raw job object from the envelope.
            fetched_at: Fetch timestamp used when `posted_date` is unusable.

        Returns:
            JobPost | None: Decoded posting, or None when the object carries no id.
        """

        job_id = _plugin_text(job_value, "id")
        if not job_id:
            return None

        return JobPost(
            job_id=job_id,
            title=_plugin_text(job_value, "title"),
            company=_plugin_text(job_value, "company"),
            description=_plugin_text(job_value, "description"),
            location=_plugin_text(job_value, "location"),
            salary=_plugin_text(job_value, "salary"),
            salary_min=_plugin_int(job_value, "salary_min"),
            salary_max=_plugin_int(job_value, "salary_max"),
            salary_currency=_plugin_text(job_value, "salary_currency"),
            is_remote=job_value.get("is_remote") is True,
            url=_plugin_text(job_value, "url"),
            employment_type=_plugin_text(job_value, "employment_type"),
            experience_level=_plugin_text(job_value, "experience_level"),
            posted_date=_plugin_timestamp(job_value, "posted_date") or fetched_at,
            expires_date=_plugin_timestamp(job_value, "expires_date"),
            requirements=_plugin_text_list(job_value, "requirements"),
            benefits=_plugin_text_list(job_value, "benefits"),
            fields=dict(job_value["fields"]) if isinstance(job_value.get("fields"), dict) else {},
        )


def _plugin_text(job_value: dict[str, Any], key: str) -> str:
    value = job_value.get(key)
    return value if isinstance(value, str) else ""


def _plugin_int(job_value: dict[str, Any], key: str) -> int | None:
    value = job_value.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _plugin_timestamp(job_value: dict[str, Any], key: str) -> datetime | None:
    value = job_value.get(key)
    if not isinstance(value, str):
        return None
    return domain_parse_timestamp(value)


def _plugin_text_list(job_value: dict[str, Any], key: str) -> list[str]:
    value = job_value.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def connector_build_http_plugins(
    plugin_urls: dict[str, str],
    display_names: dict[str, str] | None = None,
    request_timeout_seconds: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS,
    sync_log_repository: SyncLogRepositoryPort | None = None,
) -> list[HTTPPluginConnector]:
    """Build one HTTP plugin connector per configured plugin URL.

    Args:
        plugin_urls: Plugin id to base URL mapping; blank URLs are skipped.
        display_names: Optional plugin id to display name mapping, defaults to the built-in names.
        request_timeout_seconds: HTTP timeout for every plugin.
        sync_log_repository: Optional audit log for remote sync failures.

    Returns:
        list[HTTPPluginConnector]: Connectors in mapping order.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    connectors: list[HTTPPluginConnector] = []
    for plugin_id, plugin_url in plugin_urls.items():
        if not (plugin_url or "").strip():
            logger.info("skipping plugin with blank url id=%s", plugin_id)
            continue
        display_name = (display_names or PLUGIN_DISPLAY_NAMES).get(plugin_id, plugin_id)
        connectors.append(
            HTTPPluginConnector(
                plugin_id=plugin_id,
                display_name=f"{display_name} HTTP Plugin",
                base_url=plugin_url,
                request_timeout_seconds=request_timeout_seconds,
                sync_log_repository=sync_log_repository,
            )
        )
    return connectors
