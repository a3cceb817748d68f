"""Typed domain models shared across runtime layers.

This module provides the data contracts exchanged between connectors, the
sync cycle, the store boundary, and the API surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

SYNC_STATUS_SUCCESS = "success"
SYNC_STATUS_PARTIAL = "partial"
SYNC_STATUS_ERROR = "error"
SYNC_STATUSES = frozenset({SYNC_STATUS_SUCCESS, SYNC_STATUS_PARTIAL, SYNC_STATUS_ERROR})


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class ConnectorIdentity:
    """Registry key and display label for one connector.

    Attributes:
        connector_id: Stable identifier, also the sync log join key.
        display_name: Human-readable connector name.
    """

    connector_id: str
    display_name: str

    def __post_init__(self) -> None:
        if not self.connector_id.strip():
            raise ValueError("connector_id must not be blank")
        if not self.display_name.strip():
            raise ValueError("display_name must not be blank")


@dataclass(frozen=True)
class JobPost:
    """Normalized job posting produced by a connector.

    The identifier is namespaced by source (for example `remotive-123`) so
    records from different sources can never collide. `posted_date` is always
    populated and doubles as the incremental fetch watermark.

    Attributes:
        job_id: Source-prefixed unique identifier.
        title: Posting title.
        company: Hiring organization.
        description: Free-text description.
        location: Human-readable location.
        salary: Compensation text as provided by the source.
        salary_min: Optional lower salary bound.
        salary_max: Optional upper salary bound.
        salary_currency: Currency code for salary bounds.
        is_remote: Whether the position allows remote work.
        url: Application or source URL.
        employment_type: Normalized employment type label.
        experience_level: Normalized experience level label.
        posted_date: Posting timestamp, fetch time when the source omits it.
        expires_date: Optional expiry timestamp.
        requirements: Ordered requirement tags.
        benefits: Ordered benefit tags.
        fields: Source-specific metadata.
    """

    job_id: str
    title: str
    company: str
    posted_date: datetime
    description: str = ""
    location: str = ""
    salary: str = ""
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str = ""
    is_remote: bool = False
    url: str = ""
    employment_type: str = ""
    experience_level: str = ""
    expires_date: datetime | None = None
    requirements: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SyncLogRecord:
    """Immutable audit entry describing one sync attempt of one connector.

    Attributes:
        connector_name: Connector identifier the attempt belongs to.
        started_at_utc: Attempt start timestamp in UTC.
        completed_at_utc: Attempt completion timestamp in UTC.
        jobs_fetched: Records returned by the fetch step.
        jobs_inserted: Records newly stored.
        jobs_duplicates: Records skipped because they were already stored.
        jobs_failed: Records skipped because of a store error.
        status: Attempt outcome (`success`, `partial`, `error`).
        error_message: Optional failure description.
        sync_log_id: Store-assigned identifier once persisted.
    """

    connector_name: str
    started_at_utc: datetime
    completed_at_utc: datetime
    jobs_fetched: int
    jobs_inserted: int
    jobs_duplicates: int
    status: str
    jobs_failed: int = 0
    error_message: str | None = None
    sync_log_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.status not in SYNC_STATUSES:
            raise ValueError(f"unsupported sync status={self.status}")
