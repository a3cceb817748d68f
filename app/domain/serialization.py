"""JSON payload serialization for domain records.

The job posting payload is the wire shape shared by the plugin HTTP surface and
the HTTP plugin connector decoder.
"""

from __future__ import annotations

from datetime import datetime, timezone

from .models import JobPost, SyncLogRecord


def domain_format_timestamp(value: datetime | None) -> str | None:
    """Format timestamp as an RFC 3339 UTC string.

    Args:
        value: Optional timestamp.

    Returns:
        str | None: Formatted timestamp, or None when value is None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def domain_job_post_to_payload(job: JobPost) -> dict[str, object]:
    """Serialize one job posting to its JSON payload.

    Args:
        job: Normalized job posting.

    Returns:
        dict[str, object]: JSON-serializable job payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "id": job.job_id,
        "title": job.title,
        "company": job.company,
        "description": job.description,
        "location": job.location,
        "salary": job.salary,
        "salary_min": job.salary_min,
        "salary_max": job.salary_max,
        "salary_currency": job.salary_currency,
        "is_remote": job.is_remote,
        "url": job.url,
        "employment_type": job.employment_type,
        "experience_level": job.experience_level,
        "posted_date": domain_format_timestamp(job.posted_date),
        "expires_date": domain_format_timestamp(job.expires_date),
        "requirements": list(job.requirements),
        "benefits": list(job.benefits),
        "fields": dict(job.fields),
    }


def domain_sync_log_to_payload(record: SyncLogRecord) -> dict[str, object]:
    """Serialize one sync audit entry to its JSON payload.

    Args:
        record: Sync audit entry.

    Returns:
        dict[str, object]: JSON-serializable sync log payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "sync_log_id": str(record.sync_log_id) if record.sync_log_id is not None else None,
        "connector_name": record.connector_name,
        "started_at_utc": domain_format_timestamp(record.started_at_utc),
        "completed_at_utc": domain_format_timestamp(record.completed_at_utc),
        "jobs_fetched": record.jobs_fetched,
        "jobs_inserted": record.jobs_inserted,
        "jobs_duplicates": record.jobs_duplicates,
        "jobs_failed": record.jobs_failed,
        "status": record.status,
        "error_message": record.error_message,
    }


__all__ = ["domain_format_timestamp", "domain_job_post_to_payload", "domain_sync_log_to_payload"]
