"""Incremental fetch watermark and batch dedup helpers.

The watermark of a source is the `posted_date` of its newest stored posting.
It is derived from the store on every sync and never persisted separately.
Source and store clocks are assumed comparable; a source whose clock runs
behind the stored dates can have new postings filtered out.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from app.db import JobStorePort
from app.domain import JobPost, domain_utc_now

logger = logging.getLogger(__name__)


def connector_resolve_watermark(job_store: JobStorePort, id_prefix: str) -> datetime | None:
    """Resolve the watermark of one source from the store.

    A store failure is logged and treated as "no watermark", so the source
    falls back to a full fetch rather than no fetch.

    Args:
        job_store: Store holding previously ingested postings.
        id_prefix: Source id namespace such as `remotive-`.

    Returns:
        datetime | None: Newest stored posting date, or None.

    Raises:
        ValueError: Raised when id_prefix is blank.
    """

    normalized_prefix = id_prefix.strip()
    if not normalized_prefix:
        raise ValueError("id_prefix must not be blank")

    try:
        most_recent_job = job_store.db_job_get_most_recent(normalized_prefix)
    except RuntimeError:
        logger.warning("watermark lookup failed prefix=%s, falling back to full fetch", normalized_prefix, exc_info=True)
        return None

    if most_recent_job is None:
        return None
    return most_recent_job.posted_date


def connector_filter_newer_than(jobs: list[JobPost], watermark: datetime | None) -> list[JobPost]:
    """Keep postings strictly newer than the watermark.

    Args:
        jobs: Candidate postings.
        watermark: Optional watermark; None keeps every posting.

    Returns:
        list[JobPost]: Postings newer than the watermark, order preserved.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if watermark is None:
        return list(jobs)
    return [job for job in jobs if job.posted_date > watermark]


def connector_max_days_old(watermark: datetime | None, now: datetime | None = None) -> int | None:
    """Convert a watermark into a whole-day age filter for source APIs.

    Args:
        watermark: Optional watermark.
        now: Optional reference time, defaults to current UTC time.

    Returns:
        int | None: Days since the watermark rounded up, at least 1; None without a watermark.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if watermark is None:
        return None
    reference_time = now or domain_utc_now()
    elapsed_days = (reference_time - watermark).total_seconds() / 86400
    return max(1, math.ceil(elapsed_days))


def connector_deduplicate_batch(jobs: list[JobPost]) -> list[JobPost]:
    """Drop repeated ids within one batch; the first occurrence wins.

    Args:
        jobs: Candidate postings.

    Returns:
        list[JobPost]: Postings unique by `job_id`, order preserved.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    seen_job_ids: set[str] = set()
    unique_jobs: list[JobPost] = []
    for job in jobs:
        if job.job_id in seen_job_ids:
            continue
        seen_job_ids.add(job.job_id)
        unique_jobs.append(job)

    dropped_count = len(jobs) - len(unique_jobs)
    if dropped_count:
        logger.debug("dropped %d duplicate ids within batch", dropped_count)
    return unique_jobs
