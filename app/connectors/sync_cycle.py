"""One fetch, dedup and store cycle for a single connector."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from app.db import JobAlreadyExistsError, JobStorePort, SyncLogRepositoryPort
from app.domain import (
    SYNC_STATUS_ERROR,
    SYNC_STATUS_PARTIAL,
    SYNC_STATUS_SUCCESS,
    SyncLogRecord,
    domain_utc_now,
)

if TYPE_CHECKING:
    from datetime import datetime

    from .interfaces import ConnectorPort

logger = logging.getLogger(__name__)


def connector_run_sync_cycle(
    connector: ConnectorPort,
    job_store: JobStorePort,
    clock: Callable[[], datetime] | None = None,
) -> SyncLogRecord:
    """Fetch one batch, store unseen postings and append one audit entry.

    Per-record store failures are counted in `jobs_failed` and mark the attempt
    `partial`; the batch continues. An insert that loses the race against a
    concurrent sync is counted as a duplicate. There is no internal retry.

    Args:
        connector: Connector supplying identity and the batch.
        job_store: Store for postings and the audit log.
        clock: Optional UTC clock, defaults to current time.

    Returns:
        SyncLogRecord: The audit entry, persisted when the audit write succeeded.

    Raises:
        ConnectorError: Re-raised from the fetch after the error entry is written.
    """

    if connector is None:
        raise ValueError("connector must not be None")
    if job_store is None:
        raise ValueError("job_store must not be None")

    now_utc = clock or domain_utc_now
    connector_name = connector.connector_identify().connector_id
    started_at_utc = now_utc()

    try:
        jobs = connector.connector_fetch_jobs()
    except Exception as error:
        logger.error("connector fetch failed connector=%s error=%s", connector_name, error)
        connector_write_sync_log(
            sync_log_repository=job_store,
            record=SyncLogRecord(
                connector_name=connector_name,
                started_at_utc=started_at_utc,
                completed_at_utc=now_utc(),
                jobs_fetched=0,
                jobs_inserted=0,
                jobs_duplicates=0,
                status=SYNC_STATUS_ERROR,
                error_message=str(error) or type(error).__name__,
            ),
        )
        raise

    jobs_inserted = 0
    jobs_duplicates = 0
    jobs_failed = 0
    for job in jobs:
        try:
            if job_store.db_job_get_by_id(job.job_id) is not None:
                jobs_duplicates += 1
                continue
            job_store.db_job_create(job)
            jobs_inserted += 1
        except JobAlreadyExistsError:
            jobs_duplicates += 1
        except Exception as error:
            jobs_failed += 1
            logger.warning("failed to store job connector=%s job_id=%s error=%r", connector_name, job.job_id, error)

    error_message = None
    status = SYNC_STATUS_SUCCESS
    if jobs_failed:
        status = SYNC_STATUS_PARTIAL
        error_message = f"{jobs_failed} of {len(jobs)} jobs failed to store"

    logger.info(
        "connector sync finished connector=%s status=%s fetched=%d inserted=%d duplicates=%d failed=%d",
        connector_name,
        status,
        len(jobs),
        jobs_inserted,
        jobs_duplicates,
        jobs_failed,
    )
    return connector_write_sync_log(
        sync_log_repository=job_store,
        record=SyncLogRecord(
            connector_name=connector_name,
            started_at_utc=started_at_utc,
            completed_at_utc=now_utc(),
            jobs_fetched=len(jobs),
            jobs_inserted=jobs_inserted,
            jobs_duplicates=jobs_duplicates,
            jobs_failed=jobs_failed,
            status=status,
            error_message=error_message,
        ),
    )


def connector_write_sync_log(sync_log_repository: SyncLogRepositoryPort, record: SyncLogRecord) -> SyncLogRecord:
    """Append one audit entry without letting an audit failure mask the sync outcome.

    Args:
        sync_log_repository: Audit log repository.
        record: Entry to append.

    Returns:
        SyncLogRecord: Persisted entry, or the unpersisted entry when the write failed.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        return sync_log_repository.db_sync_log_insert(record)
    except RuntimeError:
        logger.exception("failed to write sync log connector=%s status=%s", record.connector_name, record.status)
        return record
