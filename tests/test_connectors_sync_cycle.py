"""Regression tests for the per-connector fetch, dedup, and store cycle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.connectors import BaseJobConnector, ConnectorConnectionError, connector_run_sync_cycle
from app.db import JobAlreadyExistsError
from app.domain import SYNC_STATUS_ERROR, SYNC_STATUS_PARTIAL, SYNC_STATUS_SUCCESS, JobPost, SyncLogRecord

_BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _build_job(job_id: str, posted_offset_hours: int = 0) -> JobPost:
    return JobPost(
        job_id=job_id,
        title=f"title {job_id}",
        company="Acme",
        posted_date=_BASE_TIME + timedelta(hours=posted_offset_hours),
    )


class _InMemoryJobStore:
    """In-memory job store test double mirroring the SQL store contract."""

    def __init__(self) -> None:
        self.jobs: dict[str, JobPost] = {}
        self.sync_logs: list[SyncLogRecord] = []
        self.failing_job_ids: set[str] = set()
        self.racing_job_ids: set[str] = set()
        self.unreadable_job_ids: set[str] = set()
        self.fail_sync_log_insert = False

    def db_job_create(self, job: JobPost) -> None:
        """Insert posting, enforcing id uniqueness."""

        if job.job_id in self.failing_job_ids:
            raise RuntimeError("failed to insert job post")
        if job.job_id in self.jobs or job.job_id in self.racing_job_ids:
            raise JobAlreadyExistsError(f"job post already exists id={job.job_id}")
        self.jobs[job.job_id] = job

    def db_job_get_by_id(self, job_id: str) -> JobPost | None:
        """Return stored posting by id or raise for configured unreadable rows."""

        if job_id in self.unreadable_job_ids:
            raise TypeError(f"unreadable row id={job_id}")
        return self.jobs.get(job_id)

    def db_job_get_most_recent(self, id_prefix: str) -> JobPost | None:
        """Return newest posting with id prefix."""

        matching_jobs = [job for job in self.jobs.values() if job.job_id.startswith(id_prefix)]
        if not matching_jobs:
            return None
        return max(matching_jobs, key=lambda job: job.posted_date)

    def db_sync_log_insert(self, record: SyncLogRecord) -> SyncLogRecord:
        """Append audit entry or raise configured failure."""

        if self.fail_sync_log_insert:
            raise RuntimeError("failed to insert sync log")
        self.sync_logs.append(record)
        return record

    def db_sync_log_list_recent(self, limit: int) -> list[SyncLogRecord]:
        """Return newest audit entries first."""

        return list(reversed(self.sync_logs))[:limit]

    def db_sync_log_get_latest_success(self, connector_name: str) -> SyncLogRecord | None:
        """Return newest successful entry for one connector."""

        for record in reversed(self.sync_logs):
            if record.connector_name == connector_name and record.status == SYNC_STATUS_SUCCESS:
                return record
        return None


class _StaticConnector(BaseJobConnector):
    """Connector test double returning a fixed batch or raising a fixed error."""

    CONNECTOR_ID = "static"
    DISPLAY_NAME = "Static"
    ID_PREFIX = "static-"

    def __init__(self, job_store: _InMemoryJobStore, jobs: list[JobPost], error: Exception | None = None):
        super().__init__(job_store=job_store)
        self.jobs = jobs
        self.error = error

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Return configured batch or raise configured error."""

        if self.error is not None:
            raise self.error
        return list(self.jobs)


def test_sync_cycle_second_run_counts_everything_as_duplicate() -> None:
    """Insert a batch once and count the unchanged batch as duplicates next time.

    Returns:
        None: Assertions validate idempotent sync behavior.

    Raises:
        AssertionError: Raised when a second sync inserts again.
    """

    store = _InMemoryJobStore()
    connector = _StaticConnector(store, [_build_job("static-1"), _build_job("static-2", 1)])

    first_record = connector.connector_sync_jobs()
    second_record = connector.connector_sync_jobs()

    assert (first_record.jobs_fetched, first_record.jobs_inserted, first_record.jobs_duplicates) == (2, 2, 0)
    assert (second_record.jobs_fetched, second_record.jobs_inserted, second_record.jobs_duplicates) == (2, 0, 2)
    assert second_record.status == SYNC_STATUS_SUCCESS
    assert len(store.jobs) == 2
    assert len(store.sync_logs) == 2


def test_sync_cycle_counts_lost_insert_race_as_duplicate() -> None:
    """Count an insert conflict raised by the store as a duplicate.

    Returns:
        None: Assertions validate race handling.

    Raises:
        AssertionError: Raised when the conflict is counted as failure.
    """

    store = _InMemoryJobStore()
    store.racing_job_ids.add("static-1")
    connector = _StaticConnector(store, [_build_job("static-1"), _build_job("static-2")])

    record = connector_run_sync_cycle(connector=connector, job_store=store)

    assert record.jobs_inserted == 1
    assert record.jobs_duplicates == 1
    assert record.jobs_failed == 0
    assert record.status == SYNC_STATUS_SUCCESS


def test_sync_cycle_marks_partial_when_single_records_fail() -> None:
    """Continue past per-record store errors and conserve counts.

    Returns:
        None: Assertions validate partial status and count conservation.

    Raises:
        AssertionError: Raised when counts do not add up.
    """

    store = _InMemoryJobStore()
    store.failing_job_ids.add("static-2")
    connector = _StaticConnector(store, [_build_job("static-1"), _build_job("static-2"), _build_job("static-3")])

    record = connector_run_sync_cycle(connector=connector, job_store=store)

    assert record.status == SYNC_STATUS_PARTIAL
    assert record.jobs_inserted + record.jobs_duplicates + record.jobs_failed == record.jobs_fetched
    assert record.jobs_failed == 1
    assert record.error_message == "1 of 3 jobs failed to store"
    assert set(store.jobs) == {"static-1", "static-3"}


def test_sync_cycle_skips_record_when_store_raises_unexpected_error() -> None:
    """Count any per-record store exception as failed and keep processing the batch.

    Returns:
        None: Assertions validate failure isolation and the single audit entry.

    Raises:
        AssertionError: Raised when the cycle aborts or writes no audit entry.
    """

    store = _InMemoryJobStore()
    store.unreadable_job_ids.add("static-2")
    connector = _StaticConnector(store, [_build_job("static-1"), _build_job("static-2"), _build_job("static-3")])

    record = connector_run_sync_cycle(connector=connector, job_store=store)

    assert record.status == SYNC_STATUS_PARTIAL
    assert (record.jobs_fetched, record.jobs_inserted, record.jobs_failed) == (3, 2, 1)
    assert set(store.jobs) == {"static-1", "static-3"}
    assert store.sync_logs == [record]


def test_sync_cycle_writes_error_entry_and_reraises_on_fetch_failure() -> None:
    """Record an error audit entry with the failure text, then re-raise.

    Returns:
        None: Assertions validate error audit behavior.

    Raises:
        AssertionError: Raised when no error entry is written.
    """

    store = _InMemoryJobStore()
    connector = _StaticConnector(store, [], error=ConnectorConnectionError("source unreachable"))
    clock_values = iter([_BASE_TIME, _BASE_TIME + timedelta(seconds=3)])

    with pytest.raises(ConnectorConnectionError, match="source unreachable"):
        connector_run_sync_cycle(connector=connector, job_store=store, clock=lambda: next(clock_values))

    assert len(store.sync_logs) == 1
    error_record = store.sync_logs[0]
    assert error_record.status == SYNC_STATUS_ERROR
    assert error_record.connector_name == "static"
    assert error_record.error_message == "source unreachable"
    assert error_record.jobs_fetched == 0
    assert error_record.completed_at_utc - error_record.started_at_utc == timedelta(seconds=3)


def test_sync_cycle_returns_record_when_audit_write_fails() -> None:
    """Keep the sync outcome when the audit log cannot be written.

    Returns:
        None: Assertions validate audit failure isolation.

    Raises:
        AssertionError: Raised when audit failure masks the outcome.
    """

    store = _InMemoryJobStore()
    store.fail_sync_log_insert = True
    connector = _StaticConnector(store, [_build_job("static-1")])

    record = connector_run_sync_cycle(connector=connector, job_store=store)

    assert record.jobs_inserted == 1
    assert record.sync_log_id is None
    assert "static-1" in store.jobs


def test_base_connector_sync_requires_job_store() -> None:
    """Refuse to sync a built-in connector without a store.

    Returns:
        None: Assertions validate guard behavior.

    Raises:
        AssertionError: Raised when sync runs without a store.
    """

    connector = _StaticConnector(None, [])

    with pytest.raises(RuntimeError, match="job store"):
        connector.connector_sync_jobs()
