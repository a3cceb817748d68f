"""Database service for job posting persistence and the sync audit log."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import JobPost, SyncLogRecord

from .interfaces import JobAlreadyExistsError, JobStorePort

_JOB_POST_COLUMNS = (
    "id, title, company, description, location, salary, salary_min, salary_max, salary_currency, "
    "is_remote, url, employment_type, experience_level, posted_date, expires_date, "
    "requirements, benefits, fields"
)

_SYNC_LOG_COLUMNS = (
    "sync_log_id, connector_name, started_at_utc, completed_at_utc, jobs_fetched, jobs_inserted, "
    "jobs_duplicates, jobs_failed, status, error_message"
)


class SQLAlchemyJobStoreService(JobStorePort):
    """SQLAlchemy-backed job store service.

    Job inserts are idempotent on the primary key: a conflicting insert does
    not modify the stored row and is reported as `JobAlreadyExistsError`.
    Sync audit entries are append-only.
    """

    def __init__(self, engine: Engine):
        """Initialize job store persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_job_create(self, job: JobPost) -> None:
        """Insert one job posting unless its id is already stored.

        Args:
            job: Normalized job posting.

        Returns:
            None: Insert does not return a value.

        Raises:
            JobAlreadyExistsError: Raised when the id is already stored.
            ValueError: Raised when job id is blank.
            RuntimeError: Raised when persistence fails.
        """

        normalized_job_id = self._validate_non_empty_text(job.job_id, "job_id")

        try:
            with self._engine.begin() as connection:
                inserted_row = connection.execute(
                    text(
                        "INSERT INTO job_posts ("
                        f"{_JOB_POST_COLUMNS}"
                        ") VALUES ("
                        ":id, :title, :company, :description, :location, :salary, :salary_min, :salary_max, "
                        ":salary_currency, :is_remote, :url, :employment_type, :experience_level, :posted_date, "
                        ":expires_date, :requirements, :benefits, CAST(:fields AS jsonb)"
                        ") "
                        "ON CONFLICT (id) DO NOTHING "
                        "RETURNING id"
                    ),
                    {
                        "id": normalized_job_id,
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
                        "posted_date": job.posted_date,
                        "expires_date": job.expires_date,
                        "requirements": list(job.requirements),
                        "benefits": list(job.benefits),
                        "fields": json.dumps(job.fields, default=str),
                    },
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to insert job post") from error

        if inserted_row is None:
            raise JobAlreadyExistsError(f"job post already exists: id={normalized_job_id}")

    def db_job_get_by_id(self, job_id: str) -> JobPost | None:
        """Fetch one job posting by id.

        Args:
            job_id: Source-prefixed job identifier.

        Returns:
            JobPost | None: Stored posting, or None when absent.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(f"SELECT {_JOB_POST_COLUMNS} FROM job_posts WHERE id = :id"),
                    {"id": job_id},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch job post by id") from error

        if row is None:
            return None
        return self._map_job_post(row)

    def db_job_get_most_recent(self, id_prefix: str) -> JobPost | None:
        """Fetch the most recently posted job whose id starts with a prefix.

        Args:
            id_prefix: Source id namespace such as `remotive-`.

        Returns:
            JobPost | None: Newest posting of that source, or None.

        Raises:
            ValueError: Raised when prefix is blank.
            RuntimeError: Raised when database read fails.
        """

        normalized_prefix = self._validate_non_empty_text(id_prefix, "id_prefix")

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        f"SELECT {_JOB_POST_COLUMNS} FROM job_posts "
                        "WHERE starts_with(id, :id_prefix) "
                        "ORDER BY posted_date DESC, id DESC "
                        "LIMIT 1"
                    ),
                    {"id_prefix": normalized_prefix},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch most recent job post") from error

        if row is None:
            return None
        return self._map_job_post(row)

    def db_sync_log_insert(self, record: SyncLogRecord) -> SyncLogRecord:
        """Append one sync audit entry.

        Args:
            record: Audit entry to persist.

        Returns:
            SyncLogRecord: Persisted entry carrying its store-assigned id.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                row = connection.execute(
                    text(
                        "INSERT INTO sync_logs ("
                        "connector_name, started_at_utc, completed_at_utc, jobs_fetched, jobs_inserted, "
                        "jobs_duplicates, jobs_failed, status, error_message"
                        ") VALUES ("
                        ":connector_name, :started_at_utc, :completed_at_utc, :jobs_fetched, :jobs_inserted, "
                        ":jobs_duplicates, :jobs_failed, :status, :error_message"
                        ") "
                        f"RETURNING {_SYNC_LOG_COLUMNS}"
                    ),
                    {
                        "connector_name": record.connector_name,
                        "started_at_utc": record.started_at_utc,
                        "completed_at_utc": record.completed_at_utc,
                        "jobs_fetched": record.jobs_fetched,
                        "jobs_inserted": record.jobs_inserted,
                        "jobs_duplicates": record.jobs_duplicates,
                        "jobs_failed": record.jobs_failed,
                        "status": record.status,
                        "error_message": record.error_message,
                    },
                ).mappings().one()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to insert sync log") from error

        return self._map_sync_log(row)

    def db_sync_log_list_recent(self, limit: int) -> list[SyncLogRecord]:
        """List the most recent audit entries, newest first.

        Args:
            limit: Maximum number of entries.

        Returns:
            list[SyncLogRecord]: Ordered audit entries.

        Raises:
            ValueError: Raised when limit is invalid.
            RuntimeError: Raised when database read fails.
        """

        if limit < 1:
            raise ValueError("limit must be >= 1")

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        f"SELECT {_SYNC_LOG_COLUMNS} FROM sync_logs "
                        "ORDER BY started_at_utc DESC, sync_log_id DESC "
                        "LIMIT :limit"
                    ),
                    {"limit": limit},
                ).mappings().all()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list sync logs") from error

        return [self._map_sync_log(row) for row in rows]

    def db_sync_log_get_latest_success(self, connector_name: str) -> SyncLogRecord | None:
        """Fetch the newest successful audit entry of one connector.

        Args:
            connector_name: Connector identifier.

        Returns:
            SyncLogRecord | None: Latest successful entry, or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        f"SELECT {_SYNC_LOG_COLUMNS} FROM sync_logs "
                        "WHERE connector_name = :connector_name AND status = 'success' "
                        "ORDER BY started_at_utc DESC "
                        "LIMIT 1"
                    ),
                    {"connector_name": connector_name},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch latest successful sync log") from error

        if row is None:
            return None
        return self._map_sync_log(row)

    def _map_job_post(self, row: Any) -> JobPost:
        """Map SQLAlchemy row mapping to typed job posting.

        Args:
            row: SQLAlchemy mapping row.

        Returns:
            JobPost: Typed job posting.

        Raises:
            RuntimeError: Raised when row structure is incompatible.
        """

        fields_value = row["fields"]
        if fields_value is not None and not isinstance(fields_value, dict):
            raise RuntimeError(f"job_posts.fields must be a JSON object when present id={row['id']}")

        return JobPost(
            job_id=row["id"],
            title=row["title"],
            company=row["company"],
            description=row["description"] or "",
            location=row["location"] or "",
            salary=row["salary"] or "",
            salary_min=row["salary_min"],
            salary_max=row["salary_max"],
            salary_currency=row["salary_currency"] or "",
            is_remote=bool(row["is_remote"]),
            url=row["url"] or "",
            employment_type=row["employment_type"] or "",
            experience_level=row["experience_level"] or "",
            posted_date=row["posted_date"],
            expires_date=row["expires_date"],
            requirements=list(row["requirements"] or []),
            benefits=list(row["benefits"] or []),
            fields=dict(fields_value or {}),
        )

    def _map_sync_log(self, row: Any) -> SyncLogRecord:
        """Map SQLAlchemy row mapping to typed sync audit entry."""

        return SyncLogRecord(
            sync_log_id=row["sync_log_id"],
            connector_name=row["connector_name"],
            started_at_utc=row["started_at_utc"],
            completed_at_utc=row["completed_at_utc"],
            jobs_fetched=row["jobs_fetched"],
            jobs_inserted=row["jobs_inserted"],
            jobs_duplicates=row["jobs_duplicates"],
            jobs_failed=row["jobs_failed"],
            status=row["status"],
            error_message=row["error_message"],
        )

    def _validate_non_empty_text(self, value: str, field_name: str) -> str:
        """Validate required text input and return stripped value.

        Args:
            value: Candidate string value.
            field_name: Field name for error reporting.

        Returns:
            str: Stripped non-empty value.

        Raises:
            ValueError: Raised when value is blank.
        """

        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError(f"{field_name} must not be blank")
        return stripped_value
