"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from typing import Protocol

from app.domain import HealthStatus, JobPost, SyncLogRecord


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class JobAlreadyExistsError(RuntimeError):
    """Raised when a job posting insert conflicts with an already stored id."""


class SyncLogRepositoryPort(Protocol):
    """Port definition for the append-only sync audit log."""

    def db_sync_log_insert(self, record: SyncLogRecord) -> SyncLogRecord:
        """Append one sync audit entry.

        Args:
            record: Audit entry to persist.

        Returns:
            SyncLogRecord: Persisted entry carrying its store-assigned id.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

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

    def db_sync_log_get_latest_success(self, connector_name: str) -> SyncLogRecord | None:
        """Fetch the newest successful audit entry of one connector.

        Args:
            connector_name: Connector identifier.

        Returns:
            SyncLogRecord | None: Latest successful entry, or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """


class JobStorePort(SyncLogRepositoryPort, Protocol):
    """Port definition for job posting and sync audit persistence."""

    def db_job_create(self, job: JobPost) -> None:
        """Insert one job posting.

        Args:
            job: Normalized job posting.

        Returns:
            None: Insert does not return a value.

        Raises:
            JobAlreadyExistsError: Raised when the id is already stored.
            RuntimeError: Raised when persistence fails.
        """

    def db_job_get_by_id(self, job_id: str) -> JobPost | None:
        """Fetch one job posting by id.

        Args:
            job_id: Source-prefixed job identifier.

        Returns:
            JobPost | None: Stored posting, or None when absent.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_job_get_most_recent(self, id_prefix: str) -> JobPost | None:
        """Fetch the most recently posted job whose id starts with a prefix.

        Args:
            id_prefix: Source id namespace such as `remotive-`.

        Returns:
            JobPost | None: Newest posting of that source, or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """
