"""Typed interfaces for connector-layer responsibilities."""

from typing import Protocol

from app.domain import ConnectorIdentity, JobPost, SyncLogRecord


class ConnectorPort(Protocol):
    """Port definition for one job posting source."""

    def connector_identify(self) -> ConnectorIdentity:
        """Return the connector registry key and display name.

        Returns:
            ConnectorIdentity: Stable non-empty identity.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

    def connector_fetch_jobs(self) -> list[JobPost]:
        """Retrieve the current batch of normalized postings from the source.

        Implementations apply their own watermark and return a batch that is
        unique by `job_id`.

        Returns:
            list[JobPost]: Normalized postings in source order.

        Raises:
            ConnectorError: Raised for the first unrecoverable source fault.
        """

    def connector_sync_jobs(self) -> SyncLogRecord:
        """Run one fetch-dedup-store cycle and write one audit entry.

        Returns:
            SyncLogRecord: Audit entry describing the attempt.

        Raises:
            ConnectorError: Raised after the error audit entry is written when the fetch fails.
        """

    def connector_close(self) -> None:
        """Release network resources held by the connector."""
