"""Typed interfaces for job-layer sync orchestration responsibilities."""

from typing import Protocol

from app.connectors import ConnectorPort


class SyncSchedulerPort(Protocol):
    """Port definition for the scheduler surface used by API and CLI callers."""

    def scheduler_start(self) -> None:
        """Start recurring sync passes without blocking.

        Returns:
            None: Start does not block.

        Raises:
            RuntimeError: Raised when the scheduler is already running.
        """

    def scheduler_stop(self) -> None:
        """Stop future firings without waiting for an in-flight pass."""

    def scheduler_run_manual_sync(self) -> None:
        """Run one pass over the active topology on the caller's thread.

        Returns:
            None: Connector failures are logged, never raised.

        Raises:
            RuntimeError: Raised only when the active connector set cannot be resolved.
        """

    def scheduler_active_trigger_kind(self) -> str:
        """Return `cron` or `interval`."""

    def scheduler_active_topology(self) -> str:
        """Return `http_plugins` or `local`."""

    def scheduler_active_connectors(self) -> list[ConnectorPort]:
        """Return the connectors the next pass will visit."""

    def scheduler_close_connectors(self) -> None:
        """Release connector HTTP resources once no further pass will run."""
