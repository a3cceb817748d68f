"""Background sync scheduler driving connectors on an interval or cron schedule."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Final

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.connectors import (
    DEFAULT_PLUGIN_TIMEOUT_SECONDS,
    ConnectorPort,
    PluginRegistry,
    connector_build_http_plugins,
)
from app.db import SyncLogRepositoryPort

logger = logging.getLogger(__name__)

TRIGGER_KIND_CRON: Final[str] = "cron"
TRIGGER_KIND_INTERVAL: Final[str] = "interval"
TOPOLOGY_LOCAL: Final[str] = "local"
TOPOLOGY_HTTP_PLUGINS: Final[str] = "http_plugins"


class SchedulerConfigurationError(ValueError):
    """Raised when the scheduler configuration cannot be turned into a trigger."""


@dataclass(frozen=True)
class SyncSchedulerConfig:
    """Configuration values resolved once when the scheduler is built.

    Attributes:
        interval_hours: Hours between passes when no cron schedule is set.
        cron_schedule: Optional five-field cron expression; wins over the interval.
        use_http_plugins: Sync remote plugin services instead of registered connectors.
        plugin_urls: Plugin id to base URL mapping used by the remote topology.
        plugin_request_timeout_seconds: HTTP timeout for plugin calls.
    """

    interval_hours: int = 24
    cron_schedule: str | None = None
    use_http_plugins: bool = False
    plugin_urls: dict[str, str] = field(default_factory=dict)
    plugin_request_timeout_seconds: float = DEFAULT_PLUGIN_TIMEOUT_SECONDS


class SyncScheduler:
    """Scheduler owning one recurring sync job.

    Each firing visits the active connectors sequentially on the scheduler
    thread. A connector failure is logged and never stops the pass. Manual
    passes run on the caller's thread and are not mutually excluded with
    scheduled ones; the store's unique ids keep overlapping inserts safe.
    """

    _JOB_ID: Final[str] = "openjobs-sync"

    def __init__(
        self,
        registry: PluginRegistry,
        config: SyncSchedulerConfig,
        sync_log_repository: SyncLogRepositoryPort | None = None,
    ):
        """Initialize scheduler and resolve its trigger and topology.

        Args:
            registry: Registry holding locally hosted connectors.
            config: Scheduling and topology configuration.
            sync_log_repository: Optional audit log for remote plugin failures.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
            SchedulerConfigurationError: Raised when the cron expression or interval is invalid.
        """

        if registry is None:
            raise ValueError("registry must not be None")
        if config is None:
            raise ValueError("config must not be None")

        self._registry = registry
        self._config = config
        self._trigger_kind, self._trigger = scheduler_build_trigger(config)
        self._remote_connectors: list[ConnectorPort] = []
        if config.use_http_plugins:
            self._remote_connectors = list(
                connector_build_http_plugins(
                    plugin_urls=config.plugin_urls,
                    request_timeout_seconds=config.plugin_request_timeout_seconds,
                    sync_log_repository=sync_log_repository,
                )
            )
        self._background_scheduler: BackgroundScheduler | None = None

    def scheduler_active_trigger_kind(self) -> str:
        """Return `cron` or `interval` depending on the resolved trigger."""

        return self._trigger_kind

    def scheduler_active_topology(self) -> str:
        """Return `http_plugins` or `local` depending on the configured topology."""

        return TOPOLOGY_HTTP_PLUGINS if self._config.use_http_plugins else TOPOLOGY_LOCAL

    def scheduler_active_connectors(self) -> list[ConnectorPort]:
        """Return the connectors the next pass will visit.

        Returns:
            list[ConnectorPort]: Remote plugin proxies or enabled registry connectors.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self._config.use_http_plugins:
            return list(self._remote_connectors)
        return self._registry.registry_enabled()

    def scheduler_is_running(self) -> bool:
        """Return whether the background scheduler is accepting firings."""

        return self._background_scheduler is not None and self._background_scheduler.running

    def scheduler_start(self) -> None:
        """Start the background scheduler and fire one pass immediately.

        Returns:
            None: Start does not block.

        Raises:
            RuntimeError: Raised when the scheduler is already running.
        """

        if self.scheduler_is_running():
            raise RuntimeError("scheduler already running")

        background_scheduler = BackgroundScheduler(timezone=timezone.utc)
        background_scheduler.add_job(
            self._scheduler_run_pass,
            trigger=self._trigger,
            kwargs={"trigger_source": "scheduled"},
            id=self._JOB_ID,
            name="connector sync pass",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            next_run_time=datetime.now(timezone.utc),
        )
        background_scheduler.start()
        self._background_scheduler = background_scheduler
        logger.info(
            "scheduler started trigger=%s topology=%s detail=%s",
            self._trigger_kind,
            self.scheduler_active_topology(),
            self._trigger,
        )

    def scheduler_stop(self) -> None:
        """Stop future firings without waiting for an in-flight pass."""

        if not self.scheduler_is_running():
            return
        self._background_scheduler.shutdown(wait=False)
        self._background_scheduler = None
        logger.info("scheduler stopped")

    def scheduler_next_run_time(self) -> datetime | None:
        """Return the next scheduled firing, or None when not running."""

        if not self.scheduler_is_running():
            return None
        job = self._background_scheduler.get_job(self._JOB_ID)
        return job.next_run_time if job is not None else None

    def scheduler_run_manual_sync(self) -> None:
        """Run one out-of-band pass over the active topology on the caller's thread.

        Returns:
            None: Connector failures are logged, never raised.

        Raises:
            RuntimeError: Raised only when the active connector set cannot be resolved.
        """

        self._scheduler_run_pass(trigger_source="manual")

    def scheduler_close_connectors(self) -> None:
        """Release the HTTP clients of every remote and registered connector."""

        connectors = list(self._remote_connectors) + list(self._registry.registry_all().values())
        for connector in connectors:
            connector.connector_close()
        logger.info("closed connectors count=%d", len(connectors))

    def _scheduler_run_pass(self, trigger_source: str) -> None:
        """Sync every active connector once, isolating failures per connector.

        Args:
            trigger_source: `scheduled` or `manual`, for logging.

        Returns:
            None: Outcomes are logged per connector and per pass.

        Raises:
            RuntimeError: Raised only when the active connector set cannot be resolved.
        """

        connectors = self.scheduler_active_connectors()
        logger.info(
            "sync pass started source=%s topology=%s connectors=%d",
            trigger_source,
            self.scheduler_active_topology(),
            len(connectors),
        )

        succeeded_ids: list[str] = []
        failed_ids: list[str] = []
        for connector in connectors:
            connector_id = type(connector).__name__
            try:
                connector_id = connector.connector_identify().connector_id
                sync_record = connector.connector_sync_jobs()
            except Exception:
                failed_ids.append(connector_id)
                logger.exception("connector sync failed connector=%s", connector_id)
                continue
            succeeded_ids.append(connector_id)
            logger.info(
                "connector sync completed connector=%s status=%s inserted=%d duplicates=%d",
                connector_id,
                sync_record.status,
                sync_record.jobs_inserted,
                sync_record.jobs_duplicates,
            )

        logger.info(
            "sync pass finished source=%s succeeded=%d failed=%d",
            trigger_source,
            len(succeeded_ids),
            len(failed_ids),
        )
        if failed_ids:
            logger.warning("sync pass failed connectors source=%s ids=%s", trigger_source, ",".join(failed_ids))


def scheduler_build_trigger(config: SyncSchedulerConfig) -> tuple[str, CronTrigger | IntervalTrigger]:
    """Resolve the single trigger of the sync job; cron wins over interval.

    Args:
        config: Scheduler configuration.

    Returns:
        tuple[str, CronTrigger | IntervalTrigger]: Trigger kind and trigger.

    Raises:
        SchedulerConfigurationError: Raised when the cron expression or interval is invalid.
    """

    cron_schedule = (config.cron_schedule or "").strip()
    if cron_schedule:
        try:
            return TRIGGER_KIND_CRON, CronTrigger.from_crontab(cron_schedule, timezone=timezone.utc)
        except ValueError as error:
            raise SchedulerConfigurationError(f"invalid cron_schedule={cron_schedule!r}: {error}") from error

    if config.interval_hours < 1:
        raise SchedulerConfigurationError("interval_hours must be >= 1")
    return TRIGGER_KIND_INTERVAL, IntervalTrigger(hours=config.interval_hours, timezone=timezone.utc)
