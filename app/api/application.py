"""FastAPI application factories for the orchestrator and plugin services.

The orchestrator application exposes health, manual sync, audit log, and
connector status endpoints. The plugin application serves one connector as a
remote plugin for the HTTP plugin topology.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.connectors import ConnectorError, ConnectorPort
from app.db import DatabaseHealthPort, SyncLogRepositoryPort
from app.domain import domain_format_timestamp, domain_job_post_to_payload, domain_utc_now
from app.jobs import SyncSchedulerPort

from .routers import api_create_health_router, api_create_plugins_router, api_create_sync_router

logger = logging.getLogger(__name__)


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    sync_log_repository: SyncLogRepositoryPort,
    scheduler: SyncSchedulerPort,
) -> FastAPI:
    """Create the orchestrator FastAPI application instance.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        sync_log_repository: Sync audit repository for log and status APIs.
        scheduler: Scheduler running sync passes.

    Returns:
        FastAPI: Framework application instance with all routers mounted.

    Raises:
        ValueError: Raised when a dependency is missing.
    """
    application = FastAPI(title="OpenJobs Orchestrator")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service metadata for bootstrap verification."""

        return {
            "service": "openjobs",
            "status": "ready",
            "environment": settings.environment_name,
            "topology": scheduler.scheduler_active_topology(),
            "trigger": scheduler.scheduler_active_trigger_kind(),
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(
        api_create_sync_router(
            settings=settings,
            sync_log_repository=sync_log_repository,
            scheduler=scheduler,
        )
    )
    application.include_router(
        api_create_plugins_router(
            sync_log_repository=sync_log_repository,
            scheduler=scheduler,
        )
    )

    return application


def create_plugin_application(connector: ConnectorPort) -> FastAPI:
    """Create a FastAPI application serving one connector as a remote plugin.

    The response envelopes match what `HTTPPluginConnector` decodes.

    Args:
        connector: Locally hosted connector to expose.

    Returns:
        FastAPI: Plugin application with `/health`, `/jobs`, and `/sync`.

    Raises:
        ValueError: Raised when connector is missing.
    """

    if connector is None:
        raise ValueError("connector must not be None")

    identity = connector.connector_identify()
    application = FastAPI(title=f"{identity.display_name} Plugin")

    @application.get("/health", tags=["health"])
    def plugin_health() -> dict[str, str | None]:
        """Return plugin liveness with its identity."""

        return {
            "status": "healthy",
            "plugin": identity.display_name,
            "plugin_id": identity.connector_id,
            "timestamp": domain_format_timestamp(domain_utc_now()),
        }

    @application.get("/jobs", tags=["plugin"])
    def plugin_fetch_jobs() -> JSONResponse:
        """Fetch the connector's current batch.

        Returns:
            JSONResponse: `{success, data, count}` or 500 with `{success: false, error}`.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        try:
            jobs = connector.connector_fetch_jobs()
        except ConnectorError as error:
            logger.error("plugin fetch failed plugin=%s error=%s", identity.connector_id, error)
            return JSONResponse(
                content={"success": False, "error": str(error)},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        payload = {
            "success": True,
            "data": [domain_job_post_to_payload(job) for job in jobs],
            "count": len(jobs),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @application.post("/sync", tags=["plugin"])
    def plugin_sync_jobs() -> JSONResponse:
        """Run the connector's own sync cycle.

        Returns:
            JSONResponse: `{success, message}` or 500 with `{success: false, error}`.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        try:
            sync_record = connector.connector_sync_jobs()
        except (ConnectorError, RuntimeError) as error:
            logger.error("plugin sync failed plugin=%s error=%s", identity.connector_id, error)
            return JSONResponse(
                content={"success": False, "error": str(error)},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        payload = {
            "success": True,
            "message": (
                f"{identity.display_name} sync completed status={sync_record.status} "
                f"inserted={sync_record.jobs_inserted} duplicates={sync_record.jobs_duplicates}"
            ),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return application
