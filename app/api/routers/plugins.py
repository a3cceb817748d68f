"""Plugin status router composition."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.db import SyncLogRepositoryPort
from app.domain import domain_format_timestamp
from app.jobs import SyncSchedulerPort


def api_create_plugins_router(
    sync_log_repository: SyncLogRepositoryPort,
    scheduler: SyncSchedulerPort,
) -> APIRouter:
    """Create router reporting the connectors of the active topology.

    Args:
        sync_log_repository: DB-layer sync audit repository.
        scheduler: Scheduler owning the active topology.

    Returns:
        APIRouter: Router exposing `/plugins/status`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if sync_log_repository is None:
        raise ValueError("sync_log_repository must not be None")
    if scheduler is None:
        raise ValueError("scheduler must not be None")

    router = APIRouter(prefix="/plugins", tags=["plugins"])

    @router.get("/status")
    def api_plugins_status() -> JSONResponse:
        """Return one row per active connector with its last successful sync.

        Returns:
            JSONResponse: Connector status payload.

        Raises:
            RuntimeError: Raised when the audit log cannot be read.
        """

        topology = scheduler.scheduler_active_topology()
        items: list[dict[str, object]] = []
        for connector in scheduler.scheduler_active_connectors():
            identity = connector.connector_identify()
            latest_success = sync_log_repository.db_sync_log_get_latest_success(
                connector_name=identity.connector_id,
            )
            items.append(
                {
                    "id": identity.connector_id,
                    "name": identity.display_name,
                    "topology": topology,
                    "last_successful_sync_utc": (
                        domain_format_timestamp(latest_success.completed_at_utc) if latest_success else None
                    ),
                }
            )

        payload = {
            "topology": topology,
            "trigger": scheduler.scheduler_active_trigger_kind(),
            "items": items,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
