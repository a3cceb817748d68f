"""Sync API router composition for manual triggers and audit log reads."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.db import SyncLogRepositoryPort
from app.domain import domain_sync_log_to_payload
from app.jobs import SyncSchedulerPort

logger = logging.getLogger(__name__)


def api_create_sync_router(
    settings: AppSettings,
    sync_log_repository: SyncLogRepositoryPort,
    scheduler: SyncSchedulerPort,
) -> APIRouter:
    """Create sync router with manual trigger and audit log endpoints.

    Args:
        settings: Runtime settings used for list limits.
        sync_log_repository: DB-layer sync audit repository.
        scheduler: Scheduler running sync passes.

    Returns:
        APIRouter: Router exposing `/sync` APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if sync_log_repository is None:
        raise ValueError("sync_log_repository must not be None")
    if scheduler is None:
        raise ValueError("scheduler must not be None")

    router = APIRouter(prefix="/sync", tags=["sync"])

    @router.post("/manual")
    def api_sync_manual_trigger() -> JSONResponse:
        """Run one sync pass over the active topology and wait for it.

        Returns:
            JSONResponse: 200 once the pass finished, even when single connectors failed.
                500 only when the pass could not be orchestrated.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        try:
            scheduler.scheduler_run_manual_sync()
        except RuntimeError as error:
            logger.exception("manual sync could not be orchestrated")
            payload = {
                "success": False,
                "error": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        payload = {
            "success": True,
            "message": "Manual sync completed",
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/logs")
    def api_sync_log_list(limit: int = Query(default=settings.api_default_limit, ge=1)) -> JSONResponse:
        """Return recent sync audit entries, newest first.

        Args:
            limit: Requested number of entries, capped by `api_max_limit`.

        Returns:
            JSONResponse: Audit entries payload.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        applied_limit = min(limit, settings.api_max_limit)
        sync_logs = sync_log_repository.db_sync_log_list_recent(limit=applied_limit)
        payload = {
            "items": [domain_sync_log_to_payload(record) for record in sync_logs],
            "page": {
                "limit": limit,
                "applied_limit": applied_limit,
                "returned": len(sync_logs),
            },
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
