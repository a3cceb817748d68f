"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from app.api import create_api_application, create_plugin_application
from app.config import AppSettings, config_load_settings, config_plugin_urls
from app.connectors import BaseJobConnector, PluginRegistry
from app.connectors.sources import (
    ArbetsformedlingenConnector,
    EuresConnector,
    JoobleConnector,
    RemoteOKConnector,
    RemotiveConnector,
)
from app.db import SQLAlchemyDatabaseHealthService, SQLAlchemyJobStoreService, db_create_engine
from app.jobs import SyncScheduler, SyncSchedulerConfig


@dataclass(frozen=True)
class BootstrapRuntime:
    """Assembled runtime dependencies shared by entrypoint commands.

    Attributes:
        settings: Validated runtime settings.
        job_store: Store used for postings and sync audit entries.
        db_health_service: Store connectivity check used by `/health`.
        registry: Registry of locally hosted connectors.
        scheduler: Scheduler bound to the active topology.
    """

    settings: AppSettings
    job_store: SQLAlchemyJobStoreService
    db_health_service: SQLAlchemyDatabaseHealthService
    registry: PluginRegistry
    scheduler: SyncScheduler


def bootstrap_create_local_connectors(
    settings: AppSettings,
    job_store: SQLAlchemyJobStoreService | None,
) -> list[BaseJobConnector]:
    """Build the built-in connectors bound to the job store.

    Args:
        settings: Runtime settings with connector timeouts and credentials.
        job_store: Store used for watermarks and the sync cycle.

    Returns:
        list[BaseJobConnector]: Connectors in registration order.

    Raises:
        ValueError: Raised when connector configuration is invalid.
    """

    timeout_seconds = settings.connector_request_timeout_seconds
    return [
        ArbetsformedlingenConnector(job_store=job_store, request_timeout_seconds=timeout_seconds),
        EuresConnector(
            app_id=settings.adzuna_app_id,
            app_key=settings.adzuna_app_key,
            job_store=job_store,
            request_timeout_seconds=timeout_seconds,
            page_delay_seconds=settings.connector_page_delay_seconds,
        ),
        RemotiveConnector(job_store=job_store, request_timeout_seconds=timeout_seconds),
        RemoteOKConnector(job_store=job_store, request_timeout_seconds=timeout_seconds),
        JoobleConnector(
            api_key=settings.jooble_api_key,
            job_store=job_store,
            request_timeout_seconds=timeout_seconds,
            location=settings.jooble_location,
        ),
    ]


def bootstrap_create_runtime() -> BootstrapRuntime:
    """Validate settings and assemble store, registry, and scheduler.

    Returns:
        BootstrapRuntime: Wired runtime dependencies.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        SchedulerConfigurationError: Raised when the cron schedule is invalid.
    """

    settings = config_load_settings()
    engine = db_create_engine(database_url=settings.database_url)
    job_store = SQLAlchemyJobStoreService(engine=engine)
    db_health_service = SQLAlchemyDatabaseHealthService(engine=engine)

    registry = PluginRegistry()
    for connector in bootstrap_create_local_connectors(settings=settings, job_store=job_store):
        registry.registry_register(connector)

    scheduler = SyncScheduler(
        registry=registry,
        config=SyncSchedulerConfig(
            interval_hours=settings.sync_interval_hours,
            cron_schedule=settings.cron_schedule,
            use_http_plugins=settings.use_http_plugins,
            plugin_urls=config_plugin_urls(settings),
            plugin_request_timeout_seconds=settings.plugin_request_timeout_seconds,
        ),
        sync_log_repository=job_store,
    )
    return BootstrapRuntime(
        settings=settings,
        job_store=job_store,
        db_health_service=db_health_service,
        registry=registry,
        scheduler=scheduler,
    )


def bootstrap_create_application(runtime: BootstrapRuntime) -> FastAPI:
    """Build the orchestrator API application for an assembled runtime.

    Args:
        runtime: Wired runtime dependencies.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        ValueError: Raised when runtime dependencies are missing.
    """

    return create_api_application(
        settings=runtime.settings,
        db_health_service=runtime.db_health_service,
        sync_log_repository=runtime.job_store,
        scheduler=runtime.scheduler,
    )


def bootstrap_create_plugin_application(runtime: BootstrapRuntime, connector_id: str) -> FastAPI:
    """Build a plugin application serving one registered connector.

    Args:
        runtime: Wired runtime dependencies.
        connector_id: Registered connector id.

    Returns:
        FastAPI: Plugin application.

    Raises:
        ValueError: Raised when no connector is registered under connector_id.
    """

    connector = runtime.registry.registry_get(connector_id)
    if connector is None:
        known_ids = ", ".join(sorted(runtime.registry.registry_all()))
        raise ValueError(f"unknown connector_id={connector_id}, expected one of: {known_ids}")
    return create_plugin_application(connector)
