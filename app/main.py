"""Main module entrypoint for local runtime execution.

This module validates startup configuration, configures logging, and runs one
of the orchestrator API, a single sync pass, or a plugin service.
"""

import argparse
import logging

import uvicorn

from app.bootstrap import (
    BootstrapRuntime,
    bootstrap_create_application,
    bootstrap_create_plugin_application,
    bootstrap_create_runtime,
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SchedulerConfigurationError: Raised when the cron schedule is invalid.
    """

    argument_parser = argparse.ArgumentParser(description="OpenJobs runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "sync-run", "plugin"),
        help="Runtime command: `api` starts scheduler and server, `sync-run` runs one manual sync pass, "
        "`plugin` serves one connector as an HTTP plugin",
        type=str,
    )
    argument_parser.add_argument(
        "--connector",
        dest="connector_id",
        type=str,
        help="Connector id served by the `plugin` command",
    )
    argument_parser.add_argument(
        "--port",
        dest="port",
        type=int,
        help="Port override for `api` and `plugin` commands",
    )
    parsed_arguments = argument_parser.parse_args()

    runtime = bootstrap_create_runtime()
    logging.basicConfig(
        level=runtime.settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if parsed_arguments.command == "sync-run":
        try:
            runtime.scheduler.scheduler_run_manual_sync()
        finally:
            runtime.scheduler.scheduler_close_connectors()
        return

    if parsed_arguments.command == "plugin":
        if not parsed_arguments.connector_id:
            argument_parser.error("--connector is required for the `plugin` command")
        plugin_application = bootstrap_create_plugin_application(
            runtime=runtime,
            connector_id=parsed_arguments.connector_id,
        )
        try:
            uvicorn.run(
                plugin_application,
                host=runtime.settings.application_host,
                port=parsed_arguments.port or runtime.settings.application_port,
            )
        finally:
            runtime.scheduler.scheduler_close_connectors()
        return

    main_serve_api(runtime=runtime, port=parsed_arguments.port)


def main_serve_api(runtime: BootstrapRuntime, port: int | None = None) -> None:
    """Start the scheduler, serve the API, and stop the scheduler on exit.

    Args:
        runtime: Wired runtime dependencies.
        port: Optional port override.

    Returns:
        None: Returns after the server shut down.

    Raises:
        RuntimeError: Raised when the scheduler is already running.
    """

    application = bootstrap_create_application(runtime=runtime)
    runtime.scheduler.scheduler_start()
    try:
        uvicorn.run(
            application,
            host=runtime.settings.application_host,
            port=port or runtime.settings.application_port,
        )
    finally:
        runtime.scheduler.scheduler_stop()
        runtime.scheduler.scheduler_close_connectors()
        logger.info("orchestrator shut down")


if __name__ == "__main__":
    main()
