"""Connector layer package for job source integration boundaries."""

from .base import BaseJobConnector
from .errors import (
	ConnectorConnectionError,
	ConnectorError,
	ConnectorHTTPStatusError,
	ConnectorPayloadError,
	ConnectorTimeoutError,
	PluginProtocolError,
)
from .http_plugin import (
	DEFAULT_PLUGIN_TIMEOUT_SECONDS,
	PLUGIN_DISPLAY_NAMES,
	HTTPPluginConnector,
	connector_build_http_plugins,
)
from .interfaces import ConnectorPort
from .registry import PluginRegistry
from .sync_cycle import connector_run_sync_cycle, connector_write_sync_log
from .watermark import (
	connector_deduplicate_batch,
	connector_filter_newer_than,
	connector_max_days_old,
	connector_resolve_watermark,
)

__all__ = [
	"BaseJobConnector",
	"ConnectorConnectionError",
	"ConnectorError",
	"ConnectorHTTPStatusError",
	"ConnectorPayloadError",
	"ConnectorPort",
	"ConnectorTimeoutError",
	"DEFAULT_PLUGIN_TIMEOUT_SECONDS",
	"HTTPPluginConnector",
	"PLUGIN_DISPLAY_NAMES",
	"PluginProtocolError",
	"PluginRegistry",
	"connector_build_http_plugins",
	"connector_deduplicate_batch",
	"connector_filter_newer_than",
	"connector_max_days_old",
	"connector_resolve_watermark",
	"connector_run_sync_cycle",
	"connector_write_sync_log",
]
