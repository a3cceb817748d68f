"""Job layer package for sync scheduling boundaries."""

from .interfaces import SyncSchedulerPort
from .scheduler import (
	TOPOLOGY_HTTP_PLUGINS,
	TOPOLOGY_LOCAL,
	TRIGGER_KIND_CRON,
	TRIGGER_KIND_INTERVAL,
	SchedulerConfigurationError,
	SyncScheduler,
	SyncSchedulerConfig,
	scheduler_build_trigger,
)

__all__ = [
	"SyncSchedulerPort",
	"TOPOLOGY_HTTP_PLUGINS",
	"TOPOLOGY_LOCAL",
	"TRIGGER_KIND_CRON",
	"TRIGGER_KIND_INTERVAL",
	"SchedulerConfigurationError",
	"SyncScheduler",
	"SyncSchedulerConfig",
	"scheduler_build_trigger",
]
