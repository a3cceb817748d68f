"""Domain models used across application layer boundaries."""

from .models import (
	SYNC_STATUS_ERROR,
	SYNC_STATUS_PARTIAL,
	SYNC_STATUS_SUCCESS,
	SYNC_STATUSES,
	ConnectorIdentity,
	HealthStatus,
	JobPost,
	SyncLogRecord,
)
from .parsing import (
	DOMAIN_TECH_KEYWORDS,
	domain_add_months,
	domain_extract_requirements,
	domain_map_employment_type,
	domain_parse_salary_range,
	domain_parse_timestamp,
	domain_parse_timestamp_or_now,
	domain_utc_now,
)
from .serialization import domain_format_timestamp, domain_job_post_to_payload, domain_sync_log_to_payload

__all__ = [
	"ConnectorIdentity",
	"DOMAIN_TECH_KEYWORDS",
	"HealthStatus",
	"JobPost",
	"SYNC_STATUSES",
	"SYNC_STATUS_ERROR",
	"SYNC_STATUS_PARTIAL",
	"SYNC_STATUS_SUCCESS",
	"SyncLogRecord",
	"domain_add_months",
	"domain_extract_requirements",
	"domain_format_timestamp",
	"domain_job_post_to_payload",
	"domain_map_employment_type",
	"domain_parse_salary_range",
	"domain_parse_timestamp",
	"domain_parse_timestamp_or_now",
	"domain_sync_log_to_payload",
	"domain_utc_now",
]
