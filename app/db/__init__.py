"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, JobAlreadyExistsError, JobStorePort, SyncLogRepositoryPort
from .job_store import SQLAlchemyJobStoreService
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"JobAlreadyExistsError",
	"JobStorePort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyJobStoreService",
	"SyncLogRepositoryPort",
	"db_create_engine",
]
