"""Database engine utilities.

This module centralizes database connectivity primitives so all SQLAlchemy
usage stays behind the db-layer boundary.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str, connect_timeout_seconds: int = 10) -> Engine:
    """Create the SQLAlchemy engine shared by the job store and health checks.

    The engine is safe to share between the API thread and the scheduler
    thread; each repository call checks out its own pooled connection.

    Args:
        database_url: SQLAlchemy database URL.
        connect_timeout_seconds: Driver connect timeout for PostgreSQL URLs.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank or timeout is invalid.
    """

    normalized_database_url = database_url.strip()
    if not normalized_database_url:
        raise ValueError("database_url must not be blank")
    if connect_timeout_seconds < 1:
        raise ValueError("connect_timeout_seconds must be >= 1")

    connect_args: dict[str, int] = {}
    if normalized_database_url.startswith("postgresql"):
        connect_args["connect_timeout"] = connect_timeout_seconds

    return create_engine(normalized_database_url, pool_pre_ping=True, connect_args=connect_args)
