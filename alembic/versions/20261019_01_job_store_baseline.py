"""Job store baseline: job postings and sync audit log

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "job_posts",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("company", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("location", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("salary", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("salary_min", sa.BigInteger(), nullable=True),
        sa.Column("salary_max", sa.BigInteger(), nullable=True),
        sa.Column("salary_currency", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("is_remote", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("url", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("employment_type", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("experience_level", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("posted_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("requirements", postgresql.ARRAY(sa.Text()), nullable=False, server_default=sa.text("'{}'::text[]")),
        sa.Column("benefits", postgresql.ARRAY(sa.Text()), nullable=False, server_default=sa.text("'{}'::text[]")),
        sa.Column("fields", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_job_posts_posted_date", "job_posts", ["posted_date"])

    op.create_table(
        "sync_logs",
        sa.Column("sync_log_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("connector_name", sa.Text(), nullable=False),
        sa.Column("started_at_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("jobs_fetched", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("jobs_inserted", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("jobs_duplicates", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("jobs_failed", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.CheckConstraint("status in ('success', 'partial', 'error')", name="ck_sync_logs_status"),
    )
    op.create_index(
        "ix_sync_logs_connector_started",
        "sync_logs",
        ["connector_name", sa.text("started_at_utc DESC")],
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_sync_logs_connector_started", table_name="sync_logs")
    op.drop_table("sync_logs")
    op.drop_index("ix_job_posts_posted_date", table_name="job_posts")
    op.drop_table("job_posts")
