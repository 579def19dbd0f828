"""Master project configuration table.

Revision ID: 0001_master_projects
Revises: None
Create Date: 2026-10-16

Idempotent (IF NOT EXISTS) so it is safe on databases where the service
already created the table at startup.
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_master_projects"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS master_projects (
            name         VARCHAR(255) PRIMARY KEY,
            description  TEXT,
            job_names    JSONB NOT NULL DEFAULT '[]'::jsonb,
            created_at   TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at   TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_master_projects_job_names "
        "ON master_projects USING GIN (job_names)"
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_master_projects_job_names")
    op.execute("DROP TABLE IF EXISTS master_projects")
