"""Master repository -- database reads and writes for the master_projects table.

A master's configuration record is its name, description and the list of
member sub-project names.  Handles are never stored.
"""

import json

from conductor.repos.db import get_pool

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS master_projects (
        name         VARCHAR(255) PRIMARY KEY,
        description  TEXT,
        job_names    JSONB NOT NULL DEFAULT '[]'::jsonb,
        created_at   TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at   TIMESTAMPTZ NOT NULL DEFAULT now()
    )
"""


async def ensure_schema() -> None:
    """Create the master_projects table when missing (safe to re-run)."""
    pool = await get_pool()
    await pool.execute(_SCHEMA)


async def upsert_master(name: str, description: str | None, job_names: list[str]) -> dict:
    """Insert or replace a master configuration row. Returns the row as a dict."""
    pool = await get_pool()
    row = await pool.fetchrow(
        """
        INSERT INTO master_projects (name, description, job_names)
        VALUES ($1, $2, $3::jsonb)
        ON CONFLICT (name) DO UPDATE
            SET description = EXCLUDED.description,
                job_names   = EXCLUDED.job_names,
                updated_at  = now()
        RETURNING name, description, job_names, created_at, updated_at
        """,
        name,
        description,
        json.dumps(job_names),
    )
    return _master_to_dict(row)


async def get_master(name: str) -> dict | None:
    """Fetch a master configuration by name. Returns None if not found."""
    pool = await get_pool()
    row = await pool.fetchrow(
        """
        SELECT name, description, job_names, created_at, updated_at
        FROM master_projects
        WHERE name = $1
        """,
        name,
    )
    return _master_to_dict(row) if row else None


async def list_masters() -> list[dict]:
    """Fetch every stored master configuration, oldest first."""
    pool = await get_pool()
    rows = await pool.fetch(
        """
        SELECT name, description, job_names, created_at, updated_at
        FROM master_projects
        ORDER BY created_at
        """
    )
    return [_master_to_dict(r) for r in rows]


async def delete_master(name: str) -> bool:
    """Delete a master configuration. Returns True if a row was removed."""
    pool = await get_pool()
    result = await pool.execute(
        "DELETE FROM master_projects WHERE name = $1",
        name,
    )
    return result == "DELETE 1"


def _master_to_dict(row) -> dict:
    d = dict(row)
    job_names = d.get("job_names")
    if isinstance(job_names, str):
        d["job_names"] = json.loads(job_names)
    elif job_names is None:
        d["job_names"] = []
    return d
