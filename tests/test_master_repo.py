"""Tests for conductor/repos/master_repo.py -- asyncpg pool is mocked."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from conductor.repos.master_repo import (
    delete_master,
    ensure_schema,
    get_master,
    list_masters,
    upsert_master,
)

_NOW = datetime.now(timezone.utc)


def _row(**overrides):
    defaults = {
        "name": "release",
        "description": None,
        "job_names": json.dumps(["jobA", "jobB"]),
        "created_at": _NOW,
        "updated_at": _NOW,
    }
    defaults.update(overrides)
    return defaults


@pytest.fixture
def mock_pool():
    pool = AsyncMock()
    with patch("conductor.repos.master_repo.get_pool", return_value=pool):
        yield pool


class TestUpsertMaster:
    @pytest.mark.asyncio
    async def test_serialises_job_names(self, mock_pool):
        mock_pool.fetchrow = AsyncMock(return_value=_row())

        result = await upsert_master("release", None, ["jobA", "jobB"])

        args = mock_pool.fetchrow.call_args.args
        assert "ON CONFLICT (name) DO UPDATE" in args[0]
        assert args[1:] == ("release", None, '["jobA", "jobB"]')
        assert result["job_names"] == ["jobA", "jobB"]


class TestGetMaster:
    @pytest.mark.asyncio
    async def test_found(self, mock_pool):
        mock_pool.fetchrow = AsyncMock(return_value=_row(job_names=["jobA"]))
        result = await get_master("release")
        assert result["job_names"] == ["jobA"]

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, mock_pool):
        mock_pool.fetchrow = AsyncMock(return_value=None)
        assert await get_master("ghost") is None

    @pytest.mark.asyncio
    async def test_null_job_names_become_empty(self, mock_pool):
        mock_pool.fetchrow = AsyncMock(return_value=_row(job_names=None))
        result = await get_master("release")
        assert result["job_names"] == []


class TestListAndDelete:
    @pytest.mark.asyncio
    async def test_list_decodes_rows(self, mock_pool):
        mock_pool.fetch = AsyncMock(return_value=[_row(), _row(name="nightly", job_names="[]")])
        result = await list_masters()
        assert [r["name"] for r in result] == ["release", "nightly"]
        assert result[1]["job_names"] == []

    @pytest.mark.asyncio
    async def test_delete_reports_removal(self, mock_pool):
        mock_pool.execute = AsyncMock(return_value="DELETE 1")
        assert await delete_master("release") is True

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_pool):
        mock_pool.execute = AsyncMock(return_value="DELETE 0")
        assert await delete_master("ghost") is False

    @pytest.mark.asyncio
    async def test_ensure_schema_is_idempotent_ddl(self, mock_pool):
        mock_pool.execute = AsyncMock(return_value="CREATE TABLE")
        await ensure_schema()
        assert "CREATE TABLE IF NOT EXISTS master_projects" in mock_pool.execute.call_args.args[0]
