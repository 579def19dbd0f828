"""Health check router."""

from fastapi import APIRouter, Depends

from conductor.api.deps import get_master_service
from conductor.config import VERSION
from conductor.repos.db import persistence_enabled
from conductor.services.master_service import MasterService

router = APIRouter()


@router.get("/health")
async def health_check(service: MasterService = Depends(get_master_service)) -> dict:
    """Return health status and how many masters are loaded."""
    return {
        "status": "ok",
        "masters": len(service.list_masters()),
        "persistence": "postgres" if persistence_enabled() else "memory",
    }


@router.get("/health/version")
async def health_version() -> dict:
    """Return application version."""
    return {"version": VERSION}
