"""Masters router -- master project CRUD, configuration, builds and rebuilds."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from conductor.api.deps import get_current_operator, get_master_service
from conductor.api.rate_limit import rebuild_limiter
from conductor.domain.master import MasterSelection
from conductor.services.master_service import MasterService

router = APIRouter(prefix="/masters", tags=["masters"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateMasterRequest(BaseModel):
    """Request body for creating a master project."""

    name: str = Field(..., min_length=1, max_length=255, description="Master project name")
    description: str | None = Field(None, max_length=2000)


class ConfigureMasterRequest(BaseModel):
    """Request body for resubmitting a master's configuration."""

    selected_names: list[str] = Field(
        default_factory=list,
        description="Names of the items to group under this master",
    )
    description: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Master CRUD
# ---------------------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_master(
    body: CreateMasterRequest,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Create an empty master project."""
    master = await service.create_master(body.name, body.description)
    return service.describe(master)


@router.get("")
async def list_masters(
    service: MasterService = Depends(get_master_service),
) -> dict:
    """List every master project with its member names."""
    masters = service.list_masters()
    return {"items": [service.describe(m) for m in masters], "total": len(masters)}


@router.get("/{name}")
async def get_master(
    name: str,
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Master detail, including the sub-projects that still resolve."""
    return service.describe(service.get_master(name), resolve=True)


@router.delete("/{name}")
async def remove_master(
    name: str,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Delete a master project."""
    await service.delete_master(name)
    return {"status": "deleted"}


@router.post("/{name}/configure")
async def configure_master(
    name: str,
    body: ConfigureMasterRequest,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Replace the master's membership with the submitted selection."""
    form = MasterSelection(
        selected_names=set(body.selected_names),
        description=body.description,
    )
    master = await service.configure(name, form)
    return service.describe(master, resolve=True)


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


@router.post("/{name}/build", status_code=status.HTTP_201_CREATED)
async def start_build(
    name: str,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Run a normal master build."""
    return service.run_build(name).to_dict()


@router.get("/{name}/builds/{number}")
async def get_build(
    name: str,
    number: int,
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Fetch one master build record."""
    return service.get_build(name, number).to_dict()


@router.post("/{name}/rebuild", status_code=status.HTTP_204_NO_CONTENT)
async def rebuild_sub_project(
    name: str,
    sub_project: str | None = Query(None, alias="subProject"),
    number: str | None = Query(None),
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> Response:
    """Rebuild one sub-project in the context of master build ``number``."""
    if not rebuild_limiter.is_allowed(operator):
        raise HTTPException(status_code=429, detail="Rebuild rate limit exceeded")
    service.rebuild(name, sub_project, number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
