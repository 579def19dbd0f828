"""Items router -- item directory notifications from the CI engine.

Deletes and renames are fanned out to every master project.
"""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from conductor.api.deps import get_current_operator, get_master_service
from conductor.services.master_service import MasterService

router = APIRouter(prefix="/items", tags=["items"])


class RegisterItemRequest(BaseModel):
    """Request body for registering a new item."""

    name: str = Field(..., min_length=1, max_length=255)


class RenameItemRequest(BaseModel):
    """Request body for renaming an item."""

    new_name: str = Field(..., min_length=1, max_length=255)


@router.get("")
async def list_items(
    service: MasterService = Depends(get_master_service),
) -> dict:
    """List every item in the directory."""
    return {"items": [name for name, _ in service.items.all_items()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_item(
    body: RegisterItemRequest,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    service.register_item(body.name)
    return {"name": body.name}


@router.delete("/{name}")
async def delete_item(
    name: str,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Delete an item; masters that grouped it drop it."""
    changed = await service.delete_item(name)
    return {"status": "deleted", "masters_updated": changed}


@router.post("/{name}/rename")
async def rename_item(
    name: str,
    body: RenameItemRequest,
    operator: str = Depends(get_current_operator),
    service: MasterService = Depends(get_master_service),
) -> dict:
    """Rename an item; masters that grouped it follow the new name."""
    changed = await service.rename_item(name, body.new_name)
    return {"name": body.new_name, "masters_updated": changed}
