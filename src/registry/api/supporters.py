# src/registry/api/supporters.py
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from src.registry.deps.services import get_registry_service
from src.registry.schemas.supporter import SupporterFilter, SupporterRead
from src.registry.services.registry import RegistryService

router = APIRouter(prefix="/supporters", tags=["supporters"])


@router.post("")
async def submit_supporter(
    payload: dict[str, Any] = Body(...),
    registry: RegistryService = Depends(get_registry_service),
):
    supporter = await registry.submit(payload)
    return {"message": "Saved", "id": supporter.id}


@router.get("", response_model=list[SupporterRead])
async def list_supporters(
    district: Optional[str] = None,
    sex: Optional[str] = None,
    q: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    registry: RegistryService = Depends(get_registry_service),
):
    filters = SupporterFilter(district=district, sex=sex, q=q, limit=limit, offset=offset)
    return await registry.list_supporters(filters)
