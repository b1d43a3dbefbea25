from fastapi import APIRouter, Depends, Query
from app.config import settings
from app.core.dependencies import get_group_store, require_api_key
from app.core.exceptions import BadRequestError
from app.database.group_store import GroupStore
from app.modules.groups.schemas import GroupSearchResponse, GroupView
from app.modules.groups.service import GroupService
from typing import Optional

router = APIRouter(tags=["groups"], dependencies=[Depends(require_api_key)])


def get_group_service(store: GroupStore = Depends(get_group_store)) -> GroupService:
    return GroupService(store)


def parse_level_bound(value: Optional[str], name: str) -> Optional[int]:
    """Blank values count as absent, like a missing parameter"""
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise BadRequestError(f'Parameter "{name}" must be an integer')


@router.get("/grupo/{group_id}", response_model=GroupView)
async def get_group(
    group_id: str,
    level_min: Optional[str] = Query(None, alias="nivelMinimo"),
    level_max: Optional[str] = Query(None, alias="nivelMaximo"),
    service: GroupService = Depends(get_group_service)
):
    """Group with roles, members (optionally filtered by level) and statistics"""
    return await service.assemble_group_view(
        group_id,
        parse_level_bound(level_min, "nivelMinimo"),
        parse_level_bound(level_max, "nivelMaximo"),
    )


@router.get("/buscar-grupo", response_model=GroupSearchResponse)
async def search_groups(
    name: Optional[str] = Query(None, alias="nome"),
    limit: int = Query(settings.default_limit, alias="limite", ge=1),
    service: GroupService = Depends(get_group_service)
):
    """Search active groups by name substring; limite is capped at max_limit"""
    return await service.search_groups(name, min(limit, settings.max_limit))
