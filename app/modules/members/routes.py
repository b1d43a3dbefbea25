from fastapi import APIRouter, Depends, Query
from app.core.dependencies import get_group_store, require_api_key
from app.database.group_store import GroupStore
from app.modules.members.schemas import MemberView
from app.modules.members.service import MemberService
from typing import Optional

router = APIRouter(tags=["members"], dependencies=[Depends(require_api_key)])


def get_member_service(store: GroupStore = Depends(get_group_store)) -> MemberService:
    return MemberService(store)


@router.get("/membro/{member_id}", response_model=MemberView)
async def get_member(
    member_id: str,
    group_id: Optional[str] = Query(None, alias="grupoId"),
    service: MemberService = Depends(get_member_service)
):
    """Member's standing in one group (grupoId) or across all of their groups"""
    return await service.resolve_member(member_id, group_id)
