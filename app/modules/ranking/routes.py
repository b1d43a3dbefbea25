from fastapi import APIRouter, Depends, Query
from app.config import settings
from app.core.dependencies import get_group_store, require_api_key
from app.database.group_store import GroupStore
from app.modules.groups.models import RankingMetric
from app.modules.ranking.schemas import RankingResponse
from app.modules.ranking.service import RankingService
from typing import Optional

router = APIRouter(tags=["ranking"], dependencies=[Depends(require_api_key)])


def get_ranking_service(store: GroupStore = Depends(get_group_store)) -> RankingService:
    return RankingService(store)


@router.get("/ranking", response_model=RankingResponse)
async def get_ranking(
    metric: Optional[str] = Query(None, alias="tipo"),
    limit: int = Query(settings.default_limit, alias="limite", ge=1),
    service: RankingService = Depends(get_ranking_service)
):
    """Group ranking by membros (default), contribuicoes or nivel; limite is capped at max_limit"""
    return await service.rank_groups(RankingMetric.parse(metric), min(limit, settings.max_limit))
