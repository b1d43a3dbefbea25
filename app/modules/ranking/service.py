import logging
from datetime import datetime, timezone

from app.core.exceptions import StoreUnavailable
from app.database.group_store import GroupStore
from app.modules.groups.models import RankingMetric
from app.modules.ranking.schemas import RankingEntry, RankingResponse

logger = logging.getLogger(__name__)


class RankingService:
    def __init__(self, store: GroupStore):
        self.store = store

    async def rank_groups(self, metric: RankingMetric, limit: int) -> RankingResponse:
        """Top active groups by metric, numbered from 1"""
        try:
            groups = await self.store.rank_groups(metric, limit)
        except StoreUnavailable as e:
            logger.warning(f"{e}; returning an empty ranking")
            groups = []
        # Ties go to the lower id whatever order the store returned
        ordered = sorted(groups, key=lambda group: (-group.metric_value(metric), group.id))[:limit]
        return RankingResponse(
            metric=metric,
            limit=limit,
            ranking=[RankingEntry.from_group(position, group) for position, group in enumerate(ordered, start=1)],
            timestamp=datetime.now(timezone.utc),
        )
