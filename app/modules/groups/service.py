import logging
from collections import Counter
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from app.config import settings
from app.core.exceptions import BadRequestError, NotFoundError, StoreUnavailable
from app.database.group_store import GroupStore
from app.modules.groups import fallback
from app.modules.groups.models import Membership, Role, default_role_name
from app.modules.groups.schemas import (
    GroupDetail, GroupSearchResponse, GroupStatistics, GroupSummary, GroupView,
    MemberDetail, RoleSummary,
)

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_MIN = 1
DEFAULT_LEVEL_MAX = 99


def mean_level(levels: List[int]) -> float:
    """Arithmetic mean rounded to two decimals, 0 for an empty list"""
    if not levels:
        return 0
    return round(sum(levels) / len(levels), 2)


def filter_by_level(
    memberships: List[Membership],
    level_min: Optional[int] = None,
    level_max: Optional[int] = None
) -> List[Membership]:
    """Inclusive level range; a missing bound falls back to 1 or 99, no bounds means no filtering"""
    if level_min is None and level_max is None:
        return list(memberships)
    low = DEFAULT_LEVEL_MIN if level_min is None else level_min
    high = DEFAULT_LEVEL_MAX if level_max is None else level_max
    return [m for m in memberships if low <= m.level <= high]


def summarize_roles(roles: List[Role], memberships: List[Membership]) -> List[RoleSummary]:
    """Attach member counts to roles and order them most senior first"""
    known = {role.name for role in roles}
    fallback_role = default_role_name(roles)
    counts = Counter(m.role if m.role in known else fallback_role for m in memberships)
    summaries = [RoleSummary.from_role(role, counts.get(role.name, 0)) for role in roles]
    return sorted(summaries, key=lambda summary: summary.level, reverse=True)


def compute_statistics(memberships: List[Membership]) -> GroupStatistics:
    return GroupStatistics(
        total_members=len(memberships),
        active_members=sum(1 for m in memberships if m.active),
        total_contribution=sum(m.contribution for m in memberships),
        average_level=mean_level([m.level for m in memberships]),
    )


class GroupService:
    def __init__(self, store: GroupStore):
        self.store = store

    async def _members(self, group_id: str) -> Tuple[List[Membership], bool]:
        try:
            return await self.store.fetch_members(group_id, settings.max_group_members), False
        except StoreUnavailable as e:
            logger.warning(f"{e}; using synthetic members for group {group_id}")
            return fallback.synthetic_members(group_id), True

    async def _roles(self, group_id: str) -> Tuple[List[Role], bool]:
        try:
            return await self.store.fetch_roles(group_id), False
        except StoreUnavailable as e:
            logger.warning(f"{e}; using synthetic roles for group {group_id}")
            return fallback.synthetic_roles(), True

    async def assemble_group_view(
        self,
        group_id: str,
        level_min: Optional[int] = None,
        level_max: Optional[int] = None
    ) -> GroupView:
        """Group, roles with member counts, level-filtered members and their statistics"""
        try:
            group = await self.store.fetch_group(group_id)
        except StoreUnavailable as e:
            logger.warning(f"{e}; serving synthetic group {group_id}")
            group = None
            synthetic = True
        else:
            synthetic = False
            if group is None:
                raise NotFoundError(f"Group {group_id} not found")

        if synthetic:
            group = fallback.synthetic_group(group_id)
            memberships = fallback.synthetic_members(group_id)
            roles = fallback.synthetic_roles()
        else:
            memberships, members_synthetic = await self._members(group_id)
            roles, roles_synthetic = await self._roles(group_id)
            synthetic = members_synthetic or roles_synthetic

        filtered = filter_by_level(memberships, level_min, level_max)
        return GroupView(
            group=GroupDetail.from_group(group),
            roles=summarize_roles(roles, memberships),
            members=[MemberDetail.from_membership(m) for m in filtered],
            statistics=compute_statistics(filtered),
            fallback=synthetic,
            timestamp=datetime.now(timezone.utc),
        )

    async def search_groups(self, text: Optional[str], limit: int) -> GroupSearchResponse:
        """Active groups whose name contains `text`, ignoring case"""
        if text is None or not text.strip():
            raise BadRequestError('Parameter "nome" is required')
        try:
            groups = await self.store.search_groups_by_name(text, limit)
        except StoreUnavailable as e:
            logger.warning(f"{e}; returning no search results")
            groups = []
        summaries = [GroupSummary.from_group(group) for group in groups[:limit]]
        return GroupSearchResponse(
            query=text,
            results=len(summaries),
            groups=summaries,
            timestamp=datetime.now(timezone.utc),
        )
