import logging
from datetime import datetime, timezone
from typing import List, Optional

from app.core.exceptions import NotFoundError, StoreUnavailable
from app.database.group_store import GroupStore
from app.modules.groups.service import mean_level
from app.modules.members.schemas import MemberGroupEntry, MemberStatistics, MemberView

logger = logging.getLogger(__name__)


class MemberService:
    def __init__(self, store: GroupStore):
        self.store = store

    async def _entry_in_group(self, member_id: str, group_id: str) -> MemberGroupEntry:
        try:
            membership = await self.store.fetch_membership(group_id, member_id)
        except StoreUnavailable as e:
            logger.warning(f"{e}; treating membership as absent")
            membership = None
        if membership is None:
            raise NotFoundError(f"Member {member_id} not found in group {group_id}")
        return MemberGroupEntry.from_membership(membership)

    async def _entries_across_groups(self, member_id: str) -> List[MemberGroupEntry]:
        """Every active membership whose group still exists, with the group name attached"""
        try:
            memberships = await self.store.fetch_memberships_of_member(member_id)
            group_ids = list(dict.fromkeys(m.group_id for m in memberships))
            groups = await self.store.fetch_groups(group_ids)
        except StoreUnavailable as e:
            logger.warning(f"{e}; returning no groups for member {member_id}")
            return []
        names = {group.id: group.name for group in groups}
        return [
            MemberGroupEntry.from_membership(m, names[m.group_id])
            for m in memberships
            if m.group_id in names
        ]

    async def resolve_member(self, member_id: str, group_id: Optional[str] = None) -> MemberView:
        """One membership when group_id is given, otherwise all of the member's groups"""
        if group_id:
            entries = [await self._entry_in_group(member_id, group_id)]
        else:
            entries = await self._entries_across_groups(member_id)
        return MemberView(
            member_id=member_id,
            total_groups=len(entries),
            groups=entries,
            statistics=MemberStatistics(
                total_contribution=sum(e.contribution for e in entries),
                total_xp=sum(e.xp for e in entries),
                average_level=mean_level([e.level for e in entries]),
            ),
            timestamp=datetime.now(timezone.utc),
        )
