"""
Read-only access to the groups, group_members and group_roles tables.

Any transport or PostgREST error is raised as StoreUnavailable; a missing row
is a normal None/empty result. Inactive memberships are never returned.
"""
import logging
from typing import List, Optional

from supabase import AsyncClient

from app.config import settings
from app.core.exceptions import StoreUnavailable
from app.modules.groups.models import (
    Group, Membership, RankingMetric, Role, compose_role_set
)

logger = logging.getLogger(__name__)

GROUPS_TABLE = "groups"
MEMBERS_TABLE = "group_members"
ROLES_TABLE = "group_roles"


class GroupStore:
    def __init__(self, supabase: Optional[AsyncClient], overfetch_factor: Optional[int] = None):
        self.supabase = supabase
        self.overfetch_factor = overfetch_factor or settings.search_overfetch_factor

    def _table(self, name: str, operation: str):
        if self.supabase is None:
            raise StoreUnavailable(operation)
        return self.supabase.table(name)

    async def _execute(self, query, operation: str) -> list:
        try:
            result = await query.execute()
        except Exception as e:
            logger.error(f"Supabase error during {operation}: {e}")
            raise StoreUnavailable(operation, e) from e
        if result is None or not result.data:
            return []
        return result.data

    async def fetch_group(self, group_id: str) -> Optional[Group]:
        """Get group by ID, active or not"""
        operation = f"fetch_group({group_id})"
        query = self._table(GROUPS_TABLE, operation)\
            .select("*")\
            .eq("id", group_id)\
            .limit(1)
        rows = await self._execute(query, operation)
        if not rows:
            logger.info(f"Group {group_id} not found")
            return None
        return Group.model_validate(rows[0])

    async def fetch_groups(self, group_ids: List[str]) -> List[Group]:
        """Get several groups in one round trip; missing ids are simply absent"""
        if not group_ids:
            return []
        operation = "fetch_groups"
        query = self._table(GROUPS_TABLE, operation)\
            .select("*")\
            .in_("id", group_ids)
        rows = await self._execute(query, operation)
        return [Group.model_validate(row) for row in rows]

    async def fetch_members(self, group_id: str, limit: int) -> List[Membership]:
        """Active memberships of a group, at most `limit` of them"""
        operation = f"fetch_members({group_id})"
        query = self._table(MEMBERS_TABLE, operation)\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("active", True)\
            .limit(limit)
        rows = await self._execute(query, operation)
        logger.debug(f"{len(rows)} members found for group {group_id}")
        return [Membership.model_validate(row) for row in rows]

    async def fetch_membership(self, group_id: str, member_id: str) -> Optional[Membership]:
        operation = f"fetch_membership({group_id}, {member_id})"
        query = self._table(MEMBERS_TABLE, operation)\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("member_id", member_id)\
            .eq("active", True)\
            .limit(1)
        rows = await self._execute(query, operation)
        if not rows:
            return None
        return Membership.model_validate(rows[0])

    async def fetch_memberships_of_member(self, member_id: str) -> List[Membership]:
        """Active memberships of one member across every group"""
        operation = f"fetch_memberships_of_member({member_id})"
        query = self._table(MEMBERS_TABLE, operation)\
            .select("*")\
            .eq("member_id", member_id)\
            .eq("active", True)
        rows = await self._execute(query, operation)
        return [Membership.model_validate(row) for row in rows]

    async def fetch_roles(self, group_id: str) -> List[Role]:
        """Implicit owner/member tiers plus the group's custom roles (member counts not filled in)"""
        operation = f"fetch_roles({group_id})"
        query = self._table(ROLES_TABLE, operation)\
            .select("*")\
            .eq("group_id", group_id)
        rows = await self._execute(query, operation)
        custom_roles = [Role.model_validate({**row, "system": False}) for row in rows]
        return compose_role_set(custom_roles)

    async def search_groups_by_name(self, text: str, limit: int) -> List[Group]:
        """Case-insensitive substring match on name.

        PostgREST filters are evaluated per column value, so the store is asked for
        `limit * overfetch_factor` active groups in name order and the substring test
        runs here. Matches beyond that window are not seen.
        """
        operation = f"search_groups_by_name({text!r})"
        query = self._table(GROUPS_TABLE, operation)\
            .select("*")\
            .eq("active", True)\
            .order("name")\
            .limit(limit * self.overfetch_factor)
        rows = await self._execute(query, operation)
        needle = text.casefold()
        matches = []
        for row in rows:
            group = Group.model_validate(row)
            if needle in group.name.casefold():
                matches.append(group)
                if len(matches) >= limit:
                    break
        return matches

    async def rank_groups(self, metric: RankingMetric, limit: int) -> List[Group]:
        """Active groups ordered by metric descending, ties broken by id ascending"""
        operation = f"rank_groups({metric.value})"
        query = self._table(GROUPS_TABLE, operation)\
            .select("*")\
            .eq("active", True)\
            .order(metric.column, desc=True)\
            .order("id")\
            .limit(limit)
        rows = await self._execute(query, operation)
        return [Group.model_validate(row) for row in rows]
