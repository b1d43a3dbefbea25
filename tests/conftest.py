from typing import Dict, Iterable, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core.dependencies import get_group_store
from app.core.exceptions import StoreUnavailable
from app.main import app
from app.modules.groups.models import (
    Group, Membership, RankingMetric, Role, compose_role_set
)

TEST_API_KEY = "test-key"


class InMemoryGroupStore:
    """Stand-in for GroupStore that records every call and can fail selected operations."""

    def __init__(
        self,
        groups: Iterable[Group] = (),
        memberships: Iterable[Membership] = (),
        custom_roles: Optional[Dict[str, List[Role]]] = None,
        failing: Iterable[str] = ()
    ):
        self.groups = {group.id: group for group in groups}
        self.memberships = list(memberships)
        self.custom_roles = dict(custom_roles or {})
        self.failing = set(failing)
        self.calls: List[str] = []

    def _record(self, operation: str):
        self.calls.append(operation)
        if operation in self.failing or "*" in self.failing:
            raise StoreUnavailable(operation)

    async def fetch_group(self, group_id):
        self._record("fetch_group")
        return self.groups.get(group_id)

    async def fetch_groups(self, group_ids):
        self._record("fetch_groups")
        return [self.groups[gid] for gid in group_ids if gid in self.groups]

    async def fetch_members(self, group_id, limit):
        self._record("fetch_members")
        return [m for m in self.memberships if m.group_id == group_id and m.active][:limit]

    async def fetch_membership(self, group_id, member_id):
        self._record("fetch_membership")
        for m in self.memberships:
            if m.group_id == group_id and m.member_id == member_id and m.active:
                return m
        return None

    async def fetch_memberships_of_member(self, member_id):
        self._record("fetch_memberships_of_member")
        return [m for m in self.memberships if m.member_id == member_id and m.active]

    async def fetch_roles(self, group_id):
        self._record("fetch_roles")
        return compose_role_set(self.custom_roles.get(group_id, []))

    async def search_groups_by_name(self, text, limit):
        self._record("search_groups_by_name")
        needle = text.casefold()
        active = sorted((g for g in self.groups.values() if g.active), key=lambda g: g.name)
        return [g for g in active if needle in g.name.casefold()][:limit]

    async def rank_groups(self, metric: RankingMetric, limit):
        self._record("rank_groups")
        active = [g for g in self.groups.values() if g.active]
        # Metric order only; ties keep insertion order like an unindexed store would
        return sorted(active, key=lambda g: g.metric_value(metric), reverse=True)[:limit]


def sample_groups() -> List[Group]:
    return [
        Group(id="G1", name="Guerreiros do Sul", owner_id="m1", owner_tag="Dono#0001",
              total_members=3, total_contributions=600, level=4, xp=900),
        Group(id="G3", name="Sul Unido", total_members=12, total_contributions=900, level=7, xp=1500),
        Group(id="G2", name="Clã Norte", total_members=12, total_contributions=300, level=2, xp=100),
        Group(id="G4", name="Antigo Sul", total_members=50, total_contributions=5000, level=9, active=False),
    ]


def sample_memberships() -> List[Membership]:
    return [
        Membership(group_id="G1", member_id="m1", role="Dono", level=10, contribution=100, xp=10),
        Membership(group_id="G1", member_id="m2", role="Veterano", level=20, contribution=200, xp=20),
        Membership.model_validate({"group_id": "G1", "member_id": "m3", "role": None,
                                   "level": 30, "contribution": 300, "xp": 30}),
        Membership(group_id="G1", member_id="m4", level=99, active=False),
        Membership(group_id="G2", member_id="m1", level=5, contribution=50, xp=5),
        Membership(group_id="G9", member_id="m1", level=40, contribution=999, xp=999),
    ]


def sample_roles() -> Dict[str, List[Role]]:
    return {"G1": [Role(name="Veterano", level=10)]}


@pytest.fixture
def store() -> InMemoryGroupStore:
    return InMemoryGroupStore(sample_groups(), sample_memberships(), sample_roles())


@pytest.fixture(autouse=True)
def force_test_settings(monkeypatch):
    """Known shared secret and no rate limiting between tests."""
    monkeypatch.setattr(settings, "api_key", TEST_API_KEY)
    monkeypatch.setattr(app.state.limiter, "enabled", False)


@pytest_asyncio.fixture
async def api_client(store):
    app.dependency_overrides[get_group_store] = lambda: store
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_group_store, None)
