"""Synthetic group data served while the record store is unreachable."""
import time
from datetime import datetime, timezone
from typing import List

from app.modules.groups.models import (
    Group, Membership, Privacy, Role,
    MEMBER_ROLE, MEMBER_ROLE_LEVEL, OWNER_ROLE, OWNER_ROLE_LEVEL,
)

SYNTHETIC_MEMBER_COUNT = 10
ADMIN_ROLE = "Admin"
ADMIN_ROLE_LEVEL = 50


def synthetic_group(group_id: str) -> Group:
    """Placeholder group that keeps the requested id"""
    return Group(
        id=group_id,
        name=f"Grupo de Teste {group_id[:8]}",
        description="Grupo mock para testes",
        owner_id="123456789",
        owner_tag="DonoTeste#1234",
        total_members=25,
        total_contributions=5000,
        level=3,
        xp=750,
        privacy=Privacy.PUBLIC,
        created_at=datetime.now(timezone.utc),
    )


def _synthetic_tier(position: int):
    if position == 1:
        return OWNER_ROLE, OWNER_ROLE_LEVEL
    if position <= 3:
        return ADMIN_ROLE, ADMIN_ROLE_LEVEL
    return MEMBER_ROLE, MEMBER_ROLE_LEVEL


def synthetic_members(group_id: str) -> List[Membership]:
    """One owner, two admins, seven members; ids carry a millisecond stamp"""
    stamp = int(time.time() * 1000)
    joined_at = datetime.now(timezone.utc)
    members = []
    for position in range(1, SYNTHETIC_MEMBER_COUNT + 1):
        role, level = _synthetic_tier(position)
        members.append(Membership(
            group_id=group_id,
            member_id=f"user{position}_{stamp}",
            role=role,
            level=level,
            contribution=position * 100,
            xp=position * 50,
            joined_at=joined_at,
            active=True,
        ))
    return members


def synthetic_roles() -> List[Role]:
    return [
        Role(name=OWNER_ROLE, level=OWNER_ROLE_LEVEL, system=True),
        Role(name=ADMIN_ROLE, level=ADMIN_ROLE_LEVEL, system=False),
        Role(name=MEMBER_ROLE, level=MEMBER_ROLE_LEVEL, system=True),
    ]
