# Supabase tables: groups, group_members, group_roles
# Rows are read-only here; every default for a missing or null column is applied
# when a row is validated into one of the records below.

"""
Expected Supabase table structure:

groups:
- id: text (primary key, assigned by the game)
- name: text (not null)
- description: text (nullable)
- owner_id: text (nullable)
- owner_tag: text (nullable)
- total_members: integer (default: 0)
- total_contributions: integer (default: 0)
- level: integer (default: 1)
- xp: integer (default: 0)
- privacy: text (publico | privado, default: publico)
- active: boolean (default: true)
- created_at: timestamp (default: now())

group_members:
- id: text (primary key, "<group_id>_<member_id>")
- group_id: text (foreign key to groups.id, not null)
- member_id: text (not null)
- role: text (nullable, defaults to the member tier)
- level: integer (default: 1)
- contribution: integer (default: 0)
- xp: integer (default: 0)
- joined_at: timestamp (nullable)
- active: boolean (default: true)

group_roles (custom roles only; the owner and member tiers are implicit):
- id: uuid (primary key)
- group_id: text (foreign key to groups.id, not null)
- name: text (not null, unique per group)
- level: integer (default: 1)
- based_on: text (nullable) - a custom role based on the member tier replaces it
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

OWNER_ROLE = "Dono"
OWNER_ROLE_LEVEL = 100
MEMBER_ROLE = "Membro"
MEMBER_ROLE_LEVEL = 1


class Privacy(str, Enum):
    PUBLIC = "publico"
    PRIVATE = "privado"


_PRIVACY_ALIASES = {
    "publico": Privacy.PUBLIC,
    "public": Privacy.PUBLIC,
    "privado": Privacy.PRIVATE,
    "private": Privacy.PRIVATE,
}


class RankingMetric(str, Enum):
    MEMBERS = "membros"
    CONTRIBUTIONS = "contribuicoes"
    LEVEL = "nivel"

    @property
    def column(self) -> str:
        return _RANKING_COLUMNS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "RankingMetric":
        """Resolve a client-supplied ranking type; anything unknown ranks by member count."""
        if not value:
            return cls.MEMBERS
        return _RANKING_ALIASES.get(value.strip().lower(), cls.MEMBERS)


_RANKING_COLUMNS = {
    RankingMetric.MEMBERS: "total_members",
    RankingMetric.CONTRIBUTIONS: "total_contributions",
    RankingMetric.LEVEL: "level",
}

_RANKING_ALIASES = {
    "membros": RankingMetric.MEMBERS,
    "members": RankingMetric.MEMBERS,
    "contribuicoes": RankingMetric.CONTRIBUTIONS,
    "contributions": RankingMetric.CONTRIBUTIONS,
    "nivel": RankingMetric.LEVEL,
    "level": RankingMetric.LEVEL,
}


class StoreRecord(BaseModel):
    """Immutable record read from the store. Null columns fall back to the field default."""

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Group(StoreRecord):
    id: str
    name: str = ""
    description: Optional[str] = None
    owner_id: Optional[str] = None
    owner_tag: Optional[str] = None
    total_members: int = 0
    total_contributions: int = 0
    level: int = 1
    xp: int = 0
    privacy: Privacy = Privacy.PUBLIC
    created_at: Optional[datetime] = None
    active: bool = True

    @field_validator("privacy", mode="before")
    @classmethod
    def _normalize_privacy(cls, value):
        if isinstance(value, Privacy):
            return value
        return _PRIVACY_ALIASES.get(str(value).strip().lower(), Privacy.PUBLIC)

    def metric_value(self, metric: RankingMetric) -> int:
        return getattr(self, metric.column)


class Role(StoreRecord):
    name: str
    level: int = MEMBER_ROLE_LEVEL
    system: bool = False
    based_on: Optional[str] = None


class Membership(StoreRecord):
    group_id: str
    member_id: str
    role: str = MEMBER_ROLE
    level: int = 1
    contribution: int = 0
    xp: int = 0
    joined_at: Optional[datetime] = None
    active: bool = True

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value):
        return value or MEMBER_ROLE


def compose_role_set(custom_roles: List[Role]) -> List[Role]:
    """Full role set for a group: the owner tier, the member tier unless a custom role replaces it, then custom roles."""
    roles = [Role(name=OWNER_ROLE, level=OWNER_ROLE_LEVEL, system=True)]
    if not any(role.based_on == MEMBER_ROLE for role in custom_roles):
        roles.append(Role(name=MEMBER_ROLE, level=MEMBER_ROLE_LEVEL, system=True))
    taken = {role.name for role in roles}
    for role in custom_roles:
        if role.name in taken:
            continue
        taken.add(role.name)
        roles.append(role)
    return roles


def default_role_name(roles: List[Role]) -> str:
    """Role that absorbs memberships whose role name matches nothing in the set."""
    for role in roles:
        if role.system and role.name == MEMBER_ROLE:
            return role.name
    for role in roles:
        if role.based_on == MEMBER_ROLE:
            return role.name
    return MEMBER_ROLE
