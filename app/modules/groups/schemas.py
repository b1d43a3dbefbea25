from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from app.modules.groups.models import Group, Membership, Privacy, Role


class WireModel(BaseModel):
    """Response payload; Python names are English, aliases are the game client's keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class GroupDetail(WireModel):
    id: str
    name: str = Field(alias="nome")
    description: Optional[str] = Field(default=None, alias="descricao")
    owner_id: Optional[str] = Field(default=None, alias="donoId")
    owner_tag: Optional[str] = Field(default=None, alias="donoTag")
    total_members: int = Field(default=0, alias="totalMembros")
    total_contributions: int = Field(default=0, alias="totalContribuicoes")
    level: int = Field(default=1, alias="nivel")
    xp: int = 0
    privacy: Privacy = Field(default=Privacy.PUBLIC, alias="privacidade")
    created_at: Optional[datetime] = Field(default=None, alias="criadoEm")

    @classmethod
    def from_group(cls, group: Group) -> "GroupDetail":
        return cls(
            id=group.id,
            name=group.name,
            description=group.description,
            owner_id=group.owner_id,
            owner_tag=group.owner_tag,
            total_members=group.total_members,
            total_contributions=group.total_contributions,
            level=group.level,
            xp=group.xp,
            privacy=group.privacy,
            created_at=group.created_at,
        )


class RoleSummary(WireModel):
    name: str = Field(alias="nome")
    level: int = Field(alias="nivel")
    system: bool = Field(alias="sistema")
    members: int = Field(default=0, alias="membros")

    @classmethod
    def from_role(cls, role: Role, members: int) -> "RoleSummary":
        return cls(name=role.name, level=role.level, system=role.system, members=members)


class MemberDetail(WireModel):
    member_id: str = Field(alias="usuarioId")
    role: str = Field(alias="cargo")
    level: int = Field(alias="nivel")
    contribution: int = Field(alias="contribuicao")
    xp: int
    joined_at: Optional[datetime] = Field(default=None, alias="entrouEm")
    active: bool = Field(alias="ativo")

    @classmethod
    def from_membership(cls, membership: Membership) -> "MemberDetail":
        return cls(
            member_id=membership.member_id,
            role=membership.role,
            level=membership.level,
            contribution=membership.contribution,
            xp=membership.xp,
            joined_at=membership.joined_at,
            active=membership.active,
        )


class GroupStatistics(WireModel):
    total_members: int = Field(alias="totalMembros")
    active_members: int = Field(alias="membrosAtivos")
    total_contribution: int = Field(alias="totalContribuicao")
    average_level: float = Field(alias="mediaNivel")


class GroupView(WireModel):
    success: bool = True
    group: GroupDetail = Field(alias="grupo")
    roles: List[RoleSummary] = Field(alias="cargos")
    members: List[MemberDetail] = Field(alias="membros")
    statistics: GroupStatistics = Field(alias="estatisticas")
    fallback: bool = False
    timestamp: datetime

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class GroupSummary(WireModel):
    id: str
    name: str = Field(alias="nome")
    description: Optional[str] = Field(default=None, alias="descricao")
    owner_tag: Optional[str] = Field(default=None, alias="donoTag")
    total_members: int = Field(default=0, alias="totalMembros")
    total_contributions: int = Field(default=0, alias="totalContribuicoes")
    privacy: Privacy = Field(default=Privacy.PUBLIC, alias="privacidade")

    @classmethod
    def from_group(cls, group: Group) -> "GroupSummary":
        return cls(
            id=group.id,
            name=group.name,
            description=group.description,
            owner_tag=group.owner_tag,
            total_members=group.total_members,
            total_contributions=group.total_contributions,
            privacy=group.privacy,
        )


class GroupSearchResponse(WireModel):
    success: bool = True
    query: str
    results: int = Field(alias="resultados")
    groups: List[GroupSummary] = Field(alias="grupos")
    timestamp: datetime
