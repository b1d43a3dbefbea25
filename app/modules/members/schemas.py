from pydantic import Field
from typing import List, Optional
from datetime import datetime

from app.modules.groups.models import Membership
from app.modules.groups.schemas import WireModel


class MemberGroupEntry(WireModel):
    group_id: str = Field(alias="grupoId")
    group_name: Optional[str] = Field(default=None, alias="grupoNome")
    role: str = Field(alias="cargo")
    level: int = Field(alias="nivel")
    contribution: int = Field(alias="contribuicao")
    xp: int
    joined_at: Optional[datetime] = Field(default=None, alias="entrouEm")
    active: bool = Field(alias="ativo")

    @classmethod
    def from_membership(cls, membership: Membership, group_name: Optional[str] = None) -> "MemberGroupEntry":
        return cls(
            group_id=membership.group_id,
            group_name=group_name,
            role=membership.role,
            level=membership.level,
            contribution=membership.contribution,
            xp=membership.xp,
            joined_at=membership.joined_at,
            active=membership.active,
        )


class MemberStatistics(WireModel):
    total_contribution: int = Field(alias="totalContribuicao")
    total_xp: int = Field(alias="totalXP")
    average_level: float = Field(alias="mediaNivel")


class MemberView(WireModel):
    success: bool = True
    member_id: str = Field(alias="usuarioId")
    total_groups: int = Field(alias="totalGrupos")
    groups: List[MemberGroupEntry] = Field(alias="grupos")
    statistics: MemberStatistics = Field(alias="estatisticas")
    timestamp: datetime
