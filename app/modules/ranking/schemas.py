from pydantic import Field
from typing import List, Optional
from datetime import datetime

from app.modules.groups.models import Group, RankingMetric
from app.modules.groups.schemas import WireModel


class RankingEntry(WireModel):
    position: int = Field(alias="posicao")
    id: str
    name: str = Field(alias="nome")
    owner_tag: Optional[str] = Field(default=None, alias="donoTag")
    total_members: int = Field(alias="totalMembros")
    total_contributions: int = Field(alias="totalContribuicoes")
    level: int = Field(alias="nivel")
    xp: int

    @classmethod
    def from_group(cls, position: int, group: Group) -> "RankingEntry":
        return cls(
            position=position,
            id=group.id,
            name=group.name,
            owner_tag=group.owner_tag,
            total_members=group.total_members,
            total_contributions=group.total_contributions,
            level=group.level,
            xp=group.xp,
        )


class RankingResponse(WireModel):
    success: bool = True
    metric: RankingMetric = Field(alias="tipo")
    limit: int = Field(alias="limite")
    ranking: List[RankingEntry]
    timestamp: datetime
