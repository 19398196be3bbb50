from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from sportsweek.models.tournament import Tournament


class TournamentTeam(SQLModel, table=True):
    __table_args__ = (
        # Seeds are a permutation of 1..N within a tournament
        SAUniqueConstraint("tournament_id", "seed", name="uq_tournament_seed"),
        SAUniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    team_id: int = Field(foreign_key="team.id")
    seed: int  # 1-based
    bracket_position: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="teams")
