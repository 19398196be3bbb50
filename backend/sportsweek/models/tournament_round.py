from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from sportsweek.models.fixture import Fixture
    from sportsweek.models.tournament import Tournament


class TournamentRound(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "round_number", name="uq_tournament_round_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    round_number: int  # 1-based, contiguous
    round_name: str
    total_matches: int
    completed_matches: int = Field(default=0)
    status: str = Field(default="pending")  # "pending" | "active" | "completed"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="rounds")
    fixtures: List["Fixture"] = Relationship(back_populates="tournament_round")
