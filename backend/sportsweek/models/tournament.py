from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from sportsweek.models.fixture import Fixture
    from sportsweek.models.sport import Sport
    from sportsweek.models.tournament_round import TournamentRound
    from sportsweek.models.tournament_team import TournamentTeam


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    sport_id: int = Field(foreign_key="sport.id", index=True)
    tournament_type: str = Field(default="single_elimination")  # TournamentFormat value
    max_teams: Optional[int] = Field(default=None)
    start_date: Optional[date] = None
    status: str = Field(default="draft")  # "draft" | "active" | "completed" | "cancelled"
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")
    deleted_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    sport: "Sport" = Relationship(back_populates="tournaments")
    teams: List["TournamentTeam"] = Relationship(back_populates="tournament")
    rounds: List["TournamentRound"] = Relationship(back_populates="tournament")
    fixtures: List["Fixture"] = Relationship(back_populates="tournament")
