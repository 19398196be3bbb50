from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from sportsweek.models.team import Team
    from sportsweek.models.tournament import Tournament
    from sportsweek.models.tournament_round import TournamentRound


class Fixture(SQLModel, table=True):
    __table_args__ = (
        # Bracket position is unique within a round (standalone fixtures have no round)
        SAUniqueConstraint("tournament_round_id", "bracket_position", name="uq_round_bracket_position"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    sport_id: int = Field(foreign_key="sport.id", index=True)

    # Bracket placement (null for friendly/standalone fixtures)
    tournament_id: Optional[int] = Field(default=None, foreign_key="tournament.id", index=True)
    tournament_round_id: Optional[int] = Field(default=None, foreign_key="tournamentround.id", index=True)
    bracket_position: Optional[int] = Field(default=None)  # 1-based slot within the round

    # Team slots (nullable = TBD)
    team_a_id: Optional[int] = Field(default=None, foreign_key="team.id")
    team_b_id: Optional[int] = Field(default=None, foreign_key="team.id")

    scheduled_at: Optional[datetime] = Field(default=None)
    venue: Optional[str] = None

    team_a_score: Optional[int] = Field(default=None)
    team_b_score: Optional[int] = Field(default=None)
    status: str = Field(default="scheduled")  # "scheduled" | "live" | "completed" | "cancelled"
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")

    # Sport-specific payload (cricket overs, set scores, ...)
    extra: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    # Optimistic concurrency: bumped on every score update
    version: int = Field(default=1)
    updated_by: Optional[int] = Field(default=None, foreign_key="profile.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: Optional["Tournament"] = Relationship(back_populates="fixtures")
    tournament_round: Optional["TournamentRound"] = Relationship(back_populates="fixtures")
    team_a: Optional["Team"] = Relationship(
        back_populates="fixtures_as_team_a", sa_relationship_kwargs={"foreign_keys": "Fixture.team_a_id"}
    )
    team_b: Optional["Team"] = Relationship(
        back_populates="fixtures_as_team_b", sa_relationship_kwargs={"foreign_keys": "Fixture.team_b_id"}
    )
