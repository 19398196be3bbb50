from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from sportsweek.models.fixture import Fixture
    from sportsweek.models.sport import Sport


class Team(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("sport_id", "name", name="uq_sport_team_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    sport_id: int = Field(foreign_key="sport.id", index=True)
    name: str
    department: Optional[str] = None
    logo_url: Optional[str] = None
    status: str = Field(default="active")  # "active" | "pending_approval" | "rejected"
    team_type: str = Field(default="admin_created")  # "admin_created" | "student_registered"

    captain_name: Optional[str] = None
    captain_contact: Optional[str] = None
    captain_email: Optional[str] = None

    original_registration_id: Optional[int] = Field(default=None, foreign_key="teamregistration.id")
    approved_by: Optional[int] = Field(default=None, foreign_key="profile.id")
    approved_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    sport: "Sport" = Relationship(back_populates="teams")
    fixtures_as_team_a: List["Fixture"] = Relationship(
        back_populates="team_a", sa_relationship_kwargs={"foreign_keys": "Fixture.team_a_id"}
    )
    fixtures_as_team_b: List["Fixture"] = Relationship(
        back_populates="team_b", sa_relationship_kwargs={"foreign_keys": "Fixture.team_b_id"}
    )
