from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class MatchUpdate(SQLModel, table=True):
    """Audit trail and incident feed for a fixture."""

    id: Optional[int] = Field(default=None, primary_key=True)
    fixture_id: int = Field(foreign_key="fixture.id", index=True)
    update_type: str  # "score" | "incident"
    change_type: Optional[str] = Field(default=None)  # score_increase | status_change | winner | result | manual | undo
    note: Optional[str] = None
    media_url: Optional[str] = None

    prev_team_a_score: Optional[int] = Field(default=None)
    prev_team_b_score: Optional[int] = Field(default=None)
    prev_status: Optional[str] = Field(default=None)
    new_team_a_score: Optional[int] = Field(default=None)
    new_team_b_score: Optional[int] = Field(default=None)
    new_status: Optional[str] = Field(default=None)
    reverted: bool = Field(default=False)

    created_by: Optional[int] = Field(default=None, foreign_key="profile.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
