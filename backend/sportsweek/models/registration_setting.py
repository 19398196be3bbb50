from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class RegistrationSetting(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    sport_id: int = Field(foreign_key="sport.id", unique=True)
    registration_open: bool = Field(default=False)
    registration_start: Optional[datetime] = Field(default=None)
    registration_end: Optional[datetime] = Field(default=None)
    min_team_size: Optional[int] = Field(default=None)
    max_team_size: Optional[int] = Field(default=None)
    allow_mixed_gender: bool = Field(default=True)
    allow_mixed_department: bool = Field(default=True)
    requires_approval: bool = Field(default=True)
    max_registrations_per_sport: Optional[int] = Field(default=None)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
