from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class TeamRegistration(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="profile.id", index=True)
    sport_id: int = Field(foreign_key="sport.id", index=True)
    team_name: str
    department: str
    semester: str
    gender: str  # "male" | "female" | "other" | "mixed"
    captain_name: str
    captain_contact: str
    captain_email: str
    members: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(default="pending")  # "pending" | "approved" | "rejected" | "withdrawn"
    admin_notes: Optional[str] = None
    approved_by: Optional[int] = Field(default=None, foreign_key="profile.id")
    approved_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class IndividualRegistration(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="profile.id", index=True)
    sport_id: int = Field(foreign_key="sport.id", index=True)
    full_name: str
    student_id: str
    department: str
    semester: str
    gender: str
    contact_number: str
    email: str
    status: str = Field(default="pending")
    admin_notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
