from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class Profile(SQLModel, table=True):
    """A user known to the platform. Authentication happens upstream; the
    profile id arrives in the X-User-Id header."""

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: Optional[str] = None
    role: str = Field(default="viewer")  # "admin" | "moderator" | "viewer"

    # Moderator assignments (sport names / venue names). Empty list = none.
    assigned_sports: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    assigned_venues: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    moderator_notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
