"""
Sport Management API Routes
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.fixture import Fixture
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport
from sportsweek.models.team import Team
from sportsweek.models.tournament import Tournament
from sportsweek.utils.permissions import require_admin

router = APIRouter()


class SportCreate(BaseModel):
    name: str
    icon: Optional[str] = None
    is_team_sport: bool = True
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class SportUpdate(BaseModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    is_team_sport: Optional[bool] = None
    is_active: Optional[bool] = None


class SportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    icon: Optional[str] = None
    is_team_sport: bool
    is_active: bool
    created_at: datetime


@router.get("/sports", response_model=List[SportResponse])
def list_sports(active_only: bool = False, session: Session = Depends(get_session)):
    """List sports by name"""
    query = select(Sport)
    if active_only:
        query = query.where(Sport.is_active == True)  # noqa: E712
    return session.exec(query.order_by(Sport.name)).all()


@router.get("/sports/{sport_id}", response_model=SportResponse)
def get_sport(sport_id: int, session: Session = Depends(get_session)):
    sport = session.get(Sport, sport_id)
    if not sport:
        raise HTTPException(status_code=404, detail="Sport not found")
    return sport


@router.post("/sports", response_model=SportResponse, status_code=201)
def create_sport(
    request: SportCreate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Create a sport; names are unique"""
    sport = Sport(**request.model_dump())
    try:
        session.add(sport)
        session.commit()
        session.refresh(sport)
        return sport
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Sport '{request.name}' already exists")


@router.put("/sports/{sport_id}", response_model=SportResponse)
def update_sport(
    sport_id: int,
    request: SportUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    sport = session.get(Sport, sport_id)
    if not sport:
        raise HTTPException(status_code=404, detail="Sport not found")

    for field_name, value in request.model_dump(exclude_unset=True).items():
        setattr(sport, field_name, value)

    try:
        session.add(sport)
        session.commit()
        session.refresh(sport)
        return sport
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Sport '{request.name}' already exists")


@router.delete("/sports/{sport_id}", status_code=204)
def delete_sport(
    sport_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """
    Delete a sport. Sports that still have teams, fixtures or tournaments are
    kept; deactivate them instead.
    """
    sport = session.get(Sport, sport_id)
    if not sport:
        raise HTTPException(status_code=404, detail="Sport not found")

    for model in (Team, Fixture, Tournament):
        if session.exec(select(model).where(model.sport_id == sport_id)).first():
            raise HTTPException(status_code=409, detail="Sport is in use and cannot be deleted")

    session.delete(sport)
    session.commit()
    return None
