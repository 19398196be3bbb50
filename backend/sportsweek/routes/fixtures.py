"""
Fixture API Routes
Public fixture listing and admin management of standalone fixtures.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, model_validator
from sqlalchemy import delete
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.enums import FixtureStatus
from sportsweek.models.fixture import Fixture
from sportsweek.models.match_update import MatchUpdate
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport
from sportsweek.models.team import Team
from sportsweek.routes.moderator import FixtureState
from sportsweek.utils.permissions import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


class FixtureCreate(BaseModel):
    sport_id: int
    team_a_id: int
    team_b_id: int
    scheduled_at: datetime
    venue: str

    @model_validator(mode="after")
    def validate_teams(self):
        if self.team_a_id == self.team_b_id:
            raise ValueError("team_a_id and team_b_id must be different")
        return self


class FixtureUpdate(BaseModel):
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    venue: Optional[str] = None
    status: Optional[FixtureStatus] = None


def _check_teams(session: Session, sport_id: int, team_ids: List[Optional[int]]) -> None:
    for team_id in team_ids:
        if team_id is None:
            continue
        team = session.get(Team, team_id)
        if not team:
            raise HTTPException(status_code=400, detail=f"Team {team_id} not found")
        if team.sport_id != sport_id:
            raise HTTPException(status_code=400, detail=f"Team {team_id} does not play this sport")


def _get_fixture(session: Session, fixture_id: int) -> Fixture:
    fixture = session.get(Fixture, fixture_id)
    if not fixture:
        raise HTTPException(status_code=404, detail="Fixture not found")
    return fixture


@router.get("/fixtures", response_model=List[FixtureState])
def list_fixtures(
    sport_id: Optional[int] = None,
    tournament_id: Optional[int] = None,
    status: Optional[FixtureStatus] = None,
    venue: Optional[str] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    """List fixtures by scheduled time"""
    query = select(Fixture)
    if sport_id is not None:
        query = query.where(Fixture.sport_id == sport_id)
    if tournament_id is not None:
        query = query.where(Fixture.tournament_id == tournament_id)
    if status is not None:
        query = query.where(Fixture.status == status.value)
    if venue:
        query = query.where(Fixture.venue == venue)
    return session.exec(query.order_by(Fixture.scheduled_at, Fixture.id).offset(offset).limit(limit)).all()


@router.get("/fixtures/{fixture_id}", response_model=FixtureState)
def get_fixture(fixture_id: int, session: Session = Depends(get_session)):
    return _get_fixture(session, fixture_id)


@router.post("/admin/fixtures", response_model=FixtureState, status_code=201)
def create_fixture(
    request: FixtureCreate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Create a standalone fixture between two teams of the same sport"""
    if not session.get(Sport, request.sport_id):
        raise HTTPException(status_code=400, detail="Sport not found")
    _check_teams(session, request.sport_id, [request.team_a_id, request.team_b_id])

    fixture = Fixture(**request.model_dump(), updated_by=admin.id)
    session.add(fixture)
    session.commit()
    session.refresh(fixture)
    logger.info("Fixture %d created by profile %d", fixture.id, admin.id)
    return fixture


@router.patch("/admin/fixtures/{fixture_id}", response_model=FixtureState)
def update_fixture(
    fixture_id: int,
    request: FixtureUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """
    Update fixture details (teams, time, venue, status).

    Scores are owned by the moderator console and are not editable here.
    """
    fixture = _get_fixture(session, fixture_id)
    update_data = request.model_dump(exclude_unset=True)

    team_a_id = update_data.get("team_a_id", fixture.team_a_id)
    team_b_id = update_data.get("team_b_id", fixture.team_b_id)
    if team_a_id is not None and team_a_id == team_b_id:
        raise HTTPException(status_code=400, detail="team_a_id and team_b_id must be different")
    _check_teams(session, fixture.sport_id, [update_data.get("team_a_id"), update_data.get("team_b_id")])

    if update_data.get("status") is not None:
        update_data["status"] = update_data["status"].value
    for field_name, value in update_data.items():
        setattr(fixture, field_name, value)

    fixture.version += 1
    fixture.updated_by = admin.id
    fixture.updated_at = datetime.utcnow()
    session.add(fixture)
    session.commit()
    session.refresh(fixture)
    return fixture


@router.delete("/admin/fixtures/{fixture_id}", status_code=204)
def delete_fixture(
    fixture_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Delete a standalone fixture and its incident history"""
    fixture = _get_fixture(session, fixture_id)
    if fixture.tournament_round_id is not None:
        raise HTTPException(status_code=400, detail="Bracket fixtures are removed with reset-bracket")

    session.execute(delete(MatchUpdate).where(MatchUpdate.fixture_id == fixture_id))
    session.delete(fixture)
    session.commit()
    return None
