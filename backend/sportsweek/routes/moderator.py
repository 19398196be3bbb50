"""
Moderator console: scoped fixture list, live score updates, undo, incidents,
and explicit winner selection for bracket matches.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.fixture import Fixture
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport
from sportsweek.services.errors import ServiceError
from sportsweek.services.scoring_service import (
    ScoreUpdate,
    list_incidents,
    post_incident,
    set_winner,
    undo_last_update,
    update_score,
)
from sportsweek.utils.permissions import require_moderator, resolve_moderator_scope
from sportsweek.utils.version_guards import get_fixture_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


class FixtureState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sport_id: int
    tournament_id: Optional[int] = None
    tournament_round_id: Optional[int] = None
    bracket_position: Optional[int] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    team_a_score: Optional[int] = None
    team_b_score: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    venue: Optional[str] = None
    status: str
    winner_id: Optional[int] = None
    extra: Optional[Dict[str, Any]] = None
    version: int
    updated_by: Optional[int] = None
    updated_at: datetime


class ModeratorFixturesResponse(BaseModel):
    fixtures: List[FixtureState]
    total: int
    limit: int
    offset: int


class UpdateScoreRequest(BaseModel):
    team_a_score: int = Field(ge=0)
    team_b_score: int = Field(ge=0)
    # "finished" is accepted from older clients and stored as "completed"
    status: Literal["scheduled", "live", "completed", "finished", "cancelled"]
    expected_version: Optional[int] = Field(default=None, ge=1)
    note: Optional[str] = Field(default=None, max_length=500)
    extra: Optional[Dict[str, Any]] = None


class UpdateScoreResponse(BaseModel):
    success: bool = True
    fixture: FixtureState
    advancement: Optional[Dict[str, Any]] = None
    message: str = "Score updated successfully"


class IncidentCreate(BaseModel):
    note: Optional[str] = Field(default=None, max_length=500)
    type: Optional[str] = None
    media_url: Optional[str] = None


class IncidentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fixture_id: int
    update_type: str
    change_type: Optional[str] = None
    note: Optional[str] = None
    media_url: Optional[str] = None
    prev_team_a_score: Optional[int] = None
    prev_team_b_score: Optional[int] = None
    prev_status: Optional[str] = None
    new_team_a_score: Optional[int] = None
    new_team_b_score: Optional[int] = None
    new_status: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime


class WinnerRequest(BaseModel):
    winner_id: int


class ModeratorScopeResponse(BaseModel):
    profile_id: int
    role: str
    is_admin: bool
    assigned_sports: List[str]
    assigned_sport_ids: List[int]
    assigned_venues: List[str]
    can_moderate_anything: bool


@router.get("/moderator/fixtures", response_model=ModeratorFixturesResponse)
def list_moderator_fixtures(
    status: Optional[str] = None,
    sport: Optional[int] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """
    Fixtures the caller may moderate, soonest first.

    Admins see everything. Moderators see fixtures of their assigned sports
    (and assigned venues, when they have any); no assigned sports = nothing.
    """
    scope = resolve_moderator_scope(session, moderator)
    if scope.is_empty:
        return ModeratorFixturesResponse(fixtures=[], total=0, limit=limit, offset=offset)

    query = select(Fixture)
    if status and status != "all":
        query = query.where(Fixture.status == status)
    if sport is not None:
        query = query.where(Fixture.sport_id == sport)
    if not scope.is_admin:
        query = query.where(Fixture.sport_id.in_(list(scope.sport_ids)))
        if scope.venues:
            query = query.where(Fixture.venue.in_(scope.venues))

    fixtures = session.exec(
        query.order_by(Fixture.scheduled_at, Fixture.id).offset(offset).limit(limit)
    ).all()
    return ModeratorFixturesResponse(
        fixtures=[FixtureState.model_validate(f) for f in fixtures],
        total=len(fixtures),
        limit=limit,
        offset=offset,
    )


@router.get("/moderator/scope", response_model=ModeratorScopeResponse)
def get_moderator_scope(
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """How the caller's sport/venue assignments resolve"""
    scope = resolve_moderator_scope(session, moderator)
    return ModeratorScopeResponse(
        profile_id=moderator.id,
        role=moderator.role,
        is_admin=scope.is_admin,
        assigned_sports=list(moderator.assigned_sports or []),
        assigned_sport_ids=sorted(scope.sport_ids),
        assigned_venues=scope.venues,
        can_moderate_anything=not scope.is_empty,
    )


@router.post("/moderator/fixtures/{fixture_id}/update-score", response_model=UpdateScoreResponse)
def update_fixture_score(
    fixture_id: int,
    request: UpdateScoreRequest,
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """
    Update a fixture's score and status.

    expected_version enables optimistic concurrency: a stale version gets 409.
    Completing a bracket fixture advances its winner to the next round.
    """
    update = ScoreUpdate(
        team_a_score=request.team_a_score,
        team_b_score=request.team_b_score,
        status=request.status,
        expected_version=request.expected_version,
        note=request.note,
        extra=request.extra,
    )
    try:
        result = update_score(session, fixture_id, update, moderator)
    except ServiceError as e:
        session.rollback()
        detail = e.message if e.code is None else {"error": e.message, "errorType": e.code}
        raise HTTPException(status_code=e.status_code, detail=detail)
    except Exception:
        session.rollback()
        logger.exception("Score update failed for fixture %d", fixture_id)
        raise HTTPException(status_code=500, detail="Internal server error")

    return UpdateScoreResponse(
        fixture=FixtureState.model_validate(result.fixture),
        advancement=result.advancement.to_dict() if result.advancement else None,
    )


@router.post("/moderator/fixtures/{fixture_id}/undo", response_model=FixtureState)
def undo_fixture_update(
    fixture_id: int,
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """Revert the latest score update"""
    try:
        fixture = undo_last_update(session, fixture_id, moderator)
    except ServiceError as e:
        session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return FixtureState.model_validate(fixture)


@router.get("/moderator/fixtures/{fixture_id}/incidents", response_model=List[IncidentResponse])
def get_fixture_incidents(
    fixture_id: int,
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    """Incident feed, newest first"""
    try:
        get_fixture_or_404(session, fixture_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return list_incidents(session, fixture_id, limit=limit, offset=offset)


@router.post("/moderator/fixtures/{fixture_id}/incidents", response_model=IncidentResponse, status_code=201)
def create_fixture_incident(
    fixture_id: int,
    request: IncidentCreate,
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """Post a manual incident"""
    try:
        return post_incident(
            session,
            fixture_id,
            moderator,
            note=request.note,
            incident_type=request.type,
            media_url=request.media_url,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/moderator/tournaments/{tournament_id}/matches/{match_id}/winner")
def set_match_winner(
    tournament_id: int,
    match_id: int,
    request: WinnerRequest,
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """Complete a bracket match with an explicit winner and advance it"""
    try:
        fixture = get_fixture_or_404(session, match_id, tournament_id)
        result = set_winner(session, fixture, request.winner_id, moderator)
    except ServiceError as e:
        session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"success": True, **result.to_dict()}


@router.get("/sports/{sport_id}/live", response_model=List[FixtureState])
def list_live_fixtures(sport_id: int, session: Session = Depends(get_session)):
    """Fixtures currently live for a sport"""
    if not session.get(Sport, sport_id):
        raise HTTPException(status_code=404, detail="Sport not found")
    return session.exec(
        select(Fixture).where(Fixture.sport_id == sport_id, Fixture.status == "live").order_by(Fixture.scheduled_at)
    ).all()
