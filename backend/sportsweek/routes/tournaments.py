import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.enums import TournamentFormat, TournamentStatus
from sportsweek.models.fixture import Fixture
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport
from sportsweek.models.team import Team
from sportsweek.models.tournament import Tournament
from sportsweek.services.bracket_service import (
    create_tournament_with_teams,
    get_round_fixtures,
    get_rounds,
    get_seeded_roster,
    get_tournament_or_404,
    replace_tournament_teams,
)
from sportsweek.services.errors import ServiceError
from sportsweek.utils.permissions import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

# Formats the bracket planner can lay out rounds for
PLANNABLE_FORMATS = (TournamentFormat.single_elimination,)


# ============================================================================
# Request/Response Models
# ============================================================================


class TournamentCreate(BaseModel):
    name: str
    sport_id: int
    tournament_type: TournamentFormat = TournamentFormat.single_elimination
    selected_teams: List[int]
    description: Optional[str] = None
    max_teams: Optional[int] = Field(default=None, ge=2)
    start_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @field_validator("tournament_type")
    @classmethod
    def validate_plannable(cls, v):
        if v not in PLANNABLE_FORMATS:
            raise ValueError(f"{v.value} tournaments cannot be planned yet; use single_elimination")
        return v

    @model_validator(mode="after")
    def validate_selection(self):
        if len(self.selected_teams) < 2:
            raise ValueError("at least 2 teams must be selected")
        if len(set(self.selected_teams)) != len(self.selected_teams):
            raise ValueError("selected_teams contains duplicates")
        if self.max_teams is not None and len(self.selected_teams) > self.max_teams:
            raise ValueError("selected_teams exceeds max_teams")
        return self


class TournamentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    max_teams: Optional[int] = Field(default=None, ge=2)
    start_date: Optional[date] = None
    status: Optional[TournamentStatus] = None


class TournamentTeamsUpdate(BaseModel):
    team_ids: List[int]


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    sport_id: int
    tournament_type: str
    max_teams: Optional[int] = None
    start_date: Optional[date] = None
    status: str
    winner_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TournamentTeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    team_id: int
    seed: int
    bracket_position: Optional[int] = None
    team_name: Optional[str] = None


class BracketFixtureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bracket_position: Optional[int] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    team_a_score: Optional[int] = None
    team_b_score: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    venue: Optional[str] = None
    status: str
    winner_id: Optional[int] = None
    version: int


class RoundResponse(BaseModel):
    id: int
    round_number: int
    round_name: str
    total_matches: int
    completed_matches: int
    status: str
    fixtures: List[BracketFixtureResponse] = []


class TournamentDetailResponse(TournamentResponse):
    teams: List[TournamentTeamResponse] = []
    rounds: List[RoundResponse] = []


def build_rounds_response(session: Session, tournament_id: int) -> List[RoundResponse]:
    return [
        RoundResponse(
            id=r.id,
            round_number=r.round_number,
            round_name=r.round_name,
            total_matches=r.total_matches,
            completed_matches=r.completed_matches,
            status=r.status,
            fixtures=[BracketFixtureResponse.model_validate(f) for f in get_round_fixtures(session, r.id)],
        )
        for r in get_rounds(session, tournament_id)
    ]


def build_roster_response(session: Session, tournament_id: int) -> List[TournamentTeamResponse]:
    roster = get_seeded_roster(session, tournament_id)
    names = {}
    if roster:
        teams = session.exec(select(Team).where(Team.id.in_([e.team_id for e in roster]))).all()
        names = {t.id: t.name for t in teams}
    return [
        TournamentTeamResponse(
            id=e.id,
            tournament_id=e.tournament_id,
            team_id=e.team_id,
            seed=e.seed,
            bracket_position=e.bracket_position,
            team_name=names.get(e.team_id),
        )
        for e in roster
    ]


# ============================================================================
# Public Endpoints
# ============================================================================


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(
    sport_id: Optional[int] = None,
    status: Optional[TournamentStatus] = None,
    session: Session = Depends(get_session),
):
    """List tournaments that are not deleted, newest first"""
    query = select(Tournament).where(Tournament.deleted_at.is_(None))
    if sport_id is not None:
        query = query.where(Tournament.sport_id == sport_id)
    if status is not None:
        query = query.where(Tournament.status == status.value)
    return session.exec(query.order_by(Tournament.created_at.desc(), Tournament.id.desc())).all()


@router.get("/tournaments/{tournament_id}", response_model=TournamentDetailResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Get a tournament with its seeded roster and bracket"""
    try:
        tournament = get_tournament_or_404(session, tournament_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    data = TournamentResponse.model_validate(tournament).model_dump()
    return TournamentDetailResponse(
        **data,
        teams=build_roster_response(session, tournament_id),
        rounds=build_rounds_response(session, tournament_id),
    )


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(
    request: TournamentCreate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """
    Create a tournament from a team selection.

    Seeds follow selection order. Rounds are planned immediately (status
    pending); fixtures are created by generate-bracket.
    """
    if not session.get(Sport, request.sport_id):
        raise HTTPException(status_code=404, detail="Sport not found")

    try:
        return create_tournament_with_teams(
            session,
            name=request.name,
            sport_id=request.sport_id,
            tournament_type=request.tournament_type.value,
            team_ids=request.selected_teams,
            description=request.description,
            max_teams=request.max_teams,
            start_date=request.start_date,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Tournament creation failed")
        raise HTTPException(status_code=500, detail="Failed to create tournament")


@router.put("/admin/tournaments/{tournament_id}", response_model=TournamentResponse)
def update_tournament(
    tournament_id: int,
    request: TournamentUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Update tournament details"""
    try:
        tournament = get_tournament_or_404(session, tournament_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    update_data = request.model_dump(exclude_unset=True)
    if "status" in update_data and update_data["status"] is not None:
        update_data["status"] = update_data["status"].value
    for field_name, value in update_data.items():
        setattr(tournament, field_name, value)

    tournament.updated_at = datetime.utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.delete("/admin/tournaments/{tournament_id}", status_code=204)
def delete_tournament(
    tournament_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Soft-delete a tournament (sets deleted_at); its fixtures are cancelled"""
    try:
        tournament = get_tournament_or_404(session, tournament_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    tournament.deleted_at = datetime.utcnow()
    tournament.status = TournamentStatus.cancelled.value
    session.add(tournament)
    fixtures = session.exec(select(Fixture).where(Fixture.tournament_id == tournament_id)).all()
    for fixture in fixtures:
        if fixture.status != "completed":
            fixture.status = "cancelled"
            session.add(fixture)
    session.commit()
    return Response(status_code=204)


@router.get("/admin/tournaments/{tournament_id}/teams", response_model=List[TournamentTeamResponse])
def get_tournament_teams(
    tournament_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Seeded roster in seed order"""
    try:
        get_tournament_or_404(session, tournament_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return build_roster_response(session, tournament_id)


@router.post("/admin/tournaments/{tournament_id}/teams", response_model=List[TournamentTeamResponse])
def set_tournament_teams(
    tournament_id: int,
    request: TournamentTeamsUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Replace the roster; seeds are re-assigned in the given order"""
    try:
        tournament = get_tournament_or_404(session, tournament_id)
        replace_tournament_teams(session, tournament, request.team_ids)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return build_roster_response(session, tournament_id)
