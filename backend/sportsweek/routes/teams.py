"""
Team Management API Routes
Provides CRUD operations for teams within a sport and approval of
student-registered teams.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, or_, select

from sportsweek.database import get_session
from sportsweek.models.enums import RegistrationStatus, TeamStatus, TeamType
from sportsweek.models.fixture import Fixture
from sportsweek.models.profile import Profile
from sportsweek.models.registration import TeamRegistration
from sportsweek.models.sport import Sport
from sportsweek.models.team import Team
from sportsweek.models.tournament_team import TournamentTeam
from sportsweek.utils.permissions import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamCreateRequest(BaseModel):
    sport_id: int
    name: str
    department: Optional[str] = None
    logo_url: Optional[str] = None
    captain_name: Optional[str] = None
    captain_contact: Optional[str] = None
    captain_email: Optional[str] = None


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = None
    department: Optional[str] = None
    logo_url: Optional[str] = None
    captain_name: Optional[str] = None
    captain_contact: Optional[str] = None
    captain_email: Optional[str] = None


class TeamRejectRequest(BaseModel):
    reason: Optional[str] = None


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sport_id: int
    name: str
    department: Optional[str] = None
    logo_url: Optional[str] = None
    status: str
    team_type: str
    captain_name: Optional[str] = None
    captain_contact: Optional[str] = None
    captain_email: Optional[str] = None
    original_registration_id: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: datetime


def _get_team_or_404(session: Session, team_id: int) -> Team:
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


def _commit_team(session: Session, team: Team) -> Team:
    try:
        session.add(team)
        session.commit()
        session.refresh(team)
        return team
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Team with name '{team.name}' already exists for this sport")


# ============================================================================
# Team CRUD Endpoints
# ============================================================================


@router.get("/teams", response_model=List[TeamResponse])
def list_teams(
    sport_id: Optional[int] = None,
    status: Optional[TeamStatus] = None,
    session: Session = Depends(get_session),
):
    """List teams ordered by name, optionally filtered by sport and status"""
    query = select(Team)
    if sport_id is not None:
        query = query.where(Team.sport_id == sport_id)
    if status is not None:
        query = query.where(Team.status == status.value)
    return session.exec(query.order_by(Team.name, Team.id)).all()


@router.get("/teams/{team_id}", response_model=TeamResponse)
def get_team(team_id: int, session: Session = Depends(get_session)):
    return _get_team_or_404(session, team_id)


@router.post("/teams", response_model=TeamResponse, status_code=201)
def create_team(
    request: TeamCreateRequest,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """
    Create a team directly (admin_created, active).

    Constraints:
    - (sport_id, name) must be unique
    """
    if not session.get(Sport, request.sport_id):
        raise HTTPException(status_code=404, detail="Sport not found")
    if not request.name.strip():
        raise HTTPException(status_code=400, detail="Team name is required")

    team = Team(
        **request.model_dump(exclude={"name"}),
        name=request.name.strip(),
        status=TeamStatus.active.value,
        team_type=TeamType.admin_created.value,
    )
    return _commit_team(session, team)


@router.patch("/teams/{team_id}", response_model=TeamResponse)
def update_team(
    team_id: int,
    request: TeamUpdateRequest,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    team = _get_team_or_404(session, team_id)
    for field_name, value in request.model_dump(exclude_unset=True).items():
        setattr(team, field_name, value)
    return _commit_team(session, team)


@router.delete("/teams/{team_id}", status_code=204)
def delete_team(
    team_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Delete a team that is not on a tournament roster or in a fixture"""
    team = _get_team_or_404(session, team_id)

    in_tournament = session.exec(select(TournamentTeam).where(TournamentTeam.team_id == team_id)).first()
    in_fixture = session.exec(
        select(Fixture).where(or_(Fixture.team_a_id == team_id, Fixture.team_b_id == team_id))
    ).first()
    if in_tournament or in_fixture:
        raise HTTPException(status_code=409, detail="Team is scheduled and cannot be deleted")

    session.delete(team)
    session.commit()
    return None


# ============================================================================
# Student Team Approval
# ============================================================================


def _linked_registration(session: Session, team: Team) -> Optional[TeamRegistration]:
    if team.original_registration_id is None:
        return None
    return session.get(TeamRegistration, team.original_registration_id)


@router.post("/teams/{team_id}/approve", response_model=TeamResponse)
def approve_team(
    team_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Approve a pending student team; its registration is marked approved"""
    team = _get_team_or_404(session, team_id)
    if team.status != TeamStatus.pending_approval.value:
        raise HTTPException(status_code=400, detail="Team is not pending approval")

    now = datetime.utcnow()
    team.status = TeamStatus.active.value
    team.approved_by = admin.id
    team.approved_at = now

    registration = _linked_registration(session, team)
    if registration:
        registration.status = RegistrationStatus.approved.value
        registration.approved_by = admin.id
        registration.approved_at = now
        session.add(registration)

    team = _commit_team(session, team)
    logger.info("Team %d approved by profile %d", team.id, admin.id)
    return team


@router.post("/teams/{team_id}/reject", response_model=TeamResponse)
def reject_team(
    team_id: int,
    request: TeamRejectRequest,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Reject a pending student team; its registration is marked rejected"""
    team = _get_team_or_404(session, team_id)
    if team.status != TeamStatus.pending_approval.value:
        raise HTTPException(status_code=400, detail="Team is not pending approval")

    team.status = TeamStatus.rejected.value
    registration = _linked_registration(session, team)
    if registration:
        registration.status = RegistrationStatus.rejected.value
        registration.admin_notes = request.reason
        session.add(registration)

    team = _commit_team(session, team)
    logger.info("Team %d rejected by profile %d", team.id, admin.id)
    return team
