"""
Bracket Management API Routes
Generate, save and reset single-elimination brackets; inspect progress.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from sportsweek.database import get_session
from sportsweek.models.profile import Profile
from sportsweek.routes.tournaments import RoundResponse, build_rounds_response
from sportsweek.services.advancement_service import advance_bye, round_progress
from sportsweek.services.bracket_service import (
    BracketFixtureInput,
    BracketRoundInput,
    generate_bracket,
    get_tournament_or_404,
    reset_bracket,
    save_brackets,
)
from sportsweek.services.errors import ServiceError
from sportsweek.utils.permissions import require_admin, require_moderator
from sportsweek.utils.version_guards import get_fixture_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class BracketFixturePayload(BaseModel):
    # Fixtures built client-side carry ids like "temp-3-0" until saved
    id: Optional[Union[int, str]] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    venue: Optional[str] = None
    bracket_position: int

    def existing_id(self) -> Optional[int]:
        if self.id is None:
            return None
        if isinstance(self.id, int):
            return self.id
        return int(self.id) if self.id.isdigit() else None


class BracketRoundPayload(BaseModel):
    id: int
    fixtures: List[BracketFixturePayload] = []


class SaveBracketsRequest(BaseModel):
    rounds: List[BracketRoundPayload]


class SaveBracketsResponse(BaseModel):
    success: bool = True
    created_fixtures: int
    updated_fixtures: int
    message: str


class GenerateBracketResponse(BaseModel):
    success: bool = True
    rounds: List[RoundResponse]
    message: str


class RoundProgress(BaseModel):
    round_id: int
    round_number: int
    round_name: str
    total_matches: int
    completed_matches: int
    status: str


class TournamentProgressResponse(BaseModel):
    tournament_id: int
    status: str
    winner_id: Optional[int] = None
    rounds: List[RoundProgress]


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/admin/tournaments/{tournament_id}/generate-bracket", response_model=GenerateBracketResponse)
def generate_tournament_bracket(
    tournament_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """
    Create placeholder fixtures for every round and seed round 1.

    Seeds are paired in order (1v2, 3v4, ...). With an odd roster the last
    seed gets a bye and is advanced straight away.
    """
    try:
        tournament = get_tournament_or_404(session, tournament_id)
        generate_bracket(session, tournament)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        session.rollback()
        logger.exception("Bracket generation failed for tournament %d", tournament_id)
        raise HTTPException(status_code=500, detail="Internal server error")

    return GenerateBracketResponse(
        rounds=build_rounds_response(session, tournament_id),
        message="Bracket structure generated successfully",
    )


@router.post("/admin/tournaments/{tournament_id}/save-brackets", response_model=SaveBracketsResponse)
def save_tournament_brackets(
    tournament_id: int,
    request: SaveBracketsRequest,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Persist an edited bracket; reports created/updated fixture counts"""
    rounds = [
        BracketRoundInput(
            round_id=r.id,
            fixtures=[
                BracketFixtureInput(
                    bracket_position=f.bracket_position,
                    fixture_id=f.existing_id(),
                    team_a_id=f.team_a_id,
                    team_b_id=f.team_b_id,
                    scheduled_at=f.scheduled_at,
                    venue=f.venue,
                )
                for f in r.fixtures
            ],
        )
        for r in request.rounds
    ]

    try:
        tournament = get_tournament_or_404(session, tournament_id)
        result = save_brackets(session, tournament, rounds)
    except ServiceError as e:
        session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="Two fixtures cannot share a bracket position")
    except Exception:
        session.rollback()
        logger.exception("Saving brackets failed for tournament %d", tournament_id)
        raise HTTPException(status_code=500, detail="Internal server error")

    return SaveBracketsResponse(
        created_fixtures=result.created_fixtures,
        updated_fixtures=result.updated_fixtures,
        message=f"Brackets saved successfully ({result.created_fixtures} created, {result.updated_fixtures} updated)",
    )


@router.post("/admin/tournaments/{tournament_id}/reset-bracket")
def reset_tournament_bracket(
    tournament_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Delete all fixtures and rounds; tournament returns to draft"""
    try:
        tournament = get_tournament_or_404(session, tournament_id)
        reset_bracket(session, tournament)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        session.rollback()
        logger.exception("Resetting bracket failed for tournament %d", tournament_id)
        raise HTTPException(status_code=500, detail="Failed to reset tournament bracket")

    return {"success": True, "message": "Tournament bracket reset successfully"}


@router.post("/admin/tournaments/{tournament_id}/fixtures/{fixture_id}/advance-bye")
def advance_fixture_bye(
    tournament_id: int,
    fixture_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Complete a single-team bracket fixture and advance that team"""
    try:
        fixture = get_fixture_or_404(session, fixture_id, tournament_id)
        result = advance_bye(session, fixture, actor_id=admin.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return result.to_dict()


@router.get("/moderator/tournaments/{tournament_id}/progress", response_model=TournamentProgressResponse)
def get_tournament_progress(
    tournament_id: int,
    session: Session = Depends(get_session),
    moderator: Profile = Depends(require_moderator),
):
    """Round-by-round completion"""
    try:
        tournament = get_tournament_or_404(session, tournament_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return TournamentProgressResponse(
        tournament_id=tournament.id,
        status=tournament.status,
        winner_id=tournament.winner_id,
        rounds=[RoundProgress(**r) for r in round_progress(session, tournament_id)],
    )
