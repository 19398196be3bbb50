"""
Bracket advancement: when a bracket fixture completes, move its winner into the
next round and roll round/tournament status forward.

Winner of position p in round r -> position ceil(p/2) of round r+1
(team_a when p is odd, team_b when p is even).
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlmodel import Session, select

from sportsweek.models.fixture import Fixture
from sportsweek.models.match_update import MatchUpdate
from sportsweek.models.tournament import Tournament
from sportsweek.models.tournament_round import TournamentRound
from sportsweek.services.bracket_planner import SIDE_A, feeder_positions, next_bracket_slot
from sportsweek.services.errors import ServiceError

logger = logging.getLogger(__name__)

FIXTURE_COMPLETED = "completed"
ROUND_PENDING = "pending"
ROUND_ACTIVE = "active"
ROUND_COMPLETED = "completed"
TOURNAMENT_ACTIVE = "active"
TOURNAMENT_COMPLETED = "completed"


class AdvancementError(ServiceError):
    pass


@dataclass
class AdvancementResult:
    fixture_id: int
    winner_id: int
    next_fixture_id: Optional[int] = None
    next_side: Optional[str] = None
    round_completed: bool = False
    tournament_completed: bool = False
    already_counted: bool = False
    byes_resolved: int = 0

    def to_dict(self) -> Dict:
        return {
            "fixture_id": self.fixture_id,
            "winner_id": self.winner_id,
            "next_fixture_id": self.next_fixture_id,
            "next_side": self.next_side,
            "round_completed": self.round_completed,
            "tournament_completed": self.tournament_completed,
            "byes_resolved": self.byes_resolved,
        }


def _get_round(session: Session, tournament_id: int, round_number: int) -> Optional[TournamentRound]:
    return session.exec(
        select(TournamentRound).where(
            TournamentRound.tournament_id == tournament_id,
            TournamentRound.round_number == round_number,
        )
    ).first()


def _get_fixture_at(session: Session, round_id: int, bracket_position: int) -> Optional[Fixture]:
    return session.exec(
        select(Fixture).where(
            Fixture.tournament_round_id == round_id,
            Fixture.bracket_position == bracket_position,
        )
    ).first()


def get_next_fixture(session: Session, fixture: Fixture) -> Optional[Fixture]:
    """The next-round fixture a bracket fixture feeds into, if it exists yet."""
    if fixture.tournament_round_id is None or fixture.bracket_position is None:
        return None
    current_round = session.get(TournamentRound, fixture.tournament_round_id)
    if current_round is None:
        return None
    next_round = _get_round(session, current_round.tournament_id, current_round.round_number + 1)
    if next_round is None:
        return None
    slot = next_bracket_slot(current_round.round_number, fixture.bracket_position)
    return _get_fixture_at(session, next_round.id, slot.bracket_position)


def _count_completed(session: Session, round_id: int) -> int:
    fixtures = session.exec(
        select(Fixture).where(
            Fixture.tournament_round_id == round_id,
            Fixture.status == FIXTURE_COMPLETED,
            Fixture.winner_id.is_not(None),
        )
    ).all()
    return len(fixtures)


def _is_bye_slot(current_round: TournamentRound, next_position: int) -> bool:
    """A next-round position is a bye when only one of its feeder positions exists."""
    first, second = feeder_positions(next_position)
    return first <= current_round.total_matches < second


def advance_winner(session: Session, fixture: Fixture, resolve_byes: bool = True) -> AdvancementResult:
    """
    Advance the winner of a completed bracket fixture.

    Side effects (committed):
    - winner placed into the next-round fixture (created if missing)
    - round.completed_matches recounted; round completes when it reaches
      total_matches and the following round becomes active
    - completing the final round completes the tournament and sets its winner

    Idempotent: re-advancing the same fixture leaves the same state.

    Raises:
        AdvancementError: fixture not completed, no winner, or not a bracket fixture
    """
    if fixture.status != FIXTURE_COMPLETED or fixture.winner_id is None:
        raise AdvancementError("Fixture must be completed with a winner before advancing")
    if fixture.tournament_round_id is None or fixture.bracket_position is None:
        raise AdvancementError("Fixture is not part of a tournament bracket")
    if fixture.winner_id not in (fixture.team_a_id, fixture.team_b_id):
        raise AdvancementError("Winner must be one of the fixture's teams")

    current_round = session.get(TournamentRound, fixture.tournament_round_id)
    if current_round is None:
        raise AdvancementError("Tournament round not found", status_code=404)

    result = AdvancementResult(fixture_id=fixture.id, winner_id=fixture.winner_id)

    next_round = _get_round(session, current_round.tournament_id, current_round.round_number + 1)
    next_fixture: Optional[Fixture] = None
    if next_round is not None:
        slot = next_bracket_slot(current_round.round_number, fixture.bracket_position)
        next_fixture = _get_fixture_at(session, next_round.id, slot.bracket_position)
        if next_fixture is None:
            next_fixture = Fixture(
                sport_id=fixture.sport_id,
                tournament_id=current_round.tournament_id,
                tournament_round_id=next_round.id,
                bracket_position=slot.bracket_position,
                status="scheduled",
            )
        if slot.side == SIDE_A:
            next_fixture.team_a_id = fixture.winner_id
        else:
            next_fixture.team_b_id = fixture.winner_id
        next_fixture.updated_at = datetime.utcnow()
        session.add(next_fixture)
        session.flush()
        result.next_fixture_id = next_fixture.id
        result.next_side = slot.side

    # Recount rather than increment so re-advancing never double counts
    session.flush()
    previous_completed = current_round.completed_matches
    current_round.completed_matches = _count_completed(session, current_round.id)
    result.already_counted = current_round.completed_matches == previous_completed

    if current_round.completed_matches >= current_round.total_matches:
        current_round.status = ROUND_COMPLETED
        result.round_completed = True
        if next_round is not None and next_round.status == ROUND_PENDING:
            next_round.status = ROUND_ACTIVE
            session.add(next_round)
    else:
        current_round.status = ROUND_ACTIVE
    session.add(current_round)

    tournament = session.get(Tournament, current_round.tournament_id)
    if tournament is not None:
        if next_round is None and result.round_completed:
            tournament.status = TOURNAMENT_COMPLETED
            tournament.winner_id = fixture.winner_id
            result.tournament_completed = True
            logger.info("Tournament %d completed, winner team %d", tournament.id, fixture.winner_id)
        elif tournament.status == "draft":
            tournament.status = TOURNAMENT_ACTIVE
        tournament.updated_at = datetime.utcnow()
        session.add(tournament)

    session.commit()

    if (
        resolve_byes
        and next_fixture is not None
        and next_round is not None
        and next_fixture.status != FIXTURE_COMPLETED
        and _is_bye_slot(current_round, next_fixture.bracket_position)
    ):
        session.refresh(next_fixture)
        bye_result = advance_bye(session, next_fixture)
        result.byes_resolved = 1 + bye_result.byes_resolved
        if bye_result.tournament_completed:
            result.tournament_completed = True

    return result


def advance_bye(session: Session, fixture: Fixture, actor_id: Optional[int] = None) -> AdvancementResult:
    """
    Resolve a bye: a bracket fixture with exactly one team and no possible
    opponent completes with that team as winner, then advances.
    """
    teams = [t for t in (fixture.team_a_id, fixture.team_b_id) if t is not None]
    if len(teams) != 1:
        raise AdvancementError("A bye needs exactly one team in the fixture")

    fixture.winner_id = teams[0]
    fixture.status = FIXTURE_COMPLETED
    fixture.version = (fixture.version or 1) + 1
    fixture.updated_at = datetime.utcnow()
    session.add(fixture)
    session.add(
        MatchUpdate(
            fixture_id=fixture.id,
            update_type="incident",
            change_type="result",
            note="Advanced on a bye",
            new_status=FIXTURE_COMPLETED,
            created_by=actor_id,
        )
    )
    session.commit()
    session.refresh(fixture)
    logger.info("Fixture %d resolved as bye for team %d", fixture.id, fixture.winner_id)
    return advance_winner(session, fixture)


def round_progress(session: Session, tournament_id: int) -> List[Dict]:
    """Per-round completion summary in round order."""
    rounds = session.exec(
        select(TournamentRound)
        .where(TournamentRound.tournament_id == tournament_id)
        .order_by(TournamentRound.round_number)
    ).all()
    return [
        {
            "round_id": r.id,
            "round_number": r.round_number,
            "round_name": r.round_name,
            "total_matches": r.total_matches,
            "completed_matches": r.completed_matches,
            "status": r.status,
        }
        for r in rounds
    ]
