"""
Tournament bracket orchestration: persists what the planner computes.

- create_tournament_with_teams: tournament + seeded roster + planned rounds
- generate_bracket: placeholder fixtures for every round, round 1 seeded
- save_brackets: create/update fixtures from an edited bracket
- reset_bracket: drop fixtures and rounds, back to draft
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete
from sqlmodel import Session, select

from sportsweek.models.enums import TournamentFormat
from sportsweek.models.fixture import Fixture
from sportsweek.models.match_update import MatchUpdate
from sportsweek.models.team import Team
from sportsweek.models.tournament import Tournament
from sportsweek.models.tournament_round import TournamentRound
from sportsweek.models.tournament_team import TournamentTeam
from sportsweek.services.advancement_service import advance_bye
from sportsweek.services.bracket_planner import (
    PlannerError,
    assign_seeds_to_first_round,
    parse_format,
    plan_rounds,
)
from sportsweek.services.errors import NotFoundError, ServiceError

logger = logging.getLogger(__name__)


class BracketError(ServiceError):
    pass


@dataclass
class BracketFixtureInput:
    """One fixture of an edited bracket. fixture_id None (or a temp id) means create."""

    bracket_position: int
    fixture_id: Optional[int] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    venue: Optional[str] = None


@dataclass
class BracketRoundInput:
    round_id: int
    fixtures: List[BracketFixtureInput] = field(default_factory=list)


@dataclass
class SaveBracketsResult:
    created_fixtures: int = 0
    updated_fixtures: int = 0
    skipped_fixtures: int = 0


def get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament or tournament.deleted_at is not None:
        raise NotFoundError("Tournament not found")
    return tournament


def _validate_roster(session: Session, sport_id: int, team_ids: Sequence[int], min_teams: int = 2) -> None:
    if len(team_ids) < min_teams:
        raise BracketError(f"At least {min_teams} teams must be selected")
    if len(set(team_ids)) != len(team_ids):
        raise BracketError("Duplicate teams in selection")
    if not team_ids:
        return

    teams = session.exec(select(Team).where(Team.id.in_(list(team_ids)))).all()
    found = {t.id: t for t in teams}
    missing = [tid for tid in team_ids if tid not in found]
    if missing:
        raise NotFoundError(f"Teams not found: {missing}")
    wrong_sport = [tid for tid in team_ids if found[tid].sport_id != sport_id]
    if wrong_sport:
        raise BracketError(f"Teams do not belong to the tournament's sport: {wrong_sport}")


def _plan_or_raise(team_count: int, tournament_format: str):
    try:
        return plan_rounds(team_count, tournament_format)
    except PlannerError as e:
        raise BracketError(str(e))


def _insert_rounds(session: Session, tournament_id: int, team_count: int, tournament_format: str) -> List[TournamentRound]:
    rounds = []
    for plan in _plan_or_raise(team_count, tournament_format):
        tournament_round = TournamentRound(
            tournament_id=tournament_id,
            round_number=plan.round_number,
            round_name=plan.label,
            total_matches=plan.match_count,
            status="pending",
        )
        session.add(tournament_round)
        rounds.append(tournament_round)
    return rounds


def create_tournament_with_teams(
    session: Session,
    *,
    name: str,
    sport_id: int,
    tournament_type: str,
    team_ids: Sequence[int],
    description: Optional[str] = None,
    max_teams: Optional[int] = None,
    start_date: Optional[date] = None,
) -> Tournament:
    """
    Create a draft tournament, its seeded roster (seed = selection order) and
    its planned rounds.

    If adding teams or rounds fails, the just-created tournament is deleted
    before the error propagates.
    """
    try:
        fmt = parse_format(tournament_type)
    except PlannerError as e:
        raise BracketError(str(e))
    _validate_roster(session, sport_id, team_ids)
    if max_teams is not None and len(team_ids) > max_teams:
        raise BracketError(f"Selected {len(team_ids)} teams but max_teams is {max_teams}")

    tournament = Tournament(
        name=name,
        description=description,
        sport_id=sport_id,
        tournament_type=fmt.value,
        max_teams=max_teams,
        start_date=start_date,
        status="draft",
    )
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    try:
        for index, team_id in enumerate(team_ids):
            session.add(
                TournamentTeam(
                    tournament_id=tournament.id,
                    team_id=team_id,
                    seed=index + 1,
                    bracket_position=index + 1,
                )
            )
        _insert_rounds(session, tournament.id, len(team_ids), fmt.value)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Failed to add teams/rounds to tournament %d; removing it", tournament.id)
        session.execute(delete(TournamentTeam).where(TournamentTeam.tournament_id == tournament.id))
        session.execute(delete(TournamentRound).where(TournamentRound.tournament_id == tournament.id))
        session.execute(delete(Tournament).where(Tournament.id == tournament.id))
        session.commit()
        raise

    session.refresh(tournament)
    logger.info("Created tournament %d with %d teams", tournament.id, len(team_ids))
    return tournament


def replace_tournament_teams(session: Session, tournament: Tournament, team_ids: Sequence[int]) -> List[TournamentTeam]:
    """
    Replace the roster; seeds follow the given order and the rounds are
    re-planned for the new size. Refused once the bracket has fixtures.
    """
    _validate_roster(session, tournament.sport_id, team_ids, min_teams=0)
    if tournament.max_teams is not None and len(team_ids) > tournament.max_teams:
        raise BracketError(f"Selected {len(team_ids)} teams but max_teams is {tournament.max_teams}")

    has_fixtures = session.exec(select(Fixture.id).where(Fixture.tournament_id == tournament.id)).first()
    if has_fixtures is not None:
        raise BracketError("Cannot change teams after the bracket has been generated; reset the bracket first")

    session.execute(delete(TournamentTeam).where(TournamentTeam.tournament_id == tournament.id))
    session.execute(delete(TournamentRound).where(TournamentRound.tournament_id == tournament.id))
    if len(team_ids) >= 2:
        _insert_rounds(session, tournament.id, len(team_ids), tournament.tournament_type)
    roster = []
    for index, team_id in enumerate(team_ids):
        entry = TournamentTeam(tournament_id=tournament.id, team_id=team_id, seed=index + 1, bracket_position=index + 1)
        session.add(entry)
        roster.append(entry)
    session.commit()
    for entry in roster:
        session.refresh(entry)
    return roster


def get_seeded_roster(session: Session, tournament_id: int) -> List[TournamentTeam]:
    return list(
        session.exec(
            select(TournamentTeam)
            .where(TournamentTeam.tournament_id == tournament_id)
            .order_by(TournamentTeam.seed, TournamentTeam.id)
        ).all()
    )


def get_rounds(session: Session, tournament_id: int) -> List[TournamentRound]:
    return list(
        session.exec(
            select(TournamentRound)
            .where(TournamentRound.tournament_id == tournament_id)
            .order_by(TournamentRound.round_number)
        ).all()
    )


def get_round_fixtures(session: Session, round_id: int) -> List[Fixture]:
    return list(
        session.exec(
            select(Fixture).where(Fixture.tournament_round_id == round_id).order_by(Fixture.bracket_position)
        ).all()
    )


def generate_bracket(session: Session, tournament: Tournament) -> List[TournamentRound]:
    """
    Build the bracket structure for a single-elimination tournament.

    Rounds are reused if they exist, otherwise planned from the roster size.
    Every round gets placeholder fixtures at positions 1..total_matches.
    Round 1 is filled pairwise in seed order; a lone last team gets a bye and
    is advanced immediately.
    """
    if tournament.tournament_type != TournamentFormat.single_elimination.value:
        raise BracketError("Only single elimination tournaments are supported for bracket generation")

    roster = get_seeded_roster(session, tournament.id)
    if len(roster) < 2:
        raise BracketError("At least 2 teams are required to generate a bracket")

    rounds = get_rounds(session, tournament.id)
    if not rounds:
        _insert_rounds(session, tournament.id, len(roster), tournament.tournament_type)
        session.commit()
        rounds = get_rounds(session, tournament.id)

    scheduled_at = datetime.combine(tournament.start_date, datetime.min.time()) if tournament.start_date else None
    for tournament_round in rounds:
        existing = {f.bracket_position for f in get_round_fixtures(session, tournament_round.id)}
        for position in range(1, tournament_round.total_matches + 1):
            if position in existing:
                continue
            session.add(
                Fixture(
                    sport_id=tournament.sport_id,
                    tournament_id=tournament.id,
                    tournament_round_id=tournament_round.id,
                    bracket_position=position,
                    scheduled_at=scheduled_at,
                    status="scheduled",
                )
            )
    session.commit()

    first_round = rounds[0]
    first_fixtures = {f.bracket_position: f for f in get_round_fixtures(session, first_round.id)}
    slots = assign_seeds_to_first_round([entry.team_id for entry in roster])
    byes = []
    for position, (team_a_id, team_b_id) in slots.items():
        fixture = first_fixtures.get(position)
        if fixture is None:
            raise BracketError(f"Round 1 has no fixture at position {position}")
        if fixture.status == "completed":
            continue
        fixture.team_a_id = team_a_id
        fixture.team_b_id = team_b_id
        fixture.updated_at = datetime.utcnow()
        session.add(fixture)
        if team_b_id is None:
            byes.append(fixture)

    if first_round.status == "pending":
        first_round.status = "active"
        session.add(first_round)
    if tournament.status == "draft":
        tournament.status = "active"
        tournament.updated_at = datetime.utcnow()
        session.add(tournament)
    session.commit()

    for fixture in byes:
        session.refresh(fixture)
        advance_bye(session, fixture)

    logger.info("Generated bracket for tournament %d: %d rounds, %d teams", tournament.id, len(rounds), len(roster))
    return get_rounds(session, tournament.id)


def save_brackets(session: Session, tournament: Tournament, rounds: Sequence[BracketRoundInput]) -> SaveBracketsResult:
    """
    Persist an edited bracket. Fixtures with neither team set are skipped.
    Existing fixtures (by id) are updated in place; others are created.
    """
    result = SaveBracketsResult()
    round_by_id: Dict[int, TournamentRound] = {r.id: r for r in get_rounds(session, tournament.id)}

    for round_input in rounds:
        tournament_round = round_by_id.get(round_input.round_id)
        if tournament_round is None:
            raise NotFoundError(f"Round {round_input.round_id} not found in tournament {tournament.id}")

        seen_positions = set()
        for item in round_input.fixtures:
            if item.team_a_id is None and item.team_b_id is None:
                result.skipped_fixtures += 1
                continue
            if not 1 <= item.bracket_position <= tournament_round.total_matches:
                raise BracketError(
                    f"bracket_position {item.bracket_position} out of range 1..{tournament_round.total_matches} "
                    f"for round {tournament_round.round_number}"
                )
            if item.bracket_position in seen_positions:
                raise BracketError(
                    f"Duplicate bracket_position {item.bracket_position} in round {tournament_round.round_number}"
                )
            if item.team_a_id is not None and item.team_a_id == item.team_b_id:
                raise BracketError("Team A and Team B must be different")
            seen_positions.add(item.bracket_position)

            fixture = None
            if item.fixture_id is not None:
                fixture = session.get(Fixture, item.fixture_id)
                if fixture is None or fixture.tournament_id != tournament.id:
                    raise NotFoundError(f"Fixture {item.fixture_id} not found in tournament {tournament.id}")
            else:
                fixture = _fixture_at(session, tournament_round.id, item.bracket_position)

            if fixture is None:
                fixture = Fixture(
                    sport_id=tournament.sport_id,
                    tournament_id=tournament.id,
                    tournament_round_id=tournament_round.id,
                    status="scheduled",
                )
                result.created_fixtures += 1
            else:
                result.updated_fixtures += 1

            fixture.team_a_id = item.team_a_id
            fixture.team_b_id = item.team_b_id
            fixture.scheduled_at = item.scheduled_at
            fixture.venue = item.venue
            fixture.bracket_position = item.bracket_position
            fixture.tournament_round_id = tournament_round.id
            fixture.updated_at = datetime.utcnow()
            session.add(fixture)
            session.flush()

    session.commit()
    logger.info(
        "Saved brackets for tournament %d (%d created, %d updated)",
        tournament.id,
        result.created_fixtures,
        result.updated_fixtures,
    )
    return result


def _fixture_at(session: Session, round_id: int, bracket_position: int) -> Optional[Fixture]:
    return session.exec(
        select(Fixture).where(Fixture.tournament_round_id == round_id, Fixture.bracket_position == bracket_position)
    ).first()


def reset_bracket(session: Session, tournament: Tournament) -> None:
    """Delete all fixtures and rounds of the tournament and return it to draft."""
    fixture_ids = select(Fixture.id).where(Fixture.tournament_id == tournament.id)
    session.execute(delete(MatchUpdate).where(MatchUpdate.fixture_id.in_(fixture_ids)))
    session.execute(delete(Fixture).where(Fixture.tournament_id == tournament.id))
    session.execute(delete(TournamentRound).where(TournamentRound.tournament_id == tournament.id))
    tournament.status = "draft"
    tournament.winner_id = None
    tournament.updated_at = datetime.utcnow()
    session.add(tournament)
    session.commit()
    logger.info("Reset bracket for tournament %d", tournament.id)
