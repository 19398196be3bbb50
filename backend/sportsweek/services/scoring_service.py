"""
Live scoring for moderators.

Score updates go through a compare-and-swap on Fixture.version, record an
audit row plus auto-generated incidents, and hand completed bracket fixtures
to the advancement service.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from sportsweek.models.fixture import Fixture
from sportsweek.models.match_update import MatchUpdate
from sportsweek.models.profile import Profile
from sportsweek.models.team import Team
from sportsweek.services.advancement_service import AdvancementResult, advance_winner, get_next_fixture
from sportsweek.services.bracket_planner import SIDE_A, SIDE_B, decide_winner
from sportsweek.services.errors import ServiceError
from sportsweek.utils.permissions import can_moderate_fixture, resolve_moderator_scope
from sportsweek.utils.version_guards import compare_and_swap_fixture, get_fixture_or_404, require_fixture_version

logger = logging.getLogger(__name__)

STATUS_SCHEDULED = "scheduled"
STATUS_LIVE = "live"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

# "finished" is accepted from older clients and stored as "completed"
STATUS_ALIASES = {"finished": STATUS_COMPLETED}
VALID_STATUSES = (STATUS_SCHEDULED, STATUS_LIVE, STATUS_COMPLETED, STATUS_CANCELLED)


class ScoreUpdateError(ServiceError):
    pass


@dataclass
class ScoreUpdate:
    team_a_score: int
    team_b_score: int
    status: str
    expected_version: Optional[int] = None
    note: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


@dataclass
class ScoreUpdateResult:
    fixture: Fixture
    advancement: Optional[AdvancementResult] = None
    incidents: List[str] = field(default_factory=list)


def normalize_status(status: str) -> str:
    normalized = STATUS_ALIASES.get(status, status)
    if normalized not in VALID_STATUSES:
        raise ScoreUpdateError(f"Invalid status: {status}", code="INVALID_STATUS")
    return normalized


def status_message(prev_status: Optional[str], new_status: str) -> str:
    if new_status == STATUS_LIVE:
        return "Match started" if prev_status == STATUS_SCHEDULED else "Match is live"
    if new_status == STATUS_COMPLETED:
        return "Match completed"
    if new_status == STATUS_CANCELLED:
        return "Match cancelled"
    if new_status == STATUS_SCHEDULED:
        return "Match scheduled"
    return f"Status changed to {new_status}"


def _points(delta: int) -> str:
    return "1 point" if delta == 1 else f"{delta} points"


def build_incident_notes(
    prev_a: Optional[int],
    prev_b: Optional[int],
    prev_status: Optional[str],
    new_a: int,
    new_b: int,
    new_status: str,
    name_a: str = "Team A",
    name_b: str = "Team B",
) -> List[Dict[str, str]]:
    """Auto-incidents for a score update: score increases, status change, and
    on completion a winner line and a result line."""
    rows: List[Dict[str, str]] = []
    delta_a = max(0, new_a - (prev_a or 0))
    delta_b = max(0, new_b - (prev_b or 0))
    if delta_a > 0:
        rows.append({"change_type": "score_increase", "note": f"{name_a} gained {_points(delta_a)}"})
    if delta_b > 0:
        rows.append({"change_type": "score_increase", "note": f"{name_b} gained {_points(delta_b)}"})

    if prev_status != new_status:
        rows.append({"change_type": "status_change", "note": status_message(prev_status, new_status)})
        if new_status == STATUS_COMPLETED:
            if new_a > new_b:
                rows.append({"change_type": "winner", "note": f"Winner: {name_a}"})
                result = f"{name_a} beat {name_b} {new_a}-{new_b}"
            elif new_b > new_a:
                rows.append({"change_type": "winner", "note": f"Winner: {name_b}"})
                result = f"{name_b} beat {name_a} {new_b}-{new_a}"
            else:
                result = f"Match drawn {new_a}-{new_b}"
            rows.append({"change_type": "result", "note": result})
    return rows


def _team_name(session: Session, team_id: Optional[int], fallback: str) -> str:
    if team_id is None:
        return fallback
    team = session.get(Team, team_id)
    return team.name if team else fallback


def _ensure_can_moderate(session: Session, fixture: Fixture, actor: Profile) -> None:
    scope = resolve_moderator_scope(session, actor)
    if not can_moderate_fixture(scope, fixture):
        raise ScoreUpdateError(
            "You are not authorized to update this fixture",
            status_code=403,
            code="PERMISSION_DENIED",
            context={"sport_id": fixture.sport_id, "venue": fixture.venue},
        )


def _ensure_not_advanced(session: Session, fixture: Fixture) -> None:
    # A completed bracket result is frozen once its winner has played on
    if fixture.tournament_round_id is None or fixture.status != STATUS_COMPLETED:
        return
    next_fixture = get_next_fixture(session, fixture)
    if next_fixture is not None and next_fixture.status in (STATUS_LIVE, STATUS_COMPLETED):
        raise ScoreUpdateError(
            "Winner has already played in the next round",
            code="ALREADY_ADVANCED",
            context={"next_fixture_id": next_fixture.id},
        )


def update_score(session: Session, fixture_id: int, update: ScoreUpdate, actor: Profile) -> ScoreUpdateResult:
    """
    Apply a moderator score update.

    Raises:
        NotFoundError: fixture missing
        ScoreUpdateError: 403 outside the moderator's assignments, 400 for a
            drawn bracket fixture or a winner slot that is still TBD, or a
            completed bracket fixture whose next-round match has started
        ConflictError: expected_version is stale or a concurrent write won
    """
    fixture = get_fixture_or_404(session, fixture_id)
    _ensure_can_moderate(session, fixture, actor)
    require_fixture_version(fixture, update.expected_version)
    _ensure_not_advanced(session, fixture)

    new_status = normalize_status(update.status)
    prev_a, prev_b, prev_status = fixture.team_a_score, fixture.team_b_score, fixture.status
    is_bracket = fixture.tournament_round_id is not None

    winner_id = None
    if new_status == STATUS_COMPLETED:
        side = decide_winner(update.team_a_score, update.team_b_score)
        if side == SIDE_A:
            winner_id = fixture.team_a_id
        elif side == SIDE_B:
            winner_id = fixture.team_b_id
        if is_bracket and side is None:
            raise ScoreUpdateError("Bracket matches cannot end in a draw", code="INVALID_SCORE")
        if is_bracket and winner_id is None:
            raise ScoreUpdateError("Winning team slot is not populated yet", code="INVALID_SCORE")

    values: Dict[str, Any] = {
        "team_a_score": update.team_a_score,
        "team_b_score": update.team_b_score,
        "status": new_status,
        "winner_id": winner_id,
        "updated_by": actor.id,
    }
    if update.extra is not None:
        values["extra"] = {**(fixture.extra or {}), **update.extra}

    fixture = compare_and_swap_fixture(session, fixture, values)

    session.add(
        MatchUpdate(
            fixture_id=fixture.id,
            update_type="score",
            note=update.note,
            prev_team_a_score=prev_a,
            prev_team_b_score=prev_b,
            prev_status=prev_status,
            new_team_a_score=update.team_a_score,
            new_team_b_score=update.team_b_score,
            new_status=new_status,
            created_by=actor.id,
        )
    )
    incidents = build_incident_notes(
        prev_a,
        prev_b,
        prev_status,
        update.team_a_score,
        update.team_b_score,
        new_status,
        _team_name(session, fixture.team_a_id, "Team A"),
        _team_name(session, fixture.team_b_id, "Team B"),
    )
    for row in incidents:
        session.add(MatchUpdate(fixture_id=fixture.id, update_type="incident", created_by=actor.id, **row))
    session.commit()
    session.refresh(fixture)

    logger.info(
        "Fixture %d score %d-%d (%s) by profile %d, version %d",
        fixture.id,
        update.team_a_score,
        update.team_b_score,
        new_status,
        actor.id,
        fixture.version,
    )

    advancement = None
    if is_bracket and new_status == STATUS_COMPLETED:
        advancement = advance_winner(session, fixture)
        session.refresh(fixture)

    return ScoreUpdateResult(fixture=fixture, advancement=advancement, incidents=[r["note"] for r in incidents])


def set_winner(session: Session, fixture: Fixture, winner_id: int, actor: Profile) -> AdvancementResult:
    """Mark a fixture completed with an explicit winner and advance it."""
    if winner_id not in (fixture.team_a_id, fixture.team_b_id):
        raise ScoreUpdateError("Winner must be one of the fixture's teams")
    _ensure_can_moderate(session, fixture, actor)
    _ensure_not_advanced(session, fixture)

    prev_status = fixture.status
    fixture = compare_and_swap_fixture(
        session, fixture, {"status": STATUS_COMPLETED, "winner_id": winner_id, "updated_by": actor.id}
    )
    session.add(
        MatchUpdate(
            fixture_id=fixture.id,
            update_type="incident",
            change_type="winner",
            note=f"Winner: {_team_name(session, winner_id, 'Team')}",
            prev_status=prev_status,
            new_status=STATUS_COMPLETED,
            created_by=actor.id,
        )
    )
    session.commit()
    session.refresh(fixture)
    return advance_winner(session, fixture)


def undo_last_update(session: Session, fixture_id: int, actor: Profile) -> Fixture:
    """
    Revert the latest non-reverted score update of a fixture to the values it
    replaced. Completed bracket fixtures whose winner already advanced cannot
    be reverted.
    """
    fixture = get_fixture_or_404(session, fixture_id)
    _ensure_can_moderate(session, fixture, actor)

    last = session.exec(
        select(MatchUpdate)
        .where(
            MatchUpdate.fixture_id == fixture_id,
            MatchUpdate.update_type == "score",
            MatchUpdate.reverted == False,  # noqa: E712
        )
        .order_by(MatchUpdate.created_at.desc(), MatchUpdate.id.desc())
    ).first()
    if last is None:
        raise ScoreUpdateError("No update to undo", code="NOTHING_TO_UNDO")
    if fixture.tournament_round_id is not None and fixture.status == STATUS_COMPLETED:
        raise ScoreUpdateError("Cannot undo a completed bracket match", code="ALREADY_ADVANCED")

    prev_status = last.prev_status or STATUS_SCHEDULED
    winner_id = None
    if prev_status == STATUS_COMPLETED:
        side = decide_winner(last.prev_team_a_score, last.prev_team_b_score)
        winner_id = fixture.team_a_id if side == SIDE_A else fixture.team_b_id if side == SIDE_B else None

    fixture = compare_and_swap_fixture(
        session,
        fixture,
        {
            "team_a_score": last.prev_team_a_score,
            "team_b_score": last.prev_team_b_score,
            "status": prev_status,
            "winner_id": winner_id,
            "updated_by": actor.id,
        },
    )
    last.reverted = True
    session.add(last)
    session.add(
        MatchUpdate(
            fixture_id=fixture.id,
            update_type="incident",
            change_type="undo",
            note="Last update reverted",
            prev_team_a_score=last.new_team_a_score,
            prev_team_b_score=last.new_team_b_score,
            prev_status=last.new_status,
            new_team_a_score=last.prev_team_a_score,
            new_team_b_score=last.prev_team_b_score,
            new_status=prev_status,
            created_by=actor.id,
        )
    )
    session.commit()
    session.refresh(fixture)
    logger.info("Fixture %d: reverted update %d by profile %d", fixture.id, last.id, actor.id)
    return fixture


def list_incidents(session: Session, fixture_id: int, limit: int = 20, offset: int = 0) -> List[MatchUpdate]:
    return list(
        session.exec(
            select(MatchUpdate)
            .where(MatchUpdate.fixture_id == fixture_id)
            .order_by(MatchUpdate.created_at.desc(), MatchUpdate.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
    )


def post_incident(
    session: Session,
    fixture_id: int,
    actor: Profile,
    note: Optional[str] = None,
    incident_type: Optional[str] = None,
    media_url: Optional[str] = None,
) -> MatchUpdate:
    if not note and not incident_type:
        raise ScoreUpdateError("Missing incident content")
    fixture = get_fixture_or_404(session, fixture_id)
    _ensure_can_moderate(session, fixture, actor)

    incident = MatchUpdate(
        fixture_id=fixture_id,
        update_type="incident",
        change_type="manual",
        note=note or incident_type,
        media_url=media_url,
        created_by=actor.id,
    )
    session.add(incident)
    session.commit()
    session.refresh(incident)
    return incident
