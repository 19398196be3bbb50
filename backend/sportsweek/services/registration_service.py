"""
Student registrations.

A team registration is stored together with a pending_approval team linked
back to it; approving the registration activates that team (creating it when
the link is missing). Registration is gated by the sport's
RegistrationSetting: open flag, start/end window, team size bounds and a cap
on registrations per sport.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Union

from sqlalchemy import update
from sqlmodel import Session, select

from sportsweek.models.enums import RegistrationStatus, TeamStatus, TeamType
from sportsweek.models.profile import Profile
from sportsweek.models.registration import IndividualRegistration, TeamRegistration
from sportsweek.models.registration_setting import RegistrationSetting
from sportsweek.models.sport import Sport
from sportsweek.models.team import Team
from sportsweek.services.errors import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

# Statuses that still hold a user's slot for a sport
ACTIVE_STATUSES = (RegistrationStatus.pending.value, RegistrationStatus.approved.value)

OPEN_ALL_LEAD = timedelta(hours=24)
OPEN_ALL_DURATION = timedelta(days=30)

Registration = Union[TeamRegistration, IndividualRegistration]


class RegistrationError(ServiceError):
    pass


def get_setting(session: Session, sport_id: int) -> Optional[RegistrationSetting]:
    return session.exec(select(RegistrationSetting).where(RegistrationSetting.sport_id == sport_id)).first()


def is_registration_open(setting: Optional[RegistrationSetting], now: Optional[datetime] = None) -> bool:
    """Open flag set and now inside [start, end] where those are given"""
    if setting is None or not setting.registration_open:
        return False
    now = now or datetime.utcnow()
    if setting.registration_start and now < setting.registration_start:
        return False
    if setting.registration_end and now > setting.registration_end:
        return False
    return True


def _check_can_register(session: Session, model, sport_id: int, user_id: int) -> RegistrationSetting:
    sport = session.get(Sport, sport_id)
    if not sport or not sport.is_active:
        raise RegistrationError("Invalid sport specified")

    setting = get_setting(session, sport_id)
    if not is_registration_open(setting):
        raise RegistrationError("Registration not allowed for this sport at this time")

    existing = session.exec(
        select(model).where(model.user_id == user_id, model.sport_id == sport_id, model.status.in_(ACTIVE_STATUSES))
    ).first()
    if existing:
        raise RegistrationError("You have already registered for this sport", status_code=409)

    if setting.max_registrations_per_sport:
        taken = session.exec(
            select(model).where(model.sport_id == sport_id, model.status.in_(ACTIVE_STATUSES))
        ).all()
        if len(taken) >= setting.max_registrations_per_sport:
            raise RegistrationError("Registration limit reached for this sport")
    return setting


def register_team(session: Session, user: Profile, data: dict) -> TeamRegistration:
    """
    Register a team for a sport.

    Raises:
        RegistrationError: sport closed, duplicate registration, team size
            outside the sport's bounds, or team name already taken
    """
    sport_id = data["sport_id"]
    setting = _check_can_register(session, TeamRegistration, sport_id, user.id)

    member_count = len(data["members"])
    if setting.min_team_size and member_count < setting.min_team_size:
        raise RegistrationError(f"Team must have at least {setting.min_team_size} members")
    if setting.max_team_size and member_count > setting.max_team_size:
        raise RegistrationError(f"Team cannot have more than {setting.max_team_size} members")
    if not setting.allow_mixed_gender and data["gender"] == "mixed":
        raise RegistrationError("Mixed-gender teams are not allowed for this sport")

    name_taken = session.exec(select(Team).where(Team.sport_id == sport_id, Team.name == data["team_name"])).first()
    if name_taken:
        raise RegistrationError(f"Team name '{data['team_name']}' is already taken", status_code=409)

    registration = TeamRegistration(user_id=user.id, **data)
    session.add(registration)
    session.flush()

    session.add(
        Team(
            sport_id=sport_id,
            name=registration.team_name,
            department=registration.department,
            status=TeamStatus.pending_approval.value,
            team_type=TeamType.student_registered.value,
            captain_name=registration.captain_name,
            captain_contact=registration.captain_contact,
            captain_email=registration.captain_email,
            original_registration_id=registration.id,
        )
    )
    session.commit()
    session.refresh(registration)
    logger.info("Team registration %d for sport %d by profile %d", registration.id, sport_id, user.id)
    return registration


def register_individual(session: Session, user: Profile, data: dict) -> IndividualRegistration:
    _check_can_register(session, IndividualRegistration, data["sport_id"], user.id)
    registration = IndividualRegistration(user_id=user.id, **data)
    session.add(registration)
    session.commit()
    session.refresh(registration)
    logger.info("Individual registration %d for sport %d by profile %d", registration.id, data["sport_id"], user.id)
    return registration


def get_registration(session: Session, registration_type: str, registration_id: int) -> Registration:
    model = TeamRegistration if registration_type == "team" else IndividualRegistration
    registration = session.get(model, registration_id)
    if not registration:
        raise NotFoundError("Registration not found")
    return registration


def _activate_team(session: Session, registration: TeamRegistration, admin: Profile, now: datetime) -> Team:
    team = session.exec(select(Team).where(Team.original_registration_id == registration.id)).first()
    if team is None:
        team = Team(
            sport_id=registration.sport_id,
            name=registration.team_name,
            department=registration.department,
            team_type=TeamType.student_registered.value,
            captain_name=registration.captain_name,
            captain_contact=registration.captain_contact,
            captain_email=registration.captain_email,
            original_registration_id=registration.id,
        )
    team.status = TeamStatus.active.value
    team.approved_by = admin.id
    team.approved_at = now
    session.add(team)
    return team


def change_status(
    session: Session,
    registration: Registration,
    new_status: str,
    actor: Profile,
    is_admin: bool,
    admin_notes: Optional[str] = None,
) -> Registration:
    """
    Approve, reject or withdraw a registration.

    Approval and rejection are admin-only (403 otherwise). Owners may withdraw
    their own registration. Approving a team registration activates its team.
    """
    if new_status in (RegistrationStatus.approved.value, RegistrationStatus.rejected.value) and not is_admin:
        raise RegistrationError("Admin access required for approval/rejection", status_code=403)
    if new_status == RegistrationStatus.withdrawn.value and registration.user_id != actor.id and not is_admin:
        raise RegistrationError("Access denied", status_code=403)
    if registration.status == new_status:
        raise RegistrationError(f"Registration is already {new_status}")

    now = datetime.utcnow()
    registration.status = new_status
    if admin_notes:
        registration.admin_notes = admin_notes

    if isinstance(registration, TeamRegistration):
        if new_status == RegistrationStatus.approved.value:
            registration.approved_by = actor.id
            registration.approved_at = now
            _activate_team(session, registration, actor, now)
        else:
            team = session.exec(select(Team).where(Team.original_registration_id == registration.id)).first()
            if team and team.status == TeamStatus.pending_approval.value:
                team.status = TeamStatus.rejected.value
                session.add(team)

    session.add(registration)
    session.commit()
    session.refresh(registration)
    logger.info("Registration %d set to %s by profile %d", registration.id, new_status, actor.id)
    return registration


def list_for_user(session: Session, user_id: int) -> dict:
    team = session.exec(
        select(TeamRegistration).where(TeamRegistration.user_id == user_id).order_by(TeamRegistration.created_at.desc())
    ).all()
    individual = session.exec(
        select(IndividualRegistration)
        .where(IndividualRegistration.user_id == user_id)
        .order_by(IndividualRegistration.created_at.desc())
    ).all()
    return {"team": list(team), "individual": list(individual)}


def set_all_open(session: Session, is_open: bool) -> int:
    """
    Open or close registration for every sport. Opening creates settings for
    active sports that have none and sets a window from a day ago to 30 days
    ahead.
    """
    now = datetime.utcnow()
    if is_open:
        configured = {s.sport_id for s in session.exec(select(RegistrationSetting)).all()}
        for sport in session.exec(select(Sport).where(Sport.is_active == True)).all():  # noqa: E712
            if sport.id not in configured:
                session.add(RegistrationSetting(sport_id=sport.id))
        session.flush()
        values = {
            "registration_open": True,
            "registration_start": now - OPEN_ALL_LEAD,
            "registration_end": now + OPEN_ALL_DURATION,
            "updated_at": now,
        }
    else:
        values = {"registration_open": False, "updated_at": now}

    result = session.execute(update(RegistrationSetting).values(**values))
    session.commit()
    logger.info("Registration %s for %d sports", "opened" if is_open else "closed", result.rowcount)
    return result.rowcount


def list_settings(session: Session) -> List[RegistrationSetting]:
    return list(session.exec(select(RegistrationSetting).order_by(RegistrationSetting.sport_id)).all())
