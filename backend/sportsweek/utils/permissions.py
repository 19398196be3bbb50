"""
Caller resolution and role/assignment checks.

Authentication happens upstream; the platform forwards the authenticated
profile id in the X-User-Id header. This module only authorizes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set

from fastapi import Depends, Header, HTTPException
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.fixture import Fixture
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport

ROLE_ADMIN = "admin"
ROLE_MODERATOR = "moderator"
ROLE_VIEWER = "viewer"


@dataclass
class ModeratorScope:
    """What a caller may moderate. Admins are unrestricted."""

    is_admin: bool
    sport_ids: Set[int] = field(default_factory=set)
    venues: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.is_admin and not self.sport_ids


def get_current_profile(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    session: Session = Depends(get_session),
) -> Profile:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        profile_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Authentication required")

    profile = session.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=401, detail="Authentication required")
    return profile


def require_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    if profile.role != ROLE_ADMIN:
        raise HTTPException(status_code=401, detail="Unauthorized - Admin access required")
    return profile


def require_moderator(profile: Profile = Depends(get_current_profile)) -> Profile:
    if profile.role not in (ROLE_ADMIN, ROLE_MODERATOR):
        raise HTTPException(status_code=401, detail="Unauthorized - Moderator access required")
    return profile


def resolve_moderator_scope(session: Session, profile: Profile) -> ModeratorScope:
    """
    Resolve a profile's moderation scope.

    assigned_sports stores sport names; they are mapped to sport ids here.
    A moderator without assigned sports moderates nothing. An empty venue
    list means any venue.
    """
    if profile.role == ROLE_ADMIN:
        return ModeratorScope(is_admin=True)

    assigned_sports = profile.assigned_sports or []
    sport_ids: Set[int] = set()
    if assigned_sports:
        sports = session.exec(select(Sport).where(Sport.name.in_(assigned_sports))).all()
        sport_ids = {s.id for s in sports}

    return ModeratorScope(is_admin=False, sport_ids=sport_ids, venues=list(profile.assigned_venues or []))


def can_moderate_fixture(scope: ModeratorScope, fixture: Fixture) -> bool:
    if scope.is_admin:
        return True
    if fixture.sport_id not in scope.sport_ids:
        return False
    if scope.venues and fixture.venue not in scope.venues:
        return False
    return True
