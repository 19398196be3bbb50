"""
Moderator Management API Routes (admin)
Promote profiles to moderator, edit their sport/venue assignments, demote.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.enums import ProfileRole
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport
from sportsweek.utils.permissions import ROLE_ADMIN, ROLE_MODERATOR, ROLE_VIEWER, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()


class ModeratorAssign(BaseModel):
    profile_id: int
    assigned_sports: List[str] = []
    assigned_venues: List[str] = []
    moderator_notes: Optional[str] = None


class ModeratorUpdate(BaseModel):
    role: Optional[ProfileRole] = None
    assigned_sports: Optional[List[str]] = None
    assigned_venues: Optional[List[str]] = None
    moderator_notes: Optional[str] = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    assigned_sports: Optional[List[str]] = None
    assigned_venues: Optional[List[str]] = None
    moderator_notes: Optional[str] = None
    updated_at: datetime


def _check_sport_names(session: Session, names: List[str]) -> None:
    if not names:
        return
    known = {s.name for s in session.exec(select(Sport).where(Sport.name.in_(names))).all()}
    unknown = sorted(set(names) - known)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown sports: {', '.join(unknown)}")


def _get_profile(session: Session, profile_id: int) -> Profile:
    profile = session.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("/admin/moderators", response_model=List[ProfileResponse])
def list_moderators(
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Moderators and admins, by email"""
    return session.exec(
        select(Profile).where(Profile.role.in_([ROLE_ADMIN, ROLE_MODERATOR])).order_by(Profile.email)
    ).all()


@router.post("/admin/moderators", response_model=ProfileResponse, status_code=201)
def assign_moderator(
    request: ModeratorAssign,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Promote a viewer to moderator with sport/venue assignments"""
    profile = _get_profile(session, request.profile_id)
    if profile.role != ROLE_VIEWER:
        raise HTTPException(status_code=409, detail=f"Profile is already a {profile.role}")
    _check_sport_names(session, request.assigned_sports)

    profile.role = ROLE_MODERATOR
    profile.assigned_sports = list(request.assigned_sports)
    profile.assigned_venues = list(request.assigned_venues)
    profile.moderator_notes = request.moderator_notes
    profile.updated_at = datetime.utcnow()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info("Profile %d promoted to moderator by %d", profile.id, admin.id)
    return profile


@router.put("/admin/moderators/{profile_id}", response_model=ProfileResponse)
def update_moderator(
    profile_id: int,
    request: ModeratorUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    profile = _get_profile(session, profile_id)
    if profile.role == ROLE_VIEWER:
        raise HTTPException(status_code=400, detail="Profile is not a moderator")
    if profile.id == admin.id and request.role is not None and request.role.value != ROLE_ADMIN:
        raise HTTPException(status_code=400, detail="Admins cannot demote themselves")

    update_data = request.model_dump(exclude_unset=True)
    if update_data.get("assigned_sports"):
        _check_sport_names(session, update_data["assigned_sports"])
    if update_data.get("role") is not None:
        update_data["role"] = update_data["role"].value
    for field_name, value in update_data.items():
        setattr(profile, field_name, value)

    profile.updated_at = datetime.utcnow()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@router.delete("/admin/moderators/{profile_id}", response_model=ProfileResponse)
def remove_moderator(
    profile_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Demote a moderator back to viewer and clear assignments"""
    profile = _get_profile(session, profile_id)
    if profile.role != ROLE_MODERATOR:
        raise HTTPException(status_code=400, detail="Profile is not a moderator")

    profile.role = ROLE_VIEWER
    profile.assigned_sports = []
    profile.assigned_venues = []
    profile.updated_at = datetime.utcnow()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info("Profile %d demoted by %d", profile.id, admin.id)
    return profile
