"""
Registration API Routes
Student team/individual registration, admin review, and per-sport
registration settings.
"""

from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlmodel import Session, select

from sportsweek.database import get_session
from sportsweek.models.profile import Profile
from sportsweek.models.registration import IndividualRegistration, TeamRegistration
from sportsweek.models.registration_setting import RegistrationSetting
from sportsweek.models.sport import Sport
from sportsweek.services import registration_service
from sportsweek.services.errors import ServiceError
from sportsweek.utils.permissions import ROLE_ADMIN, get_current_profile, require_admin

router = APIRouter()

PHONE_PATTERN = r"^[0-9]{10}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
Gender = Literal["male", "female", "other", "mixed"]


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamRegistrationCreate(BaseModel):
    sport_id: int
    team_name: str = Field(min_length=3)
    department: str = Field(min_length=1)
    semester: str = Field(min_length=1)
    gender: Gender
    captain_name: str = Field(min_length=2)
    captain_contact: str = Field(pattern=PHONE_PATTERN)
    captain_email: str = Field(pattern=EMAIL_PATTERN)
    members: List[str] = Field(min_length=1)

    @field_validator("members")
    @classmethod
    def validate_members(cls, v):
        if any(len(m.strip()) < 2 for m in v):
            raise ValueError("member names must be at least 2 characters")
        return [m.strip() for m in v]


class IndividualRegistrationCreate(BaseModel):
    sport_id: int
    full_name: str = Field(min_length=2)
    student_id: str = Field(min_length=1)
    department: str = Field(min_length=1)
    semester: str = Field(min_length=1)
    gender: Literal["male", "female", "other"]
    contact_number: str = Field(pattern=PHONE_PATTERN)
    email: str = Field(pattern=EMAIL_PATTERN)


class RegistrationStatusUpdate(BaseModel):
    status: Literal["approved", "rejected", "withdrawn"]
    admin_notes: Optional[str] = None


class TeamRegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    sport_id: int
    team_name: str
    department: str
    semester: str
    gender: str
    captain_name: str
    captain_contact: str
    captain_email: str
    members: List[str]
    status: str
    admin_notes: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: datetime


class IndividualRegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    sport_id: int
    full_name: str
    student_id: str
    department: str
    semester: str
    gender: str
    contact_number: str
    email: str
    status: str
    admin_notes: Optional[str] = None
    created_at: datetime


class MyRegistrationsResponse(BaseModel):
    team: List[TeamRegistrationResponse]
    individual: List[IndividualRegistrationResponse]


class RegistrationSettingUpdate(BaseModel):
    registration_open: Optional[bool] = None
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    min_team_size: Optional[int] = Field(default=None, ge=1)
    max_team_size: Optional[int] = Field(default=None, ge=1)
    allow_mixed_gender: Optional[bool] = None
    allow_mixed_department: Optional[bool] = None
    requires_approval: Optional[bool] = None
    max_registrations_per_sport: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_ranges(self):
        if self.min_team_size and self.max_team_size and self.min_team_size > self.max_team_size:
            raise ValueError("min_team_size cannot exceed max_team_size")
        if self.registration_start and self.registration_end and self.registration_start > self.registration_end:
            raise ValueError("registration_start must be before registration_end")
        return self


class RegistrationSettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sport_id: int
    registration_open: bool
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    min_team_size: Optional[int] = None
    max_team_size: Optional[int] = None
    allow_mixed_gender: bool
    allow_mixed_department: bool
    requires_approval: bool
    max_registrations_per_sport: Optional[int] = None
    updated_at: datetime


class BulkSettingsResponse(BaseModel):
    message: str
    updated_count: int


# ============================================================================
# Student Endpoints
# ============================================================================


@router.post("/registrations/team", response_model=TeamRegistrationResponse, status_code=201)
def create_team_registration(
    request: TeamRegistrationCreate,
    session: Session = Depends(get_session),
    user: Profile = Depends(get_current_profile),
):
    """Register a team; the team is created pending approval"""
    try:
        return registration_service.register_team(session, user, request.model_dump())
    except ServiceError as e:
        session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/registrations/individual", response_model=IndividualRegistrationResponse, status_code=201)
def create_individual_registration(
    request: IndividualRegistrationCreate,
    session: Session = Depends(get_session),
    user: Profile = Depends(get_current_profile),
):
    try:
        return registration_service.register_individual(session, user, request.model_dump())
    except ServiceError as e:
        session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/registrations/me", response_model=MyRegistrationsResponse)
def get_my_registrations(
    session: Session = Depends(get_session),
    user: Profile = Depends(get_current_profile),
):
    return registration_service.list_for_user(session, user.id)


@router.put("/registrations/{registration_type}/{registration_id}")
def update_registration_status(
    registration_type: Literal["team", "individual"],
    registration_id: int,
    request: RegistrationStatusUpdate,
    session: Session = Depends(get_session),
    user: Profile = Depends(get_current_profile),
):
    """
    Change a registration's status.

    approved/rejected require an admin; owners may withdraw their own.
    """
    try:
        registration = registration_service.get_registration(session, registration_type, registration_id)
        registration = registration_service.change_status(
            session,
            registration,
            request.status,
            actor=user,
            is_admin=user.role == ROLE_ADMIN,
            admin_notes=request.admin_notes,
        )
    except ServiceError as e:
        session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.message)

    response_model = TeamRegistrationResponse if registration_type == "team" else IndividualRegistrationResponse
    return {"message": "Registration updated successfully", "registration": response_model.model_validate(registration)}


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.get("/admin/registrations/team", response_model=List[TeamRegistrationResponse])
def list_team_registrations(
    sport_id: Optional[int] = None,
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    query = select(TeamRegistration)
    if sport_id is not None:
        query = query.where(TeamRegistration.sport_id == sport_id)
    if status:
        query = query.where(TeamRegistration.status == status)
    return session.exec(query.order_by(TeamRegistration.created_at.desc(), TeamRegistration.id.desc())).all()


@router.get("/admin/registrations/individual", response_model=List[IndividualRegistrationResponse])
def list_individual_registrations(
    sport_id: Optional[int] = None,
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    query = select(IndividualRegistration)
    if sport_id is not None:
        query = query.where(IndividualRegistration.sport_id == sport_id)
    if status:
        query = query.where(IndividualRegistration.status == status)
    return session.exec(
        query.order_by(IndividualRegistration.created_at.desc(), IndividualRegistration.id.desc())
    ).all()


@router.get("/registration/settings", response_model=List[RegistrationSettingResponse])
def list_registration_settings(
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    return registration_service.list_settings(session)


@router.put("/registration/settings/{sport_id}", response_model=RegistrationSettingResponse)
def update_registration_setting(
    sport_id: int,
    request: RegistrationSettingUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    """Update (or create) the registration settings of a sport"""
    if not session.get(Sport, sport_id):
        raise HTTPException(status_code=404, detail="Sport not found")

    setting = registration_service.get_setting(session, sport_id) or RegistrationSetting(sport_id=sport_id)
    for field_name, value in request.model_dump(exclude_unset=True).items():
        setattr(setting, field_name, value)
    if setting.min_team_size and setting.max_team_size and setting.min_team_size > setting.max_team_size:
        raise HTTPException(status_code=400, detail="min_team_size cannot exceed max_team_size")

    setting.updated_at = datetime.utcnow()
    session.add(setting)
    session.commit()
    session.refresh(setting)
    return setting


@router.post("/registration/settings/open-all", response_model=BulkSettingsResponse)
def open_all_registrations(
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    count = registration_service.set_all_open(session, True)
    return BulkSettingsResponse(message="All registrations opened successfully", updated_count=count)


@router.post("/registration/settings/close-all", response_model=BulkSettingsResponse)
def close_all_registrations(
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    count = registration_service.set_all_open(session, False)
    return BulkSettingsResponse(message="All registrations closed successfully", updated_count=count)
