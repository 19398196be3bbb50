import os

# Keep app startup (init_db) off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from sportsweek.database import get_session  # noqa: E402
from sportsweek.main import app  # noqa: E402
from sportsweek.models.profile import Profile  # noqa: E402
from sportsweek.models.sport import Sport  # noqa: E402
from sportsweek.models.team import Team  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables are created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from sportsweek.models import (  # noqa: F401
        Fixture,
        IndividualRegistration,
        MatchUpdate,
        RegistrationSetting,
        TeamRegistration,
        Tournament,
        TournamentRound,
        TournamentTeam,
    )

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Domain fixtures
# ============================================================================


def make_profile(session: Session, email: str, role: str = "viewer", **kwargs) -> Profile:
    profile = Profile(email=email, role=role, **kwargs)
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def auth(profile: Profile) -> dict:
    return {"X-User-Id": str(profile.id)}


@pytest.fixture
def admin(session: Session) -> Profile:
    return make_profile(session, "admin@example.edu", role="admin", full_name="Admin")


@pytest.fixture
def admin_headers(admin: Profile) -> dict:
    return auth(admin)


@pytest.fixture
def viewer(session: Session) -> Profile:
    return make_profile(session, "student@example.edu", full_name="Student")


@pytest.fixture
def football(session: Session) -> Sport:
    sport = Sport(name="Football", icon="football")
    session.add(sport)
    session.commit()
    session.refresh(sport)
    return sport


@pytest.fixture
def make_teams(session: Session):
    """Factory: make_teams(sport, n) -> n active teams named Team 1..n"""

    def _make(sport: Sport, count: int, prefix: str = "Team"):
        teams = [Team(sport_id=sport.id, name=f"{prefix} {i}") for i in range(1, count + 1)]
        for team in teams:
            session.add(team)
        session.commit()
        for team in teams:
            session.refresh(team)
        return teams

    return _make
