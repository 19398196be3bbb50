from sqlmodel import Session

from sportsweek.models.fixture import Fixture
from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport
from sportsweek.utils.permissions import ModeratorScope, can_moderate_fixture, resolve_moderator_scope


def test_admin_scope_is_unrestricted(session: Session, admin):
    scope = resolve_moderator_scope(session, admin)
    assert scope.is_admin is True
    assert scope.is_empty is False
    assert can_moderate_fixture(scope, Fixture(sport_id=123, venue="Anywhere"))


def test_sport_names_resolve_to_ids(session: Session, football):
    cricket = Sport(name="Cricket")
    session.add(cricket)
    session.commit()
    session.refresh(cricket)
    profile = Profile(email="m@example.edu", role="moderator", assigned_sports=["Football", "Cricket", "Chess"])

    scope = resolve_moderator_scope(session, profile)
    assert scope.sport_ids == {football.id, cricket.id}
    assert can_moderate_fixture(scope, Fixture(sport_id=football.id))
    assert not can_moderate_fixture(scope, Fixture(sport_id=999))


def test_no_assigned_sports_moderates_nothing(session: Session, football):
    profile = Profile(email="m@example.edu", role="moderator", assigned_sports=[])
    scope = resolve_moderator_scope(session, profile)
    assert scope.is_empty
    assert not can_moderate_fixture(scope, Fixture(sport_id=football.id))


def test_venue_restriction():
    scope = ModeratorScope(is_admin=False, sport_ids={1}, venues=["Court 1"])
    assert can_moderate_fixture(scope, Fixture(sport_id=1, venue="Court 1"))
    assert not can_moderate_fixture(scope, Fixture(sport_id=1, venue="Court 2"))
    assert not can_moderate_fixture(scope, Fixture(sport_id=1))


def test_caller_header_is_validated(client, admin, football):
    assert client.post("/api/sports", json={"name": "Chess"}).status_code == 401
    assert client.post("/api/sports", json={"name": "Chess"}, headers={"X-User-Id": "abc"}).status_code == 401
    assert client.post("/api/sports", json={"name": "Chess"}, headers={"X-User-Id": "9999"}).status_code == 401
    assert client.post("/api/sports", json={"name": "Chess"}, headers={"X-User-Id": str(admin.id)}).status_code == 201


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
