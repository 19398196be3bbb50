from fastapi.testclient import TestClient
from sqlmodel import Session

from sportsweek.models.fixture import Fixture
from sportsweek.models.registration import TeamRegistration
from sportsweek.models.team import Team


def test_sport_crud(client: TestClient, admin_headers):
    response = client.post("/api/sports", json={"name": " Basketball ", "icon": "ball"}, headers=admin_headers)
    assert response.status_code == 201
    sport = response.json()
    assert sport["name"] == "Basketball"

    duplicate = client.post("/api/sports", json={"name": "Basketball"}, headers=admin_headers)
    assert duplicate.status_code == 409

    response = client.put(f"/api/sports/{sport['id']}", json={"is_active": False}, headers=admin_headers)
    assert response.json()["is_active"] is False
    assert client.get("/api/sports?active_only=true").json() == []

    assert client.delete(f"/api/sports/{sport['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/sports/{sport['id']}").status_code == 404


def test_sport_in_use_cannot_be_deleted(client: TestClient, admin_headers, football, make_teams):
    make_teams(football, 1)
    assert client.delete(f"/api/sports/{football.id}", headers=admin_headers).status_code == 409


def test_team_crud(client: TestClient, admin_headers, football):
    response = client.post(
        "/api/teams", json={"sport_id": football.id, "name": "CSE Strikers", "department": "CSE"}, headers=admin_headers
    )
    assert response.status_code == 201
    team = response.json()
    assert (team["status"], team["team_type"]) == ("active", "admin_created")

    duplicate = client.post("/api/teams", json={"sport_id": football.id, "name": "CSE Strikers"}, headers=admin_headers)
    assert duplicate.status_code == 409

    response = client.patch(f"/api/teams/{team['id']}", json={"captain_name": "Asha"}, headers=admin_headers)
    assert response.json()["captain_name"] == "Asha"

    assert [t["name"] for t in client.get(f"/api/teams?sport_id={football.id}").json()] == ["CSE Strikers"]

    assert client.delete(f"/api/teams/{team['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/teams/{team['id']}").status_code == 404


def test_team_create_unknown_sport(client: TestClient, admin_headers):
    response = client.post("/api/teams", json={"sport_id": 999, "name": "Ghosts"}, headers=admin_headers)
    assert response.status_code == 404


def test_scheduled_team_cannot_be_deleted(client: TestClient, session: Session, admin_headers, football, make_teams):
    a, b = make_teams(football, 2)
    session.add(Fixture(sport_id=football.id, team_a_id=a.id, team_b_id=b.id))
    session.commit()
    assert client.delete(f"/api/teams/{a.id}", headers=admin_headers).status_code == 409


def _pending_team(session: Session, sport, owner) -> Team:
    registration = TeamRegistration(
        user_id=owner.id,
        sport_id=sport.id,
        team_name="EEE Eagles",
        department="EEE",
        semester="5",
        gender="male",
        captain_name="Ravi",
        captain_contact="9876543210",
        captain_email="ravi@example.edu",
        members=["Ravi", "Kiran"],
    )
    session.add(registration)
    session.commit()
    session.refresh(registration)
    team = Team(
        sport_id=sport.id,
        name="EEE Eagles",
        status="pending_approval",
        team_type="student_registered",
        original_registration_id=registration.id,
    )
    session.add(team)
    session.commit()
    session.refresh(team)
    return team


def test_approve_student_team(client: TestClient, session: Session, admin, admin_headers, viewer, football):
    team = _pending_team(session, football, viewer)

    response = client.post(f"/api/teams/{team.id}/approve", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "active"
    assert response.json()["approved_by"] == admin.id

    session.expire_all()
    registration = session.get(TeamRegistration, team.original_registration_id)
    assert registration.status == "approved"

    again = client.post(f"/api/teams/{team.id}/approve", headers=admin_headers)
    assert again.status_code == 400


def test_reject_student_team(client: TestClient, session: Session, admin_headers, viewer, football):
    team = _pending_team(session, football, viewer)

    response = client.post(f"/api/teams/{team.id}/reject", json={"reason": "Incomplete roster"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"

    session.expire_all()
    registration = session.get(TeamRegistration, team.original_registration_id)
    assert (registration.status, registration.admin_notes) == ("rejected", "Incomplete roster")
