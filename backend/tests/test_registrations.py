from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from sportsweek.models.registration_setting import RegistrationSetting
from sportsweek.models.team import Team
from sportsweek.services.registration_service import is_registration_open


@pytest.fixture
def open_football(session: Session, football) -> RegistrationSetting:
    setting = RegistrationSetting(sport_id=football.id, registration_open=True, min_team_size=2, max_team_size=4)
    session.add(setting)
    session.commit()
    session.refresh(setting)
    return setting


@pytest.fixture
def viewer_headers(viewer) -> dict:
    return {"X-User-Id": str(viewer.id)}


def _team_body(sport, **overrides):
    body = {
        "sport_id": sport.id,
        "team_name": "Mech Titans",
        "department": "MECH",
        "semester": "3",
        "gender": "male",
        "captain_name": "Arun",
        "captain_contact": "9876543210",
        "captain_email": "arun@example.edu",
        "members": ["Arun", "Bala", "Chandru"],
    }
    body.update(overrides)
    return body


def test_is_registration_open_window():
    now = datetime(2026, 10, 17, 12, 0)
    setting = RegistrationSetting(sport_id=1, registration_open=True)
    assert is_registration_open(setting, now)
    assert not is_registration_open(None, now)

    setting.registration_start = now + timedelta(hours=1)
    assert not is_registration_open(setting, now)

    setting.registration_start = now - timedelta(days=1)
    setting.registration_end = now - timedelta(hours=1)
    assert not is_registration_open(setting, now)

    setting.registration_end = None
    setting.registration_open = False
    assert not is_registration_open(setting, now)


def test_team_registration_creates_pending_team(client: TestClient, session: Session, viewer_headers, football, open_football):
    response = client.post("/api/registrations/team", json=_team_body(football), headers=viewer_headers)
    assert response.status_code == 201
    registration = response.json()
    assert registration["status"] == "pending"
    assert registration["members"] == ["Arun", "Bala", "Chandru"]

    team = session.exec(select(Team).where(Team.original_registration_id == registration["id"])).one()
    assert (team.status, team.team_type, team.name) == ("pending_approval", "student_registered", "Mech Titans")

    mine = client.get("/api/registrations/me", headers=viewer_headers).json()
    assert [r["id"] for r in mine["team"]] == [registration["id"]]
    assert mine["individual"] == []


def test_team_registration_rules(client: TestClient, session: Session, viewer_headers, football, open_football):
    too_small = client.post("/api/registrations/team", json=_team_body(football, members=["Arun"]), headers=viewer_headers)
    assert too_small.status_code == 400

    too_big = client.post(
        "/api/registrations/team", json=_team_body(football, members=["A1", "A2", "A3", "A4", "A5"]), headers=viewer_headers
    )
    assert too_big.status_code == 400

    bad_phone = client.post("/api/registrations/team", json=_team_body(football, captain_contact="123"), headers=viewer_headers)
    assert bad_phone.status_code == 400

    assert client.post("/api/registrations/team", json=_team_body(football), headers=viewer_headers).status_code == 201
    again = client.post(
        "/api/registrations/team", json=_team_body(football, team_name="Mech Titans B"), headers=viewer_headers
    )
    assert again.status_code == 409


def test_registration_closed(client: TestClient, session: Session, viewer_headers, football, open_football):
    open_football.registration_open = False
    session.add(open_football)
    session.commit()

    response = client.post("/api/registrations/team", json=_team_body(football), headers=viewer_headers)
    assert response.status_code == 400


def test_registration_requires_caller(client: TestClient, football, open_football):
    assert client.post("/api/registrations/team", json=_team_body(football)).status_code == 401


def test_individual_registration(client: TestClient, viewer_headers, football, open_football):
    body = {
        "sport_id": football.id,
        "full_name": "Divya",
        "student_id": "21CS042",
        "department": "CSE",
        "semester": "5",
        "gender": "female",
        "contact_number": "9123456780",
        "email": "divya@example.edu",
    }
    response = client.post("/api/registrations/individual", json=body, headers=viewer_headers)
    assert response.status_code == 201
    assert response.json()["status"] == "pending"

    assert client.post("/api/registrations/individual", json=body, headers=viewer_headers).status_code == 409


def test_admin_approval_activates_team(
    client: TestClient, session: Session, admin, admin_headers, viewer_headers, football, open_football
):
    registration = client.post("/api/registrations/team", json=_team_body(football), headers=viewer_headers).json()

    # Students cannot approve their own registration
    denied = client.put(
        f"/api/registrations/team/{registration['id']}", json={"status": "approved"}, headers=viewer_headers
    )
    assert denied.status_code == 403

    response = client.put(
        f"/api/registrations/team/{registration['id']}",
        json={"status": "approved", "admin_notes": "Welcome"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["registration"]["status"] == "approved"

    session.expire_all()
    team = session.exec(select(Team).where(Team.original_registration_id == registration["id"])).one()
    assert (team.status, team.approved_by) == ("active", admin.id)

    listed = client.get("/api/admin/registrations/team?status=approved", headers=admin_headers).json()
    assert [r["id"] for r in listed] == [registration["id"]]


def test_owner_can_withdraw(client: TestClient, session: Session, viewer_headers, football, open_football):
    registration = client.post("/api/registrations/team", json=_team_body(football), headers=viewer_headers).json()

    response = client.put(
        f"/api/registrations/team/{registration['id']}", json={"status": "withdrawn"}, headers=viewer_headers
    )
    assert response.status_code == 200

    session.expire_all()
    team = session.exec(select(Team).where(Team.original_registration_id == registration["id"])).one()
    assert team.status == "rejected"

    # The slot is free again once withdrawn (team name must differ, the old team row keeps its name)
    again = client.post(
        "/api/registrations/team", json=_team_body(football, team_name="Mech Titans II"), headers=viewer_headers
    )
    assert again.status_code == 201


def test_settings_update_and_bulk_toggle(client: TestClient, session: Session, admin_headers, football):
    response = client.put(
        f"/api/registration/settings/{football.id}",
        json={"min_team_size": 5, "max_team_size": 11},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert (response.json()["min_team_size"], response.json()["registration_open"]) == (5, False)

    invalid = client.put(
        f"/api/registration/settings/{football.id}", json={"min_team_size": 12}, headers=admin_headers
    )
    assert invalid.status_code == 400

    opened = client.post("/api/registration/settings/open-all", headers=admin_headers)
    assert opened.status_code == 200
    assert opened.json()["updated_count"] == 1

    settings = client.get("/api/registration/settings", headers=admin_headers).json()
    assert settings[0]["registration_open"] is True
    assert settings[0]["registration_end"] is not None

    closed = client.post("/api/registration/settings/close-all", headers=admin_headers)
    assert closed.json()["updated_count"] == 1
    assert client.get("/api/registration/settings", headers=admin_headers).json()[0]["registration_open"] is False


def test_open_all_creates_missing_settings(client: TestClient, session: Session, admin_headers, football):
    response = client.post("/api/registration/settings/open-all", headers=admin_headers)
    assert response.json()["updated_count"] == 1

    session.expire_all()
    setting = session.exec(select(RegistrationSetting).where(RegistrationSetting.sport_id == football.id)).one()
    assert is_registration_open(setting)
