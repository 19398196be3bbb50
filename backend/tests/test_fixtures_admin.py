from fastapi.testclient import TestClient
from sqlmodel import Session

from sportsweek.models.profile import Profile
from sportsweek.models.sport import Sport


def _fixture_body(sport, a, b, **overrides):
    body = {
        "sport_id": sport.id,
        "team_a_id": a.id,
        "team_b_id": b.id,
        "scheduled_at": "2026-11-03T10:00:00",
        "venue": "Main Ground",
    }
    body.update(overrides)
    return body


def test_fixture_lifecycle(client: TestClient, admin_headers, football, make_teams):
    a, b, c = make_teams(football, 3)

    response = client.post("/api/admin/fixtures", json=_fixture_body(football, a, b), headers=admin_headers)
    assert response.status_code == 201
    fixture = response.json()
    assert (fixture["status"], fixture["version"]) == ("scheduled", 1)

    response = client.patch(
        f"/api/admin/fixtures/{fixture['id']}", json={"team_b_id": c.id, "venue": "Court 2"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert (response.json()["team_b_id"], response.json()["venue"], response.json()["version"]) == (c.id, "Court 2", 2)

    listed = client.get(f"/api/fixtures?sport_id={football.id}&venue=Court 2").json()
    assert [f["id"] for f in listed] == [fixture["id"]]

    assert client.delete(f"/api/admin/fixtures/{fixture['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/api/fixtures/{fixture['id']}").status_code == 404


def test_fixture_requires_two_distinct_teams_of_the_sport(client: TestClient, session: Session, admin_headers, football, make_teams):
    a, b = make_teams(football, 2)
    cricket = Sport(name="Cricket")
    session.add(cricket)
    session.commit()
    session.refresh(cricket)
    (xi,) = make_teams(cricket, 1, prefix="XI")

    same = client.post("/api/admin/fixtures", json=_fixture_body(football, a, a), headers=admin_headers)
    assert same.status_code == 400

    mixed = client.post("/api/admin/fixtures", json=_fixture_body(football, a, xi), headers=admin_headers)
    assert mixed.status_code == 400

    patched = client.post("/api/admin/fixtures", json=_fixture_body(football, a, b), headers=admin_headers).json()
    response = client.patch(f"/api/admin/fixtures/{patched['id']}", json={"team_b_id": a.id}, headers=admin_headers)
    assert response.status_code == 400


def test_bracket_fixture_cannot_be_deleted_directly(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 2)
    created = client.post(
        "/api/tournaments",
        json={"name": "Cup", "sport_id": football.id, "selected_teams": [t.id for t in teams]},
        headers=admin_headers,
    ).json()
    rounds = client.post(f"/api/admin/tournaments/{created['id']}/generate-bracket", headers=admin_headers).json()["rounds"]
    fixture_id = rounds[0]["fixtures"][0]["id"]

    assert client.delete(f"/api/admin/fixtures/{fixture_id}", headers=admin_headers).status_code == 400


def test_live_fixtures_for_sport(client: TestClient, admin_headers, football, make_teams):
    a, b = make_teams(football, 2)
    fixture = client.post("/api/admin/fixtures", json=_fixture_body(football, a, b), headers=admin_headers).json()
    assert client.get(f"/api/sports/{football.id}/live").json() == []

    client.post(
        f"/api/moderator/fixtures/{fixture['id']}/update-score",
        json={"team_a_score": 0, "team_b_score": 0, "status": "live"},
        headers=admin_headers,
    )
    assert [f["id"] for f in client.get(f"/api/sports/{football.id}/live").json()] == [fixture["id"]]


def test_moderator_management(client: TestClient, session: Session, admin_headers, viewer, football):
    response = client.post(
        "/api/admin/moderators",
        json={"profile_id": viewer.id, "assigned_sports": ["Football"], "assigned_venues": ["Main Ground"]},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert (response.json()["role"], response.json()["assigned_sports"]) == ("moderator", ["Football"])

    again = client.post("/api/admin/moderators", json={"profile_id": viewer.id}, headers=admin_headers)
    assert again.status_code == 409

    listed = client.get("/api/admin/moderators", headers=admin_headers).json()
    assert {p["email"] for p in listed} == {"admin@example.edu", viewer.email}

    unknown_sport = client.put(
        f"/api/admin/moderators/{viewer.id}", json={"assigned_sports": ["Polo"]}, headers=admin_headers
    )
    assert unknown_sport.status_code == 400

    response = client.put(
        f"/api/admin/moderators/{viewer.id}", json={"assigned_venues": []}, headers=admin_headers
    )
    assert response.json()["assigned_venues"] == []

    response = client.delete(f"/api/admin/moderators/{viewer.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["role"] == "viewer"

    session.expire_all()
    assert session.get(Profile, viewer.id).assigned_sports == []
