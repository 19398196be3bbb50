from fastapi.testclient import TestClient
from sqlmodel import Session, select

from sportsweek.models.fixture import Fixture
from sportsweek.models.tournament_round import TournamentRound
from sportsweek.models.tournament_team import TournamentTeam


def _payload(sport, teams, **overrides):
    payload = {
        "name": "Inter-department Cup",
        "sport_id": sport.id,
        "tournament_type": "single_elimination",
        "selected_teams": [t.id for t in teams],
    }
    payload.update(overrides)
    return payload


def test_create_tournament_seeds_and_plans_rounds(client: TestClient, session: Session, admin_headers, football, make_teams):
    teams = make_teams(football, 8)
    response = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "draft"
    assert data["tournament_type"] == "single_elimination"

    roster = session.exec(
        select(TournamentTeam).where(TournamentTeam.tournament_id == data["id"]).order_by(TournamentTeam.seed)
    ).all()
    assert [e.team_id for e in roster] == [t.id for t in teams]
    assert [e.seed for e in roster] == list(range(1, 9))

    rounds = session.exec(
        select(TournamentRound).where(TournamentRound.tournament_id == data["id"]).order_by(TournamentRound.round_number)
    ).all()
    assert [(r.round_name, r.total_matches, r.status) for r in rounds] == [
        ("Quarter-finals", 4, "pending"),
        ("Semi-finals", 2, "pending"),
        ("Final", 1, "pending"),
    ]


def test_create_requires_admin(client: TestClient, viewer, football, make_teams):
    teams = make_teams(football, 4)
    response = client.post("/api/tournaments", json=_payload(football, teams))
    assert response.status_code == 401

    response = client.post(
        "/api/tournaments", json=_payload(football, teams), headers={"X-User-Id": str(viewer.id)}
    )
    assert response.status_code == 401


def test_create_rejects_single_team(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 1)
    response = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


def test_create_rejects_unplannable_format(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 4)
    response = client.post(
        "/api/tournaments",
        json=_payload(football, teams, tournament_type="round_robin"),
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_create_rejects_duplicates_and_max_teams(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 4)
    ids = [t.id for t in teams]

    response = client.post(
        "/api/tournaments",
        json=_payload(football, teams, selected_teams=[ids[0], ids[0], ids[1]]),
        headers=admin_headers,
    )
    assert response.status_code == 400

    response = client.post(
        "/api/tournaments", json=_payload(football, teams, max_teams=2), headers=admin_headers
    )
    assert response.status_code == 400


def test_create_rejects_teams_of_other_sport(client: TestClient, session: Session, admin_headers, football, make_teams):
    from sportsweek.models.sport import Sport

    cricket = Sport(name="Cricket")
    session.add(cricket)
    session.commit()
    session.refresh(cricket)

    teams = make_teams(football, 2) + make_teams(cricket, 1, prefix="XI")
    response = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers)
    assert response.status_code == 400
    assert "sport" in response.json()["detail"]


def test_create_unknown_team_is_404(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 2)
    payload = _payload(football, teams)
    payload["selected_teams"].append(9999)
    response = client.post("/api/tournaments", json=payload, headers=admin_headers)
    assert response.status_code == 404


def test_get_tournament_detail(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 4)
    created = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers).json()

    response = client.get(f"/api/tournaments/{created['id']}")
    assert response.status_code == 200
    data = response.json()
    assert [t["team_name"] for t in data["teams"]] == ["Team 1", "Team 2", "Team 3", "Team 4"]
    assert [r["round_name"] for r in data["rounds"]] == ["Semi-finals", "Final"]
    assert all(r["fixtures"] == [] for r in data["rounds"])


def test_list_and_soft_delete(client: TestClient, session: Session, admin_headers, football, make_teams):
    teams = make_teams(football, 2)
    created = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers).json()
    client.post(f"/api/admin/tournaments/{created['id']}/generate-bracket", headers=admin_headers)

    assert [t["id"] for t in client.get("/api/tournaments").json()] == [created["id"]]

    response = client.delete(f"/api/admin/tournaments/{created['id']}", headers=admin_headers)
    assert response.status_code == 204

    assert client.get("/api/tournaments").json() == []
    assert client.get(f"/api/tournaments/{created['id']}").status_code == 404

    session.expire_all()
    fixtures = session.exec(select(Fixture).where(Fixture.tournament_id == created["id"])).all()
    assert fixtures and all(f.status == "cancelled" for f in fixtures)


def test_update_tournament(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 2)
    created = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers).json()

    response = client.put(
        f"/api/admin/tournaments/{created['id']}",
        json={"name": "Renamed Cup", "start_date": "2026-11-02"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed Cup"
    assert response.json()["start_date"] == "2026-11-02"


def test_replace_roster_reseeds(client: TestClient, session: Session, admin_headers, football, make_teams):
    teams = make_teams(football, 4)
    created = client.post(
        "/api/tournaments", json=_payload(football, teams[:2]), headers=admin_headers
    ).json()

    new_order = [teams[3].id, teams[2].id, teams[0].id]
    response = client.post(
        f"/api/admin/tournaments/{created['id']}/teams", json={"team_ids": new_order}, headers=admin_headers
    )
    assert response.status_code == 200
    assert [(e["team_id"], e["seed"]) for e in response.json()] == list(zip(new_order, [1, 2, 3]))

    response = client.get(f"/api/admin/tournaments/{created['id']}/teams", headers=admin_headers)
    assert [e["team_id"] for e in response.json()] == new_order


def test_replace_roster_replans_rounds(client: TestClient, session: Session, admin_headers, football, make_teams):
    teams = make_teams(football, 8)
    created = client.post("/api/tournaments", json=_payload(football, teams), headers=admin_headers).json()
    url = f"/api/admin/tournaments/{created['id']}/teams"

    # Shrinking the field drops the quarter-finals
    response = client.post(url, json={"team_ids": [t.id for t in teams[:4]]}, headers=admin_headers)
    assert response.status_code == 200

    rounds = client.post(f"/api/admin/tournaments/{created['id']}/generate-bracket", headers=admin_headers).json()["rounds"]
    assert [len(r["fixtures"]) for r in rounds] == [2, 1]

    stored = session.exec(
        select(TournamentRound).where(TournamentRound.tournament_id == created["id"]).order_by(TournamentRound.round_number)
    ).all()
    assert [(r.round_name, r.total_matches) for r in stored] == [("Semi-finals", 2), ("Final", 1)]


def test_replace_roster_grows_field(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 6)
    created = client.post("/api/tournaments", json=_payload(football, teams[:2]), headers=admin_headers).json()

    response = client.post(
        f"/api/admin/tournaments/{created['id']}/teams", json={"team_ids": [t.id for t in teams]}, headers=admin_headers
    )
    assert response.status_code == 200

    response = client.post(f"/api/admin/tournaments/{created['id']}/generate-bracket", headers=admin_headers)
    assert response.status_code == 200
    assert [len(r["fixtures"]) for r in response.json()["rounds"]] == [3, 2, 1]


def test_replace_roster_refused_after_generation(client: TestClient, admin_headers, football, make_teams):
    teams = make_teams(football, 5)
    created = client.post("/api/tournaments", json=_payload(football, teams[:4]), headers=admin_headers).json()
    client.post(f"/api/admin/tournaments/{created['id']}/generate-bracket", headers=admin_headers)

    url = f"/api/admin/tournaments/{created['id']}/teams"
    response = client.post(url, json={"team_ids": [t.id for t in teams]}, headers=admin_headers)
    assert response.status_code == 400

    # Roster is untouched
    assert [e["team_id"] for e in client.get(url, headers=admin_headers).json()] == [t.id for t in teams[:4]]

    # After a reset the roster can change again
    assert client.post(f"/api/admin/tournaments/{created['id']}/reset-bracket", headers=admin_headers).status_code == 200
    assert client.post(url, json={"team_ids": [t.id for t in teams]}, headers=admin_headers).status_code == 200
