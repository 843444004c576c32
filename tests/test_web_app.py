from unittest.mock import patch

import pytest

from matchclock.services import ServiceFactory
from matchclock.ui.web_app import create_app


@pytest.fixture
def client():
    app = create_app(ServiceFactory())
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _create_game(client, game_id=1, **fields):
    response = client.post("/api/games", json={"game_id": game_id, **fields})
    assert response.status_code == 201
    return response.get_json()["clock"]


def test_create_and_read_game(client):
    clock = _create_game(client)
    assert clock["state"] == "stopped"
    assert clock["derived_remaining_seconds"] == 600
    assert clock["display"] == "10:00"

    response = client.get("/api/timer/1")
    assert response.status_code == 200
    assert "no-store" in response.headers["Cache-Control"]

    assert client.post("/api/games", json={"game_id": 1}).status_code == 409


def test_create_game_from_template(client):
    clock = _create_game(client, template="tournament-short")
    assert clock["number_of_periods"] == 2
    assert clock["period_duration"] == 420

    response = client.post("/api/games", json={"game_id": 2, "template": "nope"})
    assert response.status_code == 404


def test_create_game_with_invalid_config(client):
    response = client.post("/api/games", json={"game_id": 1, "number_of_periods": 0})
    assert response.status_code == 400
    assert response.get_json()["success"] is False

    assert client.post("/api/games", json={}).status_code == 400


def test_unknown_game_is_404(client):
    response = client.get("/api/timer/99")
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Game 99 not found"}


def test_start_pause_flow(client):
    _create_game(client)

    with patch("matchclock.services.clock_service.now_ts", return_value=1000.0):
        response = client.post("/api/timer/1/start")
    assert response.get_json()["clock"]["state"] == "running"

    with patch("matchclock.services.clock_service.now_ts", return_value=1045.0):
        response = client.post("/api/timer/1/pause")
    clock = response.get_json()["clock"]
    assert clock["state"] == "paused"
    assert clock["derived_remaining_seconds"] == 555


def test_pause_stopped_clock_conflicts(client):
    _create_game(client)
    response = client.post("/api/timer/1/pause")
    assert response.status_code == 409
    body = response.get_json()
    assert body["error"] == "Timer is not running"
    assert body["current_state"] == "stopped"


def test_next_period_requires_force(client):
    _create_game(client)
    assert client.post("/api/timer/1/next-period").status_code == 409

    response = client.post("/api/timer/1/next-period", json={"force": True})
    body = response.get_json()
    assert body["advance"]["outcome"] == "next_period"
    assert body["clock"]["current_period"] == 2


def test_next_period_closes_open_possession(client):
    _create_game(client)
    client.post("/api/possessions/1", json={"club_id": 10, "period": 1})

    body = client.post("/api/timer/1/next-period", json={"force": True}).get_json()
    assert body["closed_possession"]["result"] == "period_end"
    assert client.get("/api/possessions/1/active").status_code == 404


def test_overtime_through_api(client):
    _create_game(client, template="cup-golden-goal")
    client.put("/api/timer/1/period", json={"period": 4})
    body = client.post(
        "/api/timer/1/next-period", json={"force": True, "scores_level": True}
    ).get_json()
    assert body["advance"]["outcome"] == "overtime"
    assert body["advance"]["golden_goal"] is True
    assert body["clock"]["is_overtime"] is True
    assert body["clock"]["overtime_period_number"] == 1


def test_configure_timer(client):
    _create_game(client)
    response = client.put("/api/timer/1/config", json={"period_duration_minutes": 8})
    assert response.get_json()["clock"]["derived_remaining_seconds"] == 480

    client.post("/api/timer/1/start")
    assert client.put("/api/timer/1/config", json={"number_of_periods": 2}).status_code == 409


def test_apply_template(client):
    _create_game(client)
    response = client.post("/api/match-templates/friendly/apply/1")
    assert response.get_json()["clock"]["number_of_periods"] == 2

    templates = client.get("/api/match-templates").get_json()["templates"]
    assert "standard-league" in [t["key"] for t in templates]


def test_substitutions_and_play_time(client):
    _create_game(client)
    response = client.post("/api/game-rosters/1", json={"players": [
        {"club_id": 10, "player_id": 1, "is_starting": True},
        {"club_id": 10, "player_id": 2},
    ]})
    assert response.status_code == 201

    response = client.post("/api/substitutions/1", json={
        "club_id": 10, "player_in_id": 2, "player_out_id": 1,
        "period": 2, "time_remaining": "05:00", "reason": "fatigue",
    })
    assert response.status_code == 201
    assert response.get_json()["substitution"]["time_remaining"] == 300

    clubs = client.get("/api/substitutions/1/active-players").get_json()["clubs"]
    assert clubs["10"] == {"active": [2], "bench": [1]}

    player = client.get("/api/substitutions/1/players/2").get_json()
    assert player["is_starting"] is False
    assert player["events"][0]["type"] == "in"

    play_time = client.get("/api/play-time/1/2").get_json()["play_time"]
    assert play_time["play_time_seconds"] == 1500
    assert play_time["play_time_percent"] == 62.5

    starter = client.get("/api/play-time/1/1").get_json()["play_time"]
    assert starter["play_time_seconds"] == 900

    listed = client.get("/api/substitutions/1?club_id=10").get_json()["substitutions"]
    assert len(listed) == 1


def test_invalid_substitution_is_400(client):
    _create_game(client)
    client.post("/api/game-rosters/1", json={"club_id": 10, "player_id": 1, "is_starting": True})
    response = client.post("/api/substitutions/1", json={
        "club_id": 10, "player_in_id": 1, "player_out_id": 1, "period": 1, "time_remaining": 10,
    })
    assert response.status_code == 400


def test_fatigue_endpoint(client):
    _create_game(client)
    client.post("/api/game-rosters/1", json={"club_id": 10, "player_id": 1, "is_starting": True})
    response = client.post("/api/fatigue/1/1", json={"degradation": 12})
    body = response.get_json()["fatigue"]
    assert body["fatigue_level"] == "tired"
    assert body["play_time_percent"] == 100.0

    assert client.post("/api/fatigue/1/1", json={"shots": "many"}).status_code == 400


def test_possession_endpoints(client):
    _create_game(client)
    response = client.post("/api/possessions/1", json={"club_id": 10, "period": 1})
    assert response.status_code == 201
    possession_id = response.get_json()["possession"]["id"]

    response = client.patch(f"/api/possessions/1/{possession_id}/increment-shots")
    assert response.get_json()["possession"]["shots_taken"] == 1

    active = client.get("/api/possessions/1/active").get_json()["possession"]
    assert active["id"] == possession_id

    response = client.put(f"/api/possessions/1/{possession_id}", json={"result": "goal"})
    assert response.get_json()["possession"]["result"] == "goal"
    assert client.put(f"/api/possessions/1/{possession_id}", json={"result": "goal"}).status_code == 404
    assert client.put(f"/api/possessions/1/{possession_id}", json={}).status_code == 400

    stats = client.get("/api/possessions/1/stats").get_json()["stats"]
    assert stats[0]["possessions_with_goal"] == 1
    assert len(client.get("/api/possessions/1").get_json()["possessions"]) == 1


def test_duplicate_game_reports_conflict(client):
    _create_game(client)
    response = client.post("/api/games", json={"game_id": 1})
    assert response.status_code == 409
    assert response.get_json() == {"success": False, "error": "Game 1 already exists"}


@pytest.mark.parametrize("degradation", ["nan", "inf", "-inf"])
def test_fatigue_rejects_non_finite_degradation(client, degradation):
    _create_game(client)
    client.post("/api/game-rosters/1", json={"club_id": 10, "player_id": 1, "is_starting": True})
    response = client.post("/api/fatigue/1/1", json={"degradation": degradation})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_shot_goes_to_open_possession(client):
    _create_game(client)
    assert client.post("/api/possessions/1/shots").status_code == 404

    client.post("/api/possessions/1", json={"club_id": 10, "period": 1})
    client.post("/api/possessions/1/shots")
    response = client.post("/api/possessions/1/shots")
    assert response.status_code == 200
    assert response.get_json()["possession"]["shots_taken"] == 2

    assert client.post("/api/possessions/7/shots").status_code == 404


def test_substitution_list_filters_overtime(client):
    _create_game(client, template="cup-overtime")
    client.post("/api/game-rosters/1", json={"players": [
        {"club_id": 10, "player_id": 1, "is_starting": True},
        {"club_id": 10, "player_id": 2},
    ]})
    client.post("/api/substitutions/1", json={
        "club_id": 10, "player_in_id": 2, "player_out_id": 1,
        "period": 4, "time_remaining": 60,
    })
    client.post("/api/substitutions/1", json={
        "club_id": 10, "player_in_id": 1, "player_out_id": 2,
        "period": 4, "time_remaining": 60, "overtime_period_number": 1,
    })

    regulation = client.get("/api/substitutions/1?period=4").get_json()["substitutions"]
    assert [s["overtime_period_number"] for s in regulation] == [0]
    overtime = client.get("/api/substitutions/1?period=4&overtime_period_number=1").get_json()
    assert [s["overtime_period_number"] for s in overtime["substitutions"]] == [1]
