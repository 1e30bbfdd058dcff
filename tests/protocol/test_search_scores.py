from __future__ import annotations

from fastapi.testclient import TestClient

from minimax_chess.config import Settings
from minimax_chess.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app(Settings()))


def _game_with(client: TestClient, fen: str) -> str:
    game_id = client.post("/api/games").json()["game_id"]
    r_pos = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_pos.status_code == 200
    return game_id


def test_search_endpoint_shape() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_search = client.post(f"/api/games/{game_id}/search", json={"depth": 2})
    assert r_search.status_code == 200
    data = r_search.json()
    assert {"best_move", "score", "nodes", "depth", "time_ms"} <= set(data)
    assert data["depth"] == 2
    assert data["best_move"] in client.get(f"/api/games/{game_id}/state").json()["legal_moves"]


def test_search_uses_default_depth() -> None:
    client = TestClient(create_app(Settings(default_depth=1)))
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/search")
    assert r.status_code == 200
    assert r.json()["depth"] == 1


def test_search_returns_cp_score_for_normal_position() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_search = client.post(f"/api/games/{game_id}/search", json={"depth": 1})
    assert r_search.status_code == 200
    body = r_search.json()
    assert body["score"] == {"cp": 0}


def test_search_returns_mate_score_when_mate() -> None:
    client = _client()
    # Black to move is checkmated
    game_id = _game_with(client, "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")

    r_search = client.post(f"/api/games/{game_id}/search", json={"depth": 2})
    assert r_search.status_code == 200
    body = r_search.json()
    assert body["best_move"] is None
    # Positive: White is the side delivering mate
    assert body["score"] == {"mate": 1}


def test_search_finds_mate_for_black() -> None:
    client = _client()
    game_id = _game_with(
        client, "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq g3 0 2"
    )
    body = client.post(f"/api/games/{game_id}/search", json={"depth": 2}).json()
    assert body["best_move"] == "d8h4"
    assert body["score"] == {"mate": -1}


def test_search_depth_above_limit_returns_400() -> None:
    client = TestClient(create_app(Settings(max_depth=2, default_depth=2)))
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/search", json={"depth": 3})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_search_depth_zero_is_validation_error() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{game_id}/search", json={"depth": 0})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "unprocessable_entity"


def test_search_does_not_change_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    before = client.get(f"/api/games/{game_id}/state").json()
    client.post(f"/api/games/{game_id}/search", json={"depth": 2})
    after = client.get(f"/api/games/{game_id}/state").json()
    assert after == before
