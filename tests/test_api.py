from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client(registry):
    app.state.registry = registry
    yield TestClient(app)
    app.state.registry = None


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"

    client.get("/api/user/7")
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["players"] == 1


def test_profile_created_on_first_visit(client):
    resp = client.get("/api/user/42", params={"username": "Taras"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["player"]["username"] == "Taras"
    assert body["player"]["currencies"]["coins"] == 100
    assert body["class_name"] == "🚶 Wanderer"
    assert body["xp_required"] == 100


def test_change_class_not_unlocked(client):
    client.get("/api/user/42")

    resp = client.post("/api/user/change-class", json={"user_id": 42, "new_class": "mage"})

    assert resp.status_code == 409
    assert resp.json()["detail"] == "CLASS_CHANGE_UNAVAILABLE"


def test_auto_battle(client):
    client.get("/api/user/42")

    resp = client.post("/api/battle/start", json={"user_id": 42, "difficulty": "medium"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["battle"]["status"] == "finished"
    assert body["player"]["energy"] == 9
    assert body["rewards"]["coins"] == 20


def test_auto_battle_errors(client):
    resp = client.post("/api/battle/start", json={"user_id": "nobody"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "PLAYER_NOT_FOUND"

    client.get("/api/user/42")
    resp = client.post("/api/battle/start", json={"user_id": "42", "difficulty": "insane"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "INVALID_DIFFICULTY"


def test_interactive_battle_flow(client):
    client.get("/api/user/42")

    battle = client.post("/api/battle/interactive/start", json={"user_id": 42}).json()["battle"]
    move = client.post("/api/battle/move", json={"battle_id": battle["id"], "move": "defend"})
    assert move.status_code == 200
    assert move.json()["round_result"]["player_move"] == "defend"

    bad = client.post("/api/battle/move", json={"battle_id": battle["id"], "move": "dance"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "INVALID_MOVE"

    done = client.post("/api/battle/finish", json={"user_id": 42, "battle_id": battle["id"]})
    assert done.status_code == 200
    assert done.json()["battle"]["result"]["forfeit"] is True

    again = client.post("/api/battle/finish", json={"user_id": 42, "battle_id": battle["id"]})
    assert again.status_code == 409
    assert again.json()["detail"] == "BATTLE_ALREADY_FINISHED"

    assert client.get(f"/api/battle/{battle['id']}").json()["settled"] is True
    assert client.get("/api/battle/999").status_code == 404


def test_shop(client):
    items = client.get("/api/shop/items").json()["items"]
    assert {i["id"] for i in items} == {"ticket_pack", "energy_refill", "attack_boost"}

    client.get("/api/user/42")
    resp = client.post("/api/shop/purchase", json={"user_id": 42, "item_id": "energy_refill"})
    assert resp.status_code == 200
    assert resp.json()["player"]["currencies"]["coins"] == 0

    resp = client.post("/api/shop/purchase", json={"user_id": 42, "item_id": "energy_refill"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "NOT_ENOUGH_FUNDS"


def test_market(client):
    client.get("/api/user/42")
    bought = client.post("/api/shop/purchase", json={"user_id": 42, "item_id": "energy_refill"}).json()
    uid = next(i["uid"] for i in bought["player"]["inventory"]["items"] if i["kind"] == "boost")

    bad = client.post("/api/market/list", json={"user_id": 42, "item_uid": uid, "price": -5})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "INVALID_PRICE"

    listed = client.post("/api/market/list", json={"user_id": 42, "item_uid": uid, "price": 60})
    assert listed.status_code == 200
    listing_id = listed.json()["listing"]["id"]
    assert [l["id"] for l in client.get("/api/market/listings").json()["listings"]] == [listing_id]

    own = client.post("/api/market/buy", json={"user_id": 42, "listing_id": listing_id})
    assert own.status_code == 409
    assert own.json()["detail"] == "OWN_LISTING"

    client.get("/api/user/43")
    sale = client.post("/api/market/buy", json={"user_id": 43, "listing_id": listing_id})
    assert sale.status_code == 200
    assert sale.json()["commission"] == 3
    assert sale.json()["player"]["currencies"]["coins"] == 40

    quick = client.post("/api/market/quick-sell", json={"user_id": 43, "item_uid": uid})
    assert quick.status_code == 200
    assert quick.json()["credited"] == 80


def test_leaderboard(client):
    for uid in ("1", "2", "3"):
        client.get(f"/api/user/{uid}")

    rows = client.get("/api/leaderboard", params={"limit": 2}).json()["rows"]
    assert [r["rank"] for r in rows] == [1, 2]
    assert rows[0]["username"] == "Player1"

    assert client.get("/api/leaderboard", params={"limit": 0}).status_code == 422
