# tests/test_users.py
from fastapi.testclient import TestClient

from app import config
from app.database import MemoryStore
from app.main import create_app

store = MemoryStore()
client = TestClient(create_app("user-service", store=store))

MISSING_ID = "507f1f77bcf86cd799439011"

def reset():
    store.clear()

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.json()["service"] == "user-service"

def test_list_empty():
    reset()
    r = client.get("/api/users")
    assert r.status_code == 200
    assert r.json() == []

def test_create_user():
    reset()
    r = client.post("/api/users", json={"name": "Test User", "email": "test@example.com"})
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Test User"
    assert body["email"] == "test@example.com"
    assert len(body["_id"]) == 24

def test_create_user_missing_email():
    r = client.post("/api/users", json={"name": "Test User"})
    assert r.status_code == 400
    assert r.json()["error"].startswith("User validation failed")

def test_duplicate_email_conflicts():
    reset()
    client.post("/api/users", json={"name": "A", "email": "dup@example.com"})
    r = client.post("/api/users", json={"name": "B", "email": "dup@example.com"})
    assert r.status_code == 409
    assert r.json() == {"error": "User already exists"}

def test_malformed_user_id_is_server_error():
    r = client.get("/api/users/invalid-id")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
    r = client.put("/api/users/invalid-id", json={"name": "x"})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}

def test_filter_by_email():
    reset()
    client.post("/api/users", json={"name": "A", "email": "a@example.com"})
    client.post("/api/users", json={"name": "B", "email": "b@example.com"})
    r = client.get("/api/users", params={"email": "b@example.com"})
    assert [u["name"] for u in r.json()] == ["B"]

def test_get_and_update_user():
    reset()
    created = client.post("/api/users", json={"name": "Ann", "email": "ann@example.com"}).json()
    r = client.get(f"/api/users/{created['_id']}")
    assert r.status_code == 200
    assert r.json()["email"] == "ann@example.com"

    r = client.put(f"/api/users/{created['_id']}", json={"name": "Ann Lee"})
    assert r.status_code == 200
    assert r.json()["name"] == "Ann Lee"
    assert r.json()["email"] == "ann@example.com"

def test_update_email_to_taken_address_conflicts():
    reset()
    client.post("/api/users", json={"name": "A", "email": "a@example.com"})
    b = client.post("/api/users", json={"name": "B", "email": "b@example.com"}).json()
    r = client.put(f"/api/users/{b['_id']}", json={"email": "a@example.com"})
    assert r.status_code == 409

def test_missing_user():
    r = client.get(f"/api/users/{MISSING_ID}")
    assert r.status_code == 404
    assert r.json() == {"error": "User not found"}
    r = client.put(f"/api/users/{MISSING_ID}", json={"name": "x"})
    assert r.status_code == 404
    assert r.json() == {"error": "User not found"}

def test_unmatched_route():
    r = client.get("/nonexistent")
    assert r.status_code == 404
    assert r.json() == {"error": "Route not found"}
    # products are served by the other service
    assert client.get("/api/products").status_code == 404


class RecordingStore(MemoryStore):
    def __init__(self):
        super().__init__()
        self.events = []

    async def connect(self, kinds=()):
        self.events.append(("connect", [k.collection for k in kinds]))

    async def close(self):
        self.events.append(("close", None))


def test_lifespan_connects_and_closes_store():
    recording = RecordingStore()
    with TestClient(create_app("user-service", store=recording)) as c:
        assert recording.events == [("connect", ["users"])]
        assert c.get("/health").status_code == 200
    assert recording.events[-1] == ("close", None)

def test_lifespan_builds_configured_store(monkeypatch):
    monkeypatch.setattr(config, "STORE_BACKEND", "memory")
    app = create_app("user-service")
    with TestClient(app) as c:
        assert isinstance(app.state.store, MemoryStore)
        r = c.post("/api/users", json={"name": "Lifespan", "email": "l@example.com"})
        assert r.status_code == 201
