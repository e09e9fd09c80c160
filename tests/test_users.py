# tests/test_users.py
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from chatrelay.app.models.user import User


def test_root_greeting(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Hello World!"


def test_create_user_assigns_distinct_ids(client, make_user):
    first = make_user()
    second = make_user(name="Bo", username="bo2")
    assert first["id"] != second["id"]
    assert first["status"] == "offline"
    assert first["messages"] == []
    assert "password" not in first
    assert "hashed_password" not in first


def test_create_user_optional_profile_fields(make_user):
    user = make_user(email="ana@example.com", age=31)
    assert user["email"] == "ana@example.com"
    assert user["age"] == 31


def test_list_users_in_storage_order(client, make_user):
    make_user()
    make_user(name="Bo", username="bo2")
    resp = client.get("/users")
    assert resp.status_code == 200
    assert [u["username"] for u in resp.json()] == ["ana1", "bo2"]


def test_duplicate_username_rejected_without_mutation(client, make_user):
    make_user()
    resp = client.post("/users", json={"name": "Other", "username": "ana1", "password": "y"})
    assert resp.status_code == 400
    assert "already exists" in resp.json()["detail"]
    assert len(client.get("/users").json()) == 1


def test_duplicate_email_rejected(client, make_user):
    make_user(email="ana@example.com")
    resp = client.post(
        "/users",
        json={"name": "Bo", "username": "bo2", "password": "y", "email": "ana@example.com"},
    )
    assert resp.status_code == 400
    assert len(client.get("/users").json()) == 1


def test_missing_field_is_400(client):
    resp = client.post("/users", json={"username": "ana1", "password": "x"})
    assert resp.status_code == 400


def test_blank_field_is_400(client):
    resp = client.post("/users", json={"name": "   ", "username": "ana1", "password": "x"})
    assert resp.status_code == 400
    assert "name" in resp.json()["detail"]


def test_password_is_stored_hashed(client, make_user, db):
    created = make_user(password="s3cret")
    stored = db.query(User).filter(User.id == created["id"]).one()
    assert stored.hashed_password != "s3cret"
    assert stored.hashed_password.startswith("$pbkdf2-sha256$")


def test_login(client, make_user):
    created = make_user(password="s3cret", email="ana@example.com")

    resp = client.post("/users/login", json={"username": "ana1", "password": "s3cret"})
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]

    by_email = client.post("/users/login", json={"username": "ana@example.com", "password": "s3cret"})
    assert by_email.status_code == 200


def test_login_rejects_bad_credentials(client, make_user):
    make_user(password="s3cret")
    assert client.post("/users/login", json={"username": "ana1", "password": "nope"}).status_code == 401
    assert client.post("/users/login", json={"username": "ghost", "password": "s3cret"}).status_code == 401


def test_read_user(client, make_user):
    created = make_user()
    assert client.get(f"/users/{created['id']}").json()["username"] == "ana1"
    assert client.get("/users/999").status_code == 404


def test_update_status(client, make_user):
    created = make_user()
    resp = client.put(f"/users/{created['id']}/status", json={"status": "online"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "online"

    resp = client.put(f"/users/{created['id']}/status", json={"status": "offline"})
    assert resp.json()["status"] == "offline"


def test_invalid_status_leaves_user_unchanged(client, make_user):
    created = make_user()
    resp = client.put(f"/users/{created['id']}/status", json={"status": "away"})
    assert resp.status_code == 400
    assert client.get(f"/users/{created['id']}").json()["status"] == "offline"


def test_update_status_unknown_user(client):
    resp = client.put("/users/42/status", json={"status": "online"})
    assert resp.status_code == 404


def test_cors_allows_listed_origin_only(client):
    allowed = client.get("/users", headers={"Origin": "http://localhost:3000"})
    assert allowed.headers.get("access-control-allow-origin") == "http://localhost:3000"

    denied = client.get("/users", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in denied.headers



def _operational_error(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("unable to open database file"))


def test_store_outage_maps_to_500(client, make_user, monkeypatch):
    make_user()
    monkeypatch.setattr(Session, "query", _operational_error)

    resp = client.get("/users")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Error fetching users"


def test_unhandled_store_error_maps_to_500(client, make_user, monkeypatch):
    created = make_user()
    monkeypatch.setattr(Session, "commit", _operational_error)

    resp = client.put(f"/users/{created['id']}/status", json={"status": "online"})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Database error"

    monkeypatch.undo()
    assert client.get(f"/users/{created['id']}").json()["status"] == "offline"


def test_username_may_not_reuse_an_existing_email(client, make_user):
    make_user(email="ana@example.com")
    resp = client.post(
        "/users",
        json={"name": "Bo", "username": "ana@example.com", "password": "y"},
    )
    assert resp.status_code == 400
    assert len(client.get("/users").json()) == 1


def test_email_may_not_reuse_an_existing_username(client, make_user):
    make_user()
    resp = client.post(
        "/users",
        json={"name": "Bo", "username": "bo2", "password": "y", "email": "ana1"},
    )
    assert resp.status_code == 400
    assert len(client.get("/users").json()) == 1
