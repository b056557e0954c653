from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, app_store, login

from decaping.core.security import create_access_token, decode_access_token


def test_login_returns_token_and_user(client, test_settings):
    resp = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})

    assert resp.status_code == 200
    body = resp.json()
    assert body["user"] == {"id": 1, "username": "admin", "name": "Administrator", "role": "admin"}
    assert "password" not in body["user"]

    claims = decode_access_token(body["token"], test_settings)
    assert claims["sub"] == "1"
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_login_opens_connection_log_and_sets_last_login(app, client):
    client.post(
        "/api/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        headers={"User-Agent": "field-tablet"},
    )

    with app_store(app) as store:
        logs = store.connection_logs.list()
        assert len(logs) == 1
        assert logs[0].user_agent == "field-tablet"
        assert logs[0].logout_time is None
        assert store.users.get(1).last_login == logs[0].timestamp


def test_bad_credentials_are_rejected_without_audit_records(app, client):
    wrong_password = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    unknown_user = client.post("/api/auth/login", json={"username": "ghost", "password": "x"})

    for resp in (wrong_password, unknown_user):
        assert resp.status_code == 401
        assert resp.json()["category"] == "authentication_error"
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    with app_store(app) as store:
        assert store.connection_logs.count() == 0
        assert store.activities.count() == 0
        assert store.users.get(1).last_login is None


def test_login_body_is_validated(client):
    resp = client.post("/api/auth/login", json={"username": "admin"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["category"] == "validation_error"
    assert {"field": "password", "message": "Field required"} in body["errors"]


def test_me_returns_caller_without_password(client, admin_headers):
    resp = client.get("/api/auth/me", headers=admin_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "admin"
    assert body["lastLogin"] is not None
    assert "password" not in body


def test_protected_routes_require_a_token(client):
    for path in ("/api/auth/me", "/api/machines", "/api/operations", "/api/activities"):
        resp = client.get(path)
        assert resp.status_code == 401
        assert resp.json()["category"] == "authentication_error"


def test_malformed_token_is_rejected(client):
    for header in ("Bearer not-a-jwt", "Basic YWRtaW46YWRtaW4xMjM="):
        resp = client.get("/api/machines", headers={"Authorization": header})
        assert resp.status_code == 401


def test_expired_token_is_rejected(client, test_settings, fake_clock):
    fake_clock.current = datetime.now(timezone.utc) - timedelta(hours=25)
    user = SimpleNamespace(id=1, username="admin", role="admin", name="Administrator")
    token = create_access_token(user, test_settings)
    fake_clock.current = None

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["category"] == "authentication_error"


def test_token_for_missing_user_is_rejected(client, test_settings):
    ghost = SimpleNamespace(id=999, username="ghost", role="supervisor", name="Ghost")
    token = create_access_token(ghost, test_settings)

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_logout_closes_the_session_once(app, client, supervisor_headers):
    resp = client.post("/api/auth/logout", headers=supervisor_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["logoutTime"] is not None
    assert body["sessionDuration"] >= 0

    again = client.post("/api/auth/logout", headers=supervisor_headers)
    assert again.status_code == 404
    assert again.json()["category"] == "not_found"

    with app_store(app) as store:
        log = store.connection_logs.get(body["id"])
        assert log.session_duration == body["sessionDuration"]


def test_logout_closes_only_the_tokens_own_session(app, client, admin_headers):
    second_headers = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)

    resp = client.post("/api/auth/logout", headers=admin_headers)
    assert resp.status_code == 200

    with app_store(app) as store:
        logs = sorted(store.connection_logs.list(), key=lambda log: log.id)
        assert logs[0].logout_time is not None
        assert logs[1].logout_time is None

    assert client.post("/api/auth/logout", headers=second_headers).status_code == 200


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_demoted_admin_loses_admin_routes_at_once(client, admin_headers):
    client.post(
        "/api/users",
        json={"username": "deputy", "password": "deputy1", "name": "Deputy", "role": "admin"},
        headers=admin_headers,
    )
    deputy = login(client, "deputy", "deputy1")
    assert client.get("/api/users", headers=deputy).status_code == 200

    client.patch("/api/users/2", json={"role": "supervisor"}, headers=admin_headers)

    assert client.get("/api/users", headers=deputy).status_code == 403
    assert client.get("/api/auth/me", headers=deputy).json()["role"] == "supervisor"


def test_deleted_user_token_stops_working(client, admin_headers, supervisor_headers):
    assert client.get("/api/machines", headers=supervisor_headers).status_code == 200

    assert client.delete("/api/users/2", headers=admin_headers).status_code == 204

    resp = client.get("/api/machines", headers=supervisor_headers)
    assert resp.status_code == 401
    assert resp.json()["category"] == "authentication_error"
