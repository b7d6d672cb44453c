from tests.conftest import register


def test_register_returns_token_and_user(client):
    res = client.post("/api/auth/register", json={"fullName": "Alice A", "username": "  Alice ", "password": "secret1"})

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["error"] is None
    user = body["data"]["user"]
    assert user["username"] == "alice"
    assert user["full_name"] == "Alice A"
    assert user["role"] == "user"
    assert "password_hash" not in user
    assert body["data"]["token"]["token_type"] == "bearer"
    assert res.headers.get("X-Request-ID") == body["request_id"]


def test_register_duplicate_username(client):
    register(client, "alice")

    res = client.post("/api/auth/register", json={"fullName": "Other", "username": "ALICE", "password": "secret1"})

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "DUPLICATE_USERNAME"
    assert body["message"] == body["error"]["message"]


def test_register_requires_all_fields(client):
    res = client.post("/api/auth/register", json={"username": "bob", "password": "secret1"})

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Please provide all required fields"


def test_register_rejects_short_password(client):
    res = client.post("/api/auth/register", json={"fullName": "Bob", "username": "bob", "password": "abc"})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_login_failures_are_indistinguishable(client):
    register(client, "alice", password="secret1")

    wrong_pw = client.post("/api/auth/login", json={"username": "alice", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"username": "mallory", "password": "secret1"})

    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json()["error"] == unknown.json()["error"]
    assert wrong_pw.json()["error"]["message"] == "Invalid credentials"


def test_login_and_me(client):
    user_id, _ = register(client, "alice", password="secret1")

    res = client.post("/api/auth/login", json={"username": "Alice", "password": "secret1"})
    assert res.status_code == 200
    token = res.json()["data"]["token"]["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["id"] == user_id
    assert "password_hash" not in me.json()["data"]


def test_me_requires_valid_token(client):
    assert client.get("/api/auth/me").status_code == 401

    res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTH_ERROR"


def test_logout_is_stateless(client):
    res = client.get("/api/auth/logout")

    assert res.status_code == 200
    assert res.json()["message"] == "Logged out successfully"


def test_health(client):
    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"
