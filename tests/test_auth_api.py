def _register(client, email: str, password: str = "secret-123", **extra):
    return client.post("/api/v1/auth/register", json={"email": email, "password": password, **extra})


def _login(client, email: str, password: str = "secret-123"):
    return client.post("/api/v1/auth/login", data={"username": email, "password": password})


def test_register_login_me(client):
    r = _register(client, "carol@example.com", name="Carol")
    assert r.status_code == 201
    user = r.json()
    assert user["email"] == "carol@example.com"
    assert user["name"] == "Carol"
    assert "password" not in user and "password_hash" not in user

    r_login = _login(client, "carol@example.com")
    assert r_login.status_code == 200
    token = r_login.json()["access_token"]
    assert r_login.json()["token_type"] == "bearer"

    r_me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r_me.status_code == 200
    assert r_me.json()["id"] == user["id"]


def test_register_duplicate_email(client):
    assert _register(client, "dup@example.com").status_code == 201
    r = _register(client, "dup@example.com")
    assert r.status_code == 400
    assert r.json()["error"] == "Email already registered"


def test_login_wrong_password(client):
    _register(client, "dave@example.com")
    r = _login(client, "dave@example.com", password="wrong")
    assert r.status_code == 401


def test_bad_token_is_rejected(client):
    r = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.headers.get("WWW-Authenticate") == "Bearer"


def test_logout_revokes_token(client, login):
    headers = login("erin@example.com")
    assert client.get("/api/v1/tasks/", headers=headers).status_code == 200

    r = client.post("/api/v1/auth/logout", headers=headers)
    assert r.status_code == 204

    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401
    assert client.get("/api/v1/tasks/", headers=headers).status_code == 401

    # a fresh login still works
    r_login = _login(client, "erin@example.com")
    fresh = {"Authorization": f"Bearer {r_login.json()['access_token']}"}
    assert client.get("/api/v1/auth/me", headers=fresh).status_code == 200
