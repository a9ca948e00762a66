def test_register_login_and_me(client, make_user) -> None:
    headers, user = make_user(email="Alice@Example.com")
    assert user["email"] == "alice@example.com"
    assert user["role"] == "user"
    assert "passwordHash" not in user

    login = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret-pass"})
    assert login.status_code == 200
    assert login.json()["user"]["lastLogin"] is not None

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user["id"]


def test_duplicate_registration_is_rejected(client, make_user) -> None:
    make_user()
    response = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "alice@example.com", "password": "another-pass"},
    )
    assert response.status_code == 400


def test_invalid_email_is_rejected(client) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "Bob", "email": "not-an-email", "password": "secret-pass"},
    )
    assert response.status_code == 422


def test_wrong_password(client, make_user) -> None:
    make_user()
    response = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    assert response.status_code == 401


def test_protected_routes_need_a_valid_token(client) -> None:
    assert client.get("/api/files").status_code == 401
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert client.get("/api/charts", headers=bad).status_code == 401
