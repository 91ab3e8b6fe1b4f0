from ivory.utils.security import decode_token


def _signup_body(**overrides):
    body = {
        "name": "Chioma Eze",
        "email": "chioma@ivorymail.com",
        "address": "4 Allen Ave, Ikeja",
        "phone": "08031112222",
        "password": "glowup1",
        "confirmPassword": "glowup1",
    }
    body.update(overrides)
    return body


def test_signup_returns_token_and_user(client):
    resp = client.post("/users/signup", json=_signup_body())

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["email"] == "chioma@ivorymail.com"
    assert body["user"]["phone"] == "08031112222"
    assert decode_token(body["token"])["userId"] == body["user"]["id"]


def test_signup_password_mismatch(client):
    resp = client.post("/users/signup", json=_signup_body(confirmPassword="other12"))

    assert resp.status_code == 400
    assert resp.json()["message"] == "Passwords do not match"


def test_signup_duplicate_email(client, user):
    resp = client.post("/users/signup", json=_signup_body(email="ADA@ivorymail.com"))

    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already registered"


def test_signup_invalid_email(client):
    resp = client.post("/users/signup", json=_signup_body(email="not-an-email"))

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_login(client, user):
    resp = client.post("/users/login", json={"email": "ada@ivorymail.com", "password": "secret123"})

    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Ada Obi"


def test_login_wrong_password(client, user):
    resp = client.post("/users/login", json={"email": "ada@ivorymail.com", "password": "nope"})

    assert resp.status_code == 401


def test_login_unknown_email(client):
    resp = client.post("/users/login", json={"email": "ghost@ivorymail.com", "password": "secret123"})

    assert resp.status_code == 404


def test_me(client, user_headers):
    resp = client.get("/users/me", headers=user_headers)

    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["address"] == "12 Marina Rd, Lagos"


def test_admin_signup_requires_code(client):
    resp = client.post(
        "/admin/signup",
        json={"name": "Ops", "email": "ops@ivorymail.com", "password": "admin123", "adminCode": "guess"},
    )

    assert resp.status_code == 403
    assert resp.json()["message"] == "Invalid Admin Code"


def test_admin_signup_and_login(client):
    resp = client.post(
        "/admin/signup",
        json={"name": "Ops", "email": "ops@ivorymail.com", "password": "admin123", "adminCode": "IVORYSECRET2025"},
    )
    assert resp.status_code == 201
    assert "adminId" in decode_token(resp.json()["token"])

    login = client.post("/admin/login", json={"email": "ops@ivorymail.com", "password": "admin123"})
    assert login.status_code == 200
    assert login.json()["admin"]["name"] == "Ops"

    bad = client.post("/admin/login", json={"email": "ops@ivorymail.com", "password": "wrong"})
    assert bad.status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
