from tests.conftest import auth_headers


def test_register_student(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "New@Test.com", "password": "secret12", "full_name": "신입생", "role": "student"},
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["access_token"]
    assert data["user"]["email"] == "new@test.com"
    assert data["user"]["role"] == "student"


def test_register_duplicate_email(client, seed_users):
    resp = client.post(
        "/api/auth/register",
        json={"email": "student@test.com", "password": "secret12", "full_name": "중복", "role": "student"},
    )
    assert resp.status_code == 409


def test_register_admin_role_not_allowed(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "boss@test.com", "password": "secret12", "full_name": "관리자", "role": "admin"},
    )
    assert resp.status_code == 422


def test_login_success(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "admin@test.com", "password": "password123"})
    assert resp.status_code == 200
    data = resp.json()
    assert "access_token" in data
    assert data["user"]["role"] == "admin"


def test_login_wrong_password(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "admin@test.com", "password": "wrong-password"})
    assert resp.status_code == 401


def test_login_inactive_user(client, db, seed_users):
    seed_users["student"].is_active = False
    db.commit()
    resp = client.post("/api/auth/login", json={"email": "student@test.com", "password": "password123"})
    assert resp.status_code == 401


def test_me_authenticated(client, seed_users):
    headers = auth_headers(client, "company@test.com")
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "company@test.com"


def test_me_unauthenticated(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code in (401, 403)  # HTTPBearer raises 401 or 403 depending on version


def test_invalid_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_logout(client, seed_users):
    headers = auth_headers(client, "admin@test.com")
    resp = client.post("/api/auth/logout", headers=headers)
    assert resp.status_code == 200
