from datetime import timedelta

from config import settings
from models.log import Log
from utils.tokenJWT import create_access_token


def test_login_sets_http_only_cookie(client):
    response = client.post("/api/admin/auth/login", json={"username": "admin", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["success"] is True

    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{settings.ADMIN_COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "SameSite=strict" in cookie
    assert "Max-Age=14400" in cookie


def test_bad_credentials_are_401_and_logged(client, session_factory):
    response = client.post("/api/admin/auth/login", json={"username": "admin", "password": "wrong"})
    assert response.status_code == 401

    db = session_factory()
    try:
        entry = db.query(Log).one()
        assert (entry.action, entry.status, entry.actor) == ("LOGIN", "FAIL", "admin")
    finally:
        db.close()


def test_me_with_cookie(admin_client):
    assert admin_client.get("/api/admin/auth/me").json() == {"username": "admin", "role": "admin"}


def test_me_with_bearer_header(client):
    token = create_access_token({"sub": "admin", "role": "admin"})
    response = client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_expired_token_is_rejected(client):
    token = create_access_token({"sub": "admin", "role": "admin"}, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_non_admin_role_is_forbidden(client):
    token = create_access_token({"sub": "someone", "role": "customer"})
    response = client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_logout_clears_cookie(admin_client):
    response = admin_client.post("/api/admin/auth/logout")
    assert response.json()["success"] is True
    cookie = response.headers["set-cookie"]
    assert cookie.startswith(f"{settings.ADMIN_COOKIE_NAME}=")
    assert "Max-Age=0" in cookie


def test_root(client):
    assert client.get("/").json() == {"message": "Mebelsklad API is running"}
