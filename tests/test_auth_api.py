from storefront.db.models import RefreshToken, User
from tests.conftest import PASSWORD, auth_headers

AUTH = "/api/v1/auth"


def test_register_then_login(client, db):
    r = client.post(f"{AUTH}/register", json={"name": "Ada", "email": "ada@example.com", "password": "Sup3rsecret"})
    assert r.status_code == 201, r.text
    user = r.json()["data"]
    assert user["email"] == "ada@example.com"
    assert user["role"] == "customer"
    assert "password_hash" not in user

    r = client.post(f"{AUTH}/login", json={"email": "ada@example.com", "password": "Sup3rsecret"})
    assert r.status_code == 200
    tokens = r.json()
    assert tokens["token_type"] == "bearer"

    me = client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.json()["data"]["name"] == "Ada"
    assert me.json()["data"]["store"] is None


def test_duplicate_email_conflicts(client, shopper):
    r = client.post(f"{AUTH}/register", json={"name": "Dup", "email": shopper.email, "password": "Sup3rsecret"})
    assert r.status_code == 409


def test_short_password_is_rejected(client):
    r = client.post(f"{AUTH}/register", json={"name": "Bob", "email": "bob@example.com", "password": "short"})
    assert r.status_code == 422


def test_bad_credentials(client, shopper):
    r = client.post(f"{AUTH}/login", json={"email": shopper.email, "password": "not-it"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


def test_refresh_rotates_and_revokes(client, db, shopper):
    tokens = client.post(f"{AUTH}/login", json={"email": shopper.email, "password": PASSWORD}).json()

    r = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    assert r.json()["refresh_token"] != tokens["refresh_token"]

    # the used token cannot be replayed
    r = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 401
    assert db.query(RefreshToken).filter(RefreshToken.revoked.is_(True)).count() == 1


def test_logout_revokes_refresh_token(client, shopper):
    tokens = client.post(f"{AUTH}/login", json={"email": shopper.email, "password": PASSWORD}).json()
    assert client.post(f"{AUTH}/logout", json={"refresh_token": tokens["refresh_token"]}).status_code == 200
    r = client.post(f"{AUTH}/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 401


def test_access_token_is_not_a_refresh_token(client, shopper):
    access = auth_headers(shopper)["Authorization"].split(" ", 1)[1]
    r = client.post(f"{AUTH}/refresh", json={"refresh_token": access})
    assert r.status_code == 401


def test_me_rejects_garbage_token(client):
    r = client.get(f"{AUTH}/me", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json()["status"] == "fail"


def test_me_for_deleted_user(client, db, shopper):
    headers = auth_headers(shopper)
    db.delete(db.get(User, shopper.id)); db.commit()
    assert client.get(f"{AUTH}/me", headers=headers).status_code == 401


def test_refresh_token_cannot_be_used_as_bearer(client, shopper):
    tokens = client.post(f"{AUTH}/login", json={"email": shopper.email, "password": PASSWORD}).json()
    r = client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid access token"


def test_expired_access_token(client, shopper, monkeypatch):
    from storefront.core.config import settings
    monkeypatch.setattr(settings, "ACCESS_TOKEN_EXPIRES_SECONDS", -30)
    r = client.get(f"{AUTH}/me", headers=auth_headers(shopper))
    assert r.status_code == 401
    assert r.json()["message"] == "Your token has expired. Please log in again"
