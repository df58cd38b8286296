import asyncio
from datetime import datetime, timedelta, timezone

import jwt

from app.core.config import settings
from app.core.security import create_access_token, verify_password


def _stored_user(db, email="jane@example.com"):
    return asyncio.run(db["users"].find_one({"email": email}))


# ---------------------------------------------------------------- signup

def test_signup_creates_user(api, db):
    response = api.signup()

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "jane@example.com"
    assert user["subscription"] == "starter"
    assert user["avatarURL"].startswith("https://www.gravatar.com/avatar/")
    assert "s=250" in user["avatarURL"]
    assert "d=retro" in user["avatarURL"]

    stored = _stored_user(db)
    assert stored["password"] != "s3cret-pass"
    assert verify_password("s3cret-pass", stored["password"])
    assert stored["token"] is None


def test_signup_duplicate_email_conflicts(api):
    assert api.signup().status_code == 201

    response = api.signup(password="another")
    assert response.status_code == 409
    assert response.json()["message"] == "Email in use"


def test_signup_rejects_invalid_email(api):
    response = api.signup(email="not-an-email")
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["message"].startswith('"email"')


def test_signup_requires_password(api, client):
    response = client.post(f"{settings.API_PREFIX}/users/signup", json={"email": "jane@example.com"})
    assert response.status_code == 400
    assert response.json()["message"] == '"password" is required'


def test_signup_rejects_empty_password(api):
    response = api.signup(password="")
    assert response.status_code == 400


# ----------------------------------------------------------------- login

def test_login_returns_token(api, db):
    api.signup()
    response = api.login()

    assert response.status_code == 200
    data = response.json()
    assert data["user"] == {"email": "jane@example.com", "subscription": "starter"}

    payload = jwt.decode(data["token"], settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    stored = _stored_user(db)
    assert payload["id"] == str(stored["_id"])
    assert payload["email"] == "jane@example.com"
    assert payload["subscription"] == "starter"
    assert payload["exp"] - payload["iat"] == settings.JWT_EXPIRES_HOURS * 3600
    assert stored["token"] == data["token"]


def test_login_unknown_email(api):
    response = api.login(email="ghost@example.com")
    assert response.status_code == 401
    assert response.json()["message"] == "No such user"


def test_login_wrong_password(api):
    api.signup()
    response = api.login(password="wrong")
    assert response.status_code == 401
    assert response.json()["message"] == "Email or password is wrong"


def test_login_validates_body(api):
    response = api.login(email="nope")
    assert response.status_code == 400


# --------------------------------------------------------------- current

def test_current_returns_user(api, token):
    response = api.get("/current", token)
    assert response.status_code == 200
    assert response.json() == {"email": "jane@example.com", "subscription": "starter"}


def test_current_requires_token(api):
    response = api.get("/current")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized"


def test_current_rejects_garbage_token(api, token):
    response = api.get("/current", "not.a.jwt")
    assert response.status_code == 401


def test_current_rejects_forged_token(api, db, token):
    stored = _stored_user(db)
    forged = jwt.encode(
        {"id": str(stored["_id"]), "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "some-other-secret",
        algorithm="HS256",
    )
    assert api.get("/current", forged).status_code == 401


def test_current_rejects_expired_token(api, db, token):
    stored = _stored_user(db)
    expired = jwt.encode(
        {"id": str(stored["_id"]), "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    asyncio.run(db["users"].update_one({"_id": stored["_id"]}, {"$set": {"token": expired}}))
    assert api.get("/current", expired).status_code == 401


def test_current_rejects_valid_but_unstored_token(api, db, token):
    stored = _stored_user(db)
    other = create_access_token(str(stored["_id"]), stored["email"], stored["subscription"], expires_hours=1)
    asyncio.run(db["users"].update_one({"_id": stored["_id"]}, {"$set": {"token": "something-else"}}))
    assert api.get("/current", other).status_code == 401


def test_current_rejects_token_for_deleted_user(api, db, token):
    asyncio.run(db["users"].delete_many({}))
    assert api.get("/current", token).status_code == 401


# ---------------------------------------------------------------- logout

def test_logout_invalidates_token(api, db, token):
    response = api.get("/logout", token)
    assert response.status_code == 200
    assert response.json() == {"message": "user logged out"}

    assert _stored_user(db)["token"] is None
    assert api.get("/current", token).status_code == 401
    assert api.get("/logout", token).status_code == 401


def test_logout_requires_token(api):
    assert api.get("/logout").status_code == 401


def test_login_again_after_logout(api, token):
    api.get("/logout", token)
    new_token = api.login().json()["token"]
    assert api.get("/current", new_token).status_code == 200


def test_signup_and_login_with_long_password(api):
    password = "x" * 100
    assert api.signup(password=password).status_code == 201
    assert api.login(password=password).status_code == 200


def test_signup_rejects_non_json_body(client):
    response = client.post(
        f"{settings.API_PREFIX}/users/signup",
        content=b"\xff\xfe\x00garbage",
        headers={"Content-Type": "text/plain"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_login_rejects_non_json_body(api, client):
    api.signup()
    response = client.post(
        f"{settings.API_PREFIX}/users/login",
        content=b"\xff\xfe\x00garbage",
        headers={"Content-Type": "text/plain"},
    )
    assert response.status_code == 400


def test_new_login_replaces_previous_token(api, db, monkeypatch):
    api.signup()
    first = api.login().json()["token"]

    monkeypatch.setattr(settings, "JWT_EXPIRES_HOURS", settings.JWT_EXPIRES_HOURS + 1)
    second = api.login().json()["token"]

    assert first != second
    assert _stored_user(db)["token"] == second
    assert api.get("/current", first).status_code == 401
    assert api.get("/current", second).status_code == 200


def test_signup_race_on_unique_index_conflicts(api, db, monkeypatch):
    from app.db.indexes import create_indexes
    from app.services import user_service

    asyncio.run(create_indexes())
    assert api.signup().status_code == 201

    async def not_registered(email):
        return False

    monkeypatch.setattr(user_service, "email_exists", not_registered)
    response = api.signup()
    assert response.status_code == 409
    assert response.json()["message"] == "Email in use"
