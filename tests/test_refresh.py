from datetime import timedelta
from skolara.auth.utils import create_token, decode_token, hash_token
from skolara.common.utils import as_utc
from tests.utils import load_student, signed_up_student, update_student, url_prefix

PHONE = "+14155550123"
OTHER_PHONE = "+14155550199"


async def refresh(ac, auth_token, refresh_token):
    return await ac.post(f"{url_prefix}/auth/refresh-token",
                         json={"auth_token": auth_token, "refresh_token": refresh_token})


async def test_refresh_issues_new_auth_token(ac_client, session_factory):
    tokens = await signed_up_student(ac_client, PHONE)
    resp = await refresh(ac_client, tokens["auth_token"], tokens["refresh_token"])
    assert resp.status_code == 200
    data = resp.json()["data"]

    assert data["auth_token"] != tokens["auth_token"]
    assert data["refresh_token"] == tokens["refresh_token"]
    assert decode_token(data["auth_token"])["type"] == "auth"

    student = await load_student(session_factory, tokens["user"]["id"])
    assert student.auth_token_hash == hash_token(data["auth_token"])


async def test_refresh_accepts_expired_auth_token(ac_client, session_factory):
    tokens = await signed_up_student(ac_client, PHONE)
    user = tokens["user"]
    expired, _ = create_token(user["id"], user["phone_number"], "auth", timedelta(seconds=-60))
    await update_student(session_factory, user["id"], auth_token_hash=hash_token(expired))

    resp = await refresh(ac_client, expired, tokens["refresh_token"])
    assert resp.status_code == 200


async def test_refresh_with_replaced_auth_token(ac_client):
    tokens = await signed_up_student(ac_client, PHONE)
    first = await refresh(ac_client, tokens["auth_token"], tokens["refresh_token"])
    assert first.status_code == 200

    again = await refresh(ac_client, tokens["auth_token"], tokens["refresh_token"])
    assert again.status_code == 401
    assert again.json()["error"]["details"]["message"] == "Auth token mismatch"


async def test_refresh_rejects_tokens_of_different_users(ac_client):
    first = await signed_up_student(ac_client, PHONE)
    second = await signed_up_student(ac_client, OTHER_PHONE, email="other@example.com")

    resp = await refresh(ac_client, first["auth_token"], second["refresh_token"])
    assert resp.status_code == 401
    assert resp.json()["error"]["details"]["message"].startswith("Token mismatch")


async def test_refresh_requires_refresh_type(ac_client):
    tokens = await signed_up_student(ac_client, PHONE)
    resp = await refresh(ac_client, tokens["auth_token"], tokens["auth_token"])
    assert resp.status_code == 401


async def test_refresh_with_garbage_auth_token(ac_client):
    tokens = await signed_up_student(ac_client, PHONE)
    resp = await refresh(ac_client, "garbage", tokens["refresh_token"])
    assert resp.status_code == 401
    assert resp.json()["error"]["details"]["message"] == "Invalid auth token format"


async def test_refresh_without_stored_expiry(ac_client, session_factory):
    tokens = await signed_up_student(ac_client, PHONE)
    await update_student(session_factory, tokens["user"]["id"], refresh_token_expires_at=None)

    resp = await refresh(ac_client, tokens["auth_token"], tokens["refresh_token"])
    assert resp.status_code == 400


async def test_refresh_valid_at_exact_expiry(ac_client, session_factory, monkeypatch):
    tokens = await signed_up_student(ac_client, PHONE)
    student = await load_student(session_factory, tokens["user"]["id"])
    expires_at = as_utc(student.refresh_token_expires_at)

    monkeypatch.setattr("skolara.auth.services.now", lambda: expires_at)
    resp = await refresh(ac_client, tokens["auth_token"], tokens["refresh_token"])
    assert resp.status_code == 200


async def test_refresh_after_expiry_clears_tokens(ac_client, session_factory, monkeypatch):
    tokens = await signed_up_student(ac_client, PHONE)
    student = await load_student(session_factory, tokens["user"]["id"])
    expires_at = as_utc(student.refresh_token_expires_at)

    monkeypatch.setattr("skolara.auth.services.now", lambda: expires_at + timedelta(seconds=1))
    resp = await refresh(ac_client, tokens["auth_token"], tokens["refresh_token"])
    assert resp.status_code == 401
    assert resp.json()["error"]["details"]["message"] == "Refresh token has expired. Please login again."

    student = await load_student(session_factory, tokens["user"]["id"])
    assert student.auth_token_hash is None
    assert student.refresh_token_hash is None
    assert student.refresh_token_expires_at is None
