from datetime import timedelta
import pytest
from skolara.auth import repository
from skolara.auth.repository import record_otp_sent
from skolara.auth.sms_provider import SmsProviderError
from skolara.auth.utils import decode_token
from skolara.common.utils import now
from tests.utils import load_otp_record, load_student, request_otp, update_otp_record, url_prefix

PHONE = "+14155550100"


async def test_send_otp_creates_student_and_otp_record(ac_client, session_factory):
    otp = await request_otp(ac_client, "415 555 0100")
    assert otp.isdigit() and len(otp) == 6

    record = await load_otp_record(session_factory, PHONE)
    assert record.is_active is True
    assert record.verified is False
    assert record.send_count == 1
    assert record.otp_hash and record.otp_hash != otp
    assert record.last_sent_at is not None


async def test_send_otp_twice_reuses_student(ac_client, session_factory):
    await request_otp(ac_client, PHONE)
    await request_otp(ac_client, PHONE)

    record = await load_otp_record(session_factory, PHONE)
    assert record.send_count == 2


async def test_send_otp_rejects_phone_without_digits(ac_client):
    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "call me"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "HTTP_400"


async def test_send_otp_requires_phone(ac_client):
    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "UNPROCESSABLE_ENTITY"


async def test_verify_otp_for_new_student_issues_signup_token(ac_client, session_factory):
    otp = await request_otp(ac_client, PHONE)
    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": otp})
    assert resp.status_code == 200
    data = resp.json()["data"]

    assert data["is_signed_up"] is False
    assert data["refresh_token"] is None
    claims = decode_token(data["auth_token"])
    assert claims["type"] == "signup"
    assert claims["user_id"] == data["user_id"]
    assert claims["exp"] - claims["iat"] == 5 * 60

    student = await load_student(session_factory, data["user_id"])
    assert student.is_verified_user is True
    assert student.auth_token_hash and student.auth_token_hash != data["auth_token"]
    assert student.refresh_token_hash is None

    record = await load_otp_record(session_factory, PHONE)
    assert record.verified is True
    assert record.verified_at is not None
    assert record.attempts == 0


async def test_verify_otp_formats_phone_like_send(ac_client):
    otp = await request_otp(ac_client, "4155550100")
    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": "(415) 555-0100", "otp": otp})
    assert resp.status_code == 200


async def test_verify_otp_unknown_phone(ac_client):
    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": "+15550001111", "otp": "123456"})
    assert resp.status_code == 404


async def test_verify_otp_rejects_non_numeric_code(ac_client):
    await request_otp(ac_client, PHONE)
    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": "12ab56"})
    assert resp.status_code == 400


async def test_verify_otp_wrong_code_counts_attempt(ac_client, session_factory):
    otp = await request_otp(ac_client, PHONE)
    wrong = "1" * 6 if otp != "1" * 6 else "2" * 6
    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": wrong})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["message"] == "Invalid or expired OTP"

    record = await load_otp_record(session_factory, PHONE)
    assert record.attempts == 1
    assert record.verified is False


async def test_verify_otp_code_is_single_use(ac_client):
    otp = await request_otp(ac_client, PHONE)
    first = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": otp})
    assert first.status_code == 200
    again = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": otp})
    assert again.status_code == 400


async def test_verify_otp_expired_code(ac_client, session_factory):
    otp = await request_otp(ac_client, PHONE)
    await update_otp_record(session_factory, PHONE, otp_expires_at=now() - timedelta(seconds=1))

    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": otp})
    assert resp.status_code == 400


async def test_provider_mode_sends_and_checks_through_sms_provider(ac_client, sms_provider, monkeypatch):
    monkeypatch.setattr("skolara.auth.services.OTP_DEV_MODE", False)

    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": PHONE})
    assert resp.status_code == 200
    assert "otp" not in resp.json()["data"]
    assert sms_provider.sent == [PHONE]

    bad = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": "000000"})
    assert bad.status_code == 400

    good = await ac_client.post(f"{url_prefix}/auth/verify-otp",
                                json={"phone_number": PHONE, "otp": sms_provider.approved_code})
    assert good.status_code == 200
    assert sms_provider.checked[-1] == (PHONE, sms_provider.approved_code)


async def test_provider_failure_returns_500(ac_client, sms_provider, monkeypatch):
    monkeypatch.setattr("skolara.auth.services.OTP_DEV_MODE", False)

    async def failing_start(to):
        raise SmsProviderError("twilio down")

    monkeypatch.setattr(sms_provider, "start_verification", failing_start)

    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": PHONE})
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"]["code"] == "SMS_PROVIDER_ERROR"
    assert body["error"]["details"]["message"] == "Failed to send OTP"


async def test_only_failed_checks_count_as_attempts(ac_client, session_factory):
    otp = await request_otp(ac_client, PHONE)
    wrong = "1" * 6 if otp != "1" * 6 else "2" * 6
    await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": wrong})
    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": PHONE, "otp": otp})
    assert resp.status_code == 200

    record = await load_otp_record(session_factory, PHONE)
    assert record.attempts == 1
    assert record.verified is True


async def test_record_otp_sent_when_concurrent_send_inserted_first(session_factory, monkeypatch):
    async with session_factory() as session:
        await record_otp_sent(session, PHONE)
        await session.commit()

    lookup = repository.otp_record_by_mobile
    calls = []

    async def stale_lookup(session, mobile):
        # the first read misses the row another request already inserted
        calls.append(mobile)
        if len(calls) == 1:
            return None
        return await lookup(session, mobile)

    monkeypatch.setattr(repository, "otp_record_by_mobile", stale_lookup)

    async with session_factory() as session:
        record = await record_otp_sent(session, PHONE)
        await session.commit()

    assert len(calls) == 2
    assert record.send_count == 2
    assert (await load_otp_record(session_factory, PHONE)).send_count == 2
