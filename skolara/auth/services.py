from fastapi import HTTPException, status
from skolara.auth.constants import (AUTH_TOKEN, AUTH_TOKEN_TTL, OTP_DEV_MODE, OTP_LENGTH, OTP_TTL, REFRESH_TOKEN,
                                    REFRESH_TOKEN_TTL, SIGNUP_TOKEN, SIGNUP_TOKEN_TTL, logger)
from skolara.auth.repository import (clear_all_tokens, clear_auth_token, complete_student_account, get_or_create_student,
                                     otp_record_by_mobile, record_otp_attempt, record_otp_sent, save_student_tokens,
                                     student_by_id, student_by_phone, update_auth_token)
from skolara.auth.utils import create_token, decode_token, generate_otp, hash_token, phone_digits, token_matches
from skolara.common.utils import as_utc, now


def issue_session_tokens(student_id: int, phone_number: int) -> dict:
    """Auth token + refresh token pair for a signed up student."""
    auth_token, auth_expires_at = create_token(student_id, phone_number, AUTH_TOKEN, AUTH_TOKEN_TTL)
    refresh_token, refresh_expires_at = create_token(student_id, phone_number, REFRESH_TOKEN, REFRESH_TOKEN_TTL)
    return {
        "auth_token": auth_token,
        "auth_expires_at": auth_expires_at,
        "refresh_token": refresh_token,
        "refresh_expires_at": refresh_expires_at,
    }


def issue_signup_token(student_id: int, phone_number: int) -> dict:
    """Short lived token that only allows finishing account creation."""
    auth_token, auth_expires_at = create_token(student_id, phone_number, SIGNUP_TOKEN, SIGNUP_TOKEN_TTL)
    return {
        "auth_token": auth_token,
        "auth_expires_at": auth_expires_at,
        "refresh_token": None,
        "refresh_expires_at": None,
    }


async def store_tokens(session, student_id: int, tokens: dict, **values):
    refresh = tokens["refresh_token"]
    await save_student_tokens(
        session, student_id,
        auth_hash=hash_token(tokens["auth_token"]),
        auth_expires_at=tokens["auth_expires_at"],
        refresh_hash=hash_token(refresh) if refresh else None,
        refresh_expires_at=tokens["refresh_expires_at"],
        **values,
    )


async def send_otp(session, sms_provider, phone: str) -> dict:
    digits = phone_digits(phone)
    student = await get_or_create_student(session, digits)
    student_id = student.id
    await session.commit()

    if OTP_DEV_MODE:
        otp = generate_otp(OTP_LENGTH)
        await record_otp_sent(session, phone, otp_hash=hash_token(otp), otp_expires_at=now() + OTP_TTL)
        await session.commit()
        logger.info("otp.send.dev_generated", extra={"phone": phone, "student_id": student_id})
        return {"message": "OTP generated successfully (development mode)", "otp": otp}

    await record_otp_sent(session, phone)
    await session.commit()

    await sms_provider.start_verification(phone)
    logger.info("otp.send.success", extra={"phone": phone, "student_id": student_id})
    return {"message": "OTP sent successfully"}


async def check_otp(session, sms_provider, phone: str, otp: str) -> bool:
    if OTP_DEV_MODE:
        record = await otp_record_by_mobile(session, phone)
        if record is None or not record.otp_hash:
            return False
        expires_at = as_utc(record.otp_expires_at)
        if expires_at is None or now() > expires_at:
            return False
        return token_matches(otp, record.otp_hash)

    return await sms_provider.check_verification(phone, otp)


async def verify_otp(session, sms_provider, phone: str, otp: str) -> dict:
    digits = phone_digits(phone)
    student = await student_by_phone(session, digits)
    if not student:
        logger.warning("otp.verify.student_not_found", extra={"phone": phone})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    approved = await check_otp(session, sms_provider, phone, otp)
    await record_otp_attempt(session, phone, verified=approved)

    if not approved:
        await session.commit()
        logger.warning("otp.verify.rejected", extra={"phone": phone, "student_id": student.id})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired OTP")

    if student.signed_up:
        tokens = issue_session_tokens(student.id, student.phone_number)
    else:
        tokens = issue_signup_token(student.id, student.phone_number)

    await store_tokens(session, student.id, tokens, is_verified_user=True)
    await session.commit()

    logger.info("otp.verify.success", extra={"student_id": student.id, "signed_up": student.signed_up})
    return {
        "message": "OTP verified successfully",
        "auth_token": tokens["auth_token"],
        "refresh_token": tokens["refresh_token"],
        "user_id": student.id,
        "is_signed_up": bool(student.signed_up),
    }


async def _load_token_owner(session, claims: dict):
    student = await student_by_id(session, claims["user_id"])
    if not student:
        logger.warning("auth.student_not_found", extra={"student_id": claims["user_id"]})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if student.phone_number != claims["phone_number"]:
        logger.warning("auth.phone_mismatch", extra={"student_id": student.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token phone number mismatch")
    return student


async def refresh_auth_token(session, auth_token: str, refresh_token: str) -> dict:
    # the auth token is usually already expired here, only its signature matters
    auth_claims = decode_token(auth_token, verify_exp=False)
    if not auth_claims:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token format")

    refresh_claims = decode_token(refresh_token)
    if not refresh_claims or refresh_claims.get("type") != REFRESH_TOKEN:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token")

    if (auth_claims["user_id"] != refresh_claims["user_id"]
            or auth_claims["phone_number"] != refresh_claims["phone_number"]):
        logger.warning("auth.refresh.token_mismatch", extra={"student_id": refresh_claims["user_id"]})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Token mismatch - tokens do not belong to the same user")

    student = await _load_token_owner(session, refresh_claims)

    if not token_matches(auth_token, student.auth_token_hash):
        logger.warning("auth.refresh.auth_token_mismatch", extra={"student_id": student.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Auth token mismatch")

    if not token_matches(refresh_token, student.refresh_token_hash):
        logger.warning("auth.refresh.refresh_token_mismatch", extra={"student_id": student.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token mismatch")

    refresh_expires_at = as_utc(student.refresh_token_expires_at)
    if refresh_expires_at is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No refresh token expiration found")

    if now() > refresh_expires_at:
        await clear_all_tokens(session, student.id)
        await session.commit()
        logger.info("auth.refresh.expired", extra={"student_id": student.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Refresh token has expired. Please login again.")

    new_auth_token, auth_expires_at = create_token(student.id, student.phone_number, AUTH_TOKEN, AUTH_TOKEN_TTL)
    await update_auth_token(session, student.id, hash_token(new_auth_token), auth_expires_at)
    await session.commit()

    logger.info("auth.refresh.success", extra={"student_id": student.id})
    return {
        "message": "Auth token refreshed successfully",
        "auth_token": new_auth_token,
        "refresh_token": refresh_token,
        "user_id": student.id,
        "is_signed_up": bool(student.signed_up),
    }


async def create_account(session, payload: dict) -> dict:
    auth_token = payload["auth_token"]
    claims = decode_token(auth_token)
    if not claims:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired auth token")

    student = await _load_token_owner(session, claims)

    if not token_matches(auth_token, student.auth_token_hash):
        logger.warning("account.create.auth_token_mismatch", extra={"student_id": student.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Auth token mismatch")

    auth_expires_at = as_utc(student.auth_token_expires_at)
    if auth_expires_at is None or now() > auth_expires_at:
        await clear_auth_token(session, student.id)
        await session.commit()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Auth token has expired. Please refresh your session.")

    if student.signed_up:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User account already exists")

    updated_id = await complete_student_account(
        session, student.id,
        first_name=payload["first_name"],
        last_name=payload["last_name"],
        email=payload["email"],
        college_course=payload["college_course"],
    )
    if not updated_id:
        # another request finished the signup between our read and the update
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User account already exists")

    tokens = issue_session_tokens(student.id, student.phone_number)
    await store_tokens(session, student.id, tokens)
    await session.commit()

    logger.info("account.create.success", extra={"student_id": student.id})
    return {
        "message": "Account created successfully",
        "user": {
            "id": student.id,
            "first_name": payload["first_name"],
            "last_name": payload["last_name"],
            "email": payload["email"],
            "phone_number": student.phone_number,
            "college_course": payload["college_course"],
            "signed_up": True,
        },
        "auth_token": tokens["auth_token"],
        "refresh_token": tokens["refresh_token"],
    }
