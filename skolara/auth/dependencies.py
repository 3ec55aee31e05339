from fastapi import Depends, HTTPException, status
from skolara.auth.constants import logger
from skolara.auth.models import CreateAccountIn, SendOtpIn, VerifyOtpIn
from skolara.auth.utils import format_phone_number, normalize_email_address


def _formatted_phone(raw: str) -> str:
    try:
        return format_phone_number(raw)
    except ValueError:
        logger.warning("otp.validation.phone_invalid")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Phone number is required")


async def send_otp_validation(payload: SendOtpIn) -> str:
    return _formatted_phone(payload.phone_number)


async def verify_otp_validation(payload: VerifyOtpIn) -> dict:
    phone = _formatted_phone(payload.phone_number)
    otp = payload.otp.strip()
    if not otp.isdigit():
        logger.warning("otp.validation.otp_invalid", extra={"phone": phone})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid phone number or OTP format")
    return {"phone": phone, "otp": otp}


async def verify_otp_phone(payload: dict = Depends(verify_otp_validation)) -> str:
    return payload["phone"]


async def account_validation(payload: CreateAccountIn) -> dict:
    first_name = payload.first_name.strip()
    last_name = payload.last_name.strip()
    if not first_name or not last_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="First name, last name, and college course are required")

    email = None
    if payload.email and payload.email.strip():
        try:
            email = normalize_email_address(payload.email)
        except ValueError as e:
            logger.warning("account.validation.email_invalid", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

    return {
        "auth_token": payload.auth_token,
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "college_course": payload.college_course,
    }
