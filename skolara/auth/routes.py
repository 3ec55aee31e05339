from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from skolara.auth.constants import (OTP_PHONE_RATE_LIMIT, OTP_PHONE_RATE_WINDOW_SECONDS, OTP_RATE_LIMIT,
                                    OTP_RATE_WINDOW_SECONDS, logger)
from skolara.auth.dependencies import account_validation, send_otp_validation, verify_otp_phone, verify_otp_validation
from skolara.auth.models import RefreshTokenIn
from skolara.auth.services import create_account, refresh_auth_token, send_otp, verify_otp
from skolara.auth.sms_provider import get_sms_provider
from skolara.common.utils import success_response
from skolara.db.dependencies import get_session
from skolara.rate_limiting.dependencies import keyed_rate_limit_dependency, rate_limit_dependency

auth_router = APIRouter()

otp_rate_limit = rate_limit_dependency(OTP_RATE_LIMIT, OTP_RATE_WINDOW_SECONDS)
send_otp_phone_limit = keyed_rate_limit_dependency(send_otp_validation, "phone", OTP_PHONE_RATE_LIMIT,
                                                   OTP_PHONE_RATE_WINDOW_SECONDS)
verify_otp_phone_limit = keyed_rate_limit_dependency(verify_otp_phone, "phone", OTP_PHONE_RATE_LIMIT,
                                                     OTP_PHONE_RATE_WINDOW_SECONDS)


@auth_router.post("/send-otp", dependencies=[Depends(otp_rate_limit), Depends(send_otp_phone_limit)])
async def send_otp_route(phone: str = Depends(send_otp_validation),
                         session: AsyncSession = Depends(get_session),
                         sms_provider=Depends(get_sms_provider)):
    logger.info("otp.send.attempt", extra={"phone": phone})
    result = await send_otp(session, sms_provider, phone)
    return success_response(result, 200)


@auth_router.post("/verify-otp", dependencies=[Depends(otp_rate_limit), Depends(verify_otp_phone_limit)])
async def verify_otp_route(payload: dict = Depends(verify_otp_validation),
                           session: AsyncSession = Depends(get_session),
                           sms_provider=Depends(get_sms_provider)):
    logger.info("otp.verify.attempt", extra={"phone": payload["phone"]})
    result = await verify_otp(session, sms_provider, payload["phone"], payload["otp"])
    return success_response(result, 200)


@auth_router.post("/refresh-token")
async def refresh_token_route(payload: RefreshTokenIn, session: AsyncSession = Depends(get_session)):
    logger.info("auth.refresh.attempt")
    result = await refresh_auth_token(session, payload.auth_token, payload.refresh_token)
    return success_response(result, 200)


@auth_router.post("/create-account")
async def create_account_route(payload: dict = Depends(account_validation),
                               session: AsyncSession = Depends(get_session)):
    logger.info("account.create.attempt")
    result = await create_account(session, payload)
    return success_response(result, 200)
