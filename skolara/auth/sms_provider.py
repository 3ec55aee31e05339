from typing import Any, Dict, Optional
import httpx
from skolara.auth.constants import logger
from skolara.common.custom_exceptions import ProviderError
from skolara.common.retries import retry_async
from skolara.config.settings import config_settings


class SmsProviderError(ProviderError):
    code = "SMS_PROVIDER_ERROR"
    public_message = "Failed to send OTP"


class TwilioVerifyClient:
    """
    Minimal async client for the Twilio Verify and account REST endpoints.
    Verification codes are generated, delivered and checked by Twilio.
    """

    def __init__(self, account_sid: str, auth_token: str, service_sid: str, phone_number: str = "",
                 verify_base: str = config_settings.TWILIO_VERIFY_BASE,
                 api_base: str = config_settings.TWILIO_API_BASE,
                 timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.service_sid = service_sid
        self.phone_number = phone_number
        self.verify_base = verify_base.rstrip("/")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.service_sid)

    def missing_settings(self) -> Dict[str, bool]:
        return {
            "account_sid": not self.account_sid,
            "auth_token": not self.auth_token,
            "service_sid": not self.service_sid,
            "phone_number": not self.phone_number,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, auth=(self.account_sid, self.auth_token),
                                 transport=self._transport)

    @retry_async(attempts=3, base_delay=0.2, max_delay=2.0)
    async def _post_form(self, url: str, data: Dict[str, str]) -> httpx.Response:
        async with self._client() as client:
            resp = await client.post(url, data=data)
            if resp.status_code >= 500:
                resp.raise_for_status()
            return resp

    @retry_async(attempts=3, base_delay=0.2, max_delay=2.0)
    async def _get_json(self, url: str) -> Dict[str, Any]:
        async with self._client() as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()

    async def start_verification(self, to: str) -> str:
        """Send an sms code to `to`; returns the verification status."""
        if not self.configured:
            raise SmsProviderError("twilio credentials are not configured")

        url = f"{self.verify_base}/Services/{self.service_sid}/Verifications"
        try:
            resp = await self._post_form(url, {"To": to, "Channel": "sms"})
        except httpx.HTTPError as exc:
            raise SmsProviderError(f"twilio verification request failed: {exc}") from exc

        if resp.status_code >= 400:
            body = resp.json() if resp.content else {}
            logger.error("sms.verification.rejected", extra={"http_status": resp.status_code,
                                                             "twilio_code": body.get("code"),
                                                             "more_info": body.get("more_info")})
            raise SmsProviderError(f"twilio rejected verification: {body.get('message', resp.status_code)}")

        data = resp.json()
        logger.info("sms.verification.sent", extra={"status": data.get("status"), "sid": data.get("sid")})
        return data.get("status", "pending")

    async def check_verification(self, to: str, code: str) -> bool:
        """True only when Twilio reports the code as approved."""
        if not self.configured:
            raise SmsProviderError("twilio credentials are not configured")

        url = f"{self.verify_base}/Services/{self.service_sid}/VerificationCheck"
        try:
            resp = await self._post_form(url, {"To": to, "Code": code})
        except httpx.HTTPError as exc:
            raise SmsProviderError(f"twilio verification check failed: {exc}") from exc

        # 404 means no pending verification: expired, already used or never sent
        if resp.status_code == 404:
            return False
        if resp.status_code >= 400:
            raise SmsProviderError(f"twilio verification check rejected: {resp.status_code}")

        return resp.json().get("status") == "approved"

    async def fetch_account_status(self) -> Dict[str, Any]:
        """Account details plus whether the configured sender number belongs to it."""
        account_url = f"{self.api_base}/Accounts/{self.account_sid}.json"
        numbers_url = f"{self.api_base}/Accounts/{self.account_sid}/IncomingPhoneNumbers.json"
        try:
            account = await self._get_json(account_url)
            numbers = (await self._get_json(numbers_url)).get("incoming_phone_numbers", [])
        except httpx.HTTPError as exc:
            raise SmsProviderError(f"twilio account lookup failed: {exc}",
                                   public_message="SMS provider API error") from exc

        own_number = next((n for n in numbers if n.get("phone_number") == self.phone_number), None)
        capabilities = (own_number or {}).get("capabilities") or {}
        return {
            "account": {
                "friendly_name": account.get("friendly_name"),
                "status": account.get("status"),
                "type": account.get("type"),
            },
            "configured_number": self.phone_number,
            "number_exists": own_number is not None,
            "number_details": {
                "phone_number": own_number.get("phone_number"),
                "friendly_name": own_number.get("friendly_name"),
                "sms_enabled": capabilities.get("sms"),
                "voice_enabled": capabilities.get("voice"),
                "mms_enabled": capabilities.get("mms"),
            } if own_number else None,
            "total_numbers": len(numbers),
        }


sms_client = TwilioVerifyClient(
    account_sid=config_settings.TWILIO_ACCOUNT_SID,
    auth_token=config_settings.TWILIO_AUTH_TOKEN,
    service_sid=config_settings.TWILIO_SERVICE_ID,
    phone_number=config_settings.TWILIO_PHONE_NUMBER,
)


def get_sms_provider() -> TwilioVerifyClient:
    return sms_client
