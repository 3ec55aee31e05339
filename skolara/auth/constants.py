from datetime import timedelta
from skolara.config.settings import config_settings
from skolara.config.admin_config import admin_config
from skolara.common.logging_setup import get_logger

logger = get_logger("skolara.auth")

SIGNUP_TOKEN_TTL = timedelta(minutes=config_settings.SIGNUP_TOKEN_EXPIRE_MINUTES)
AUTH_TOKEN_TTL = timedelta(minutes=config_settings.AUTH_TOKEN_EXPIRE_MINUTES)
REFRESH_TOKEN_TTL = timedelta(days=config_settings.REFRESH_TOKEN_EXPIRE_DAYS)

# token "type" claim values
SIGNUP_TOKEN = "signup"
AUTH_TOKEN = "auth"
REFRESH_TOKEN = "refresh"

OTP_DEV_MODE = (config_settings.OTP_DEV_MODE if config_settings.OTP_DEV_MODE is not None
                else admin_config.ENV == "dev")
OTP_LENGTH = config_settings.OTP_LENGTH
OTP_TTL = timedelta(minutes=config_settings.OTP_TTL_MINUTES)

OTP_RATE_LIMIT = config_settings.OTP_RATE_LIMIT
OTP_RATE_WINDOW_SECONDS = config_settings.OTP_RATE_WINDOW_SECONDS
OTP_PHONE_RATE_LIMIT = config_settings.OTP_PHONE_RATE_LIMIT
OTP_PHONE_RATE_WINDOW_SECONDS = config_settings.OTP_PHONE_RATE_WINDOW_SECONDS
