from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):

    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGO: str = "HS256"
    SIGNUP_TOKEN_EXPIRE_MINUTES: int = 5
    AUTH_TOKEN_EXPIRE_MINUTES: int = 20
    REFRESH_TOKEN_EXPIRE_DAYS: int = 15
    TOKEN_HASH_ALGO: str = "sha256"

    DEFAULT_COUNTRY_CODE: str = "1"
    OTP_DEV_MODE: Optional[bool] = None   # None -> follow ENV == "dev"
    OTP_LENGTH: int = 6
    OTP_TTL_MINUTES: int = 5

    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_SERVICE_ID: str = ""
    TWILIO_PHONE_NUMBER: str = ""
    TWILIO_API_BASE: str = "https://api.twilio.com/2010-04-01"
    TWILIO_VERIFY_BASE: str = "https://verify.twilio.com/v2"

    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_USE_REDIS: bool = True
    OTP_RATE_LIMIT: int = 5
    OTP_RATE_WINDOW_SECONDS: int = 60
    OTP_PHONE_RATE_LIMIT: int = 5
    OTP_PHONE_RATE_WINDOW_SECONDS: int = 600
    TRUSTED_PROXY_HOPS: int = 0          # 0 -> X-Forwarded-For is ignored

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        extra="ignore"

config_settings = Settings()
