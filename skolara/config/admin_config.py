from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "dev"                # "dev" / "staging" / "prod"
    SERVICE_NAME: str = "skolara"
    ENABLE_ADMIN: bool = True
    ADMIN_SECRET: Optional[str] = None   # when set, /admin requests must send X-Admin-Secret
    ENABLE_METRICS: bool = False

    class Config:
        env_file = ".env"
        extra="ignore"

admin_config = Settings()
