from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    MEDIA_TMP_ROOT: str = "/tmp/skolara_uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024
    SIGNED_URL_TTL_SECONDS: int = 60 * 60 * 24

    LOGO_BUCKET: str = "college_logo"
    IMAGES_BUCKET: str = "college_images"
    DOCUMENTS_BUCKET: str = "applications"

    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_CLOUD_NAME: str = ""

    class Config:
        env_file = ".env"
        extra="ignore"

media_settings = Settings()
