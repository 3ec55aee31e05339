from skolara.common.logging_setup import get_logger
from skolara.config.media_config import media_settings

logger = get_logger("skolara.media")

LOGO_BUCKET = media_settings.LOGO_BUCKET
IMAGES_BUCKET = media_settings.IMAGES_BUCKET
DOCUMENTS_BUCKET = media_settings.DOCUMENTS_BUCKET

MEDIA_BUCKETS = (LOGO_BUCKET, IMAGES_BUCKET, DOCUMENTS_BUCKET)

SIGNED_URL_TTL_SECONDS = media_settings.SIGNED_URL_TTL_SECONDS
