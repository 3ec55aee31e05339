import asyncio
import posixpath
import re
import time
from typing import Iterable, List, Optional
from urllib.parse import unquote, urlparse
import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
import cloudinary.utils
from skolara.common.custom_exceptions import ProviderError
from skolara.config.media_config import media_settings
from skolara.media.constants import SIGNED_URL_TTL_SECONDS, logger

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class StorageError(ProviderError):
    code = "STORAGE_ERROR"
    public_message = "File storage error"


def _strip_extension(path: str) -> str:
    root, _ = posixpath.splitext(path)
    return root


def extract_file_path_from_url(url: Optional[str], bucket: str) -> Optional[str]:
    """
    Storage path ("<bucket>/<name>", no extension) of a url served from `bucket`,
    or None when the url does not point into that bucket.
    """
    if not url or not bucket:
        return None
    parts = [unquote(p) for p in urlparse(url).path.split("/") if p]
    if bucket not in parts:
        return None
    rest = parts[parts.index(bucket) + 1:]
    if rest and _VERSION_SEGMENT.match(rest[0]) and len(rest) > 1:
        rest = rest[1:]
    if not rest:
        return None
    return _strip_extension("/".join([bucket, *rest]))


def is_bucket_url(url: Optional[str], bucket: str) -> bool:
    return extract_file_path_from_url(url, bucket) is not None


class ObjectStorage:
    """Cloudinary backed store; a bucket maps to a top level folder."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    async def upload(self, local_path, bucket: str, name: str) -> str:
        try:
            res = await asyncio.to_thread(
                cloudinary.uploader.upload, str(local_path),
                folder=bucket, public_id=name, resource_type="image", overwrite=False,
            )
        except (cloudinary.exceptions.Error, OSError) as e:
            raise StorageError(f"upload to {bucket} failed: {e}", public_message="Failed to upload file") from e

        logger.info("storage.upload.success", extra={"bucket": bucket, "public_id": res.get("public_id")})
        return res["secure_url"]

    async def delete(self, bucket: str, path: str) -> bool:
        try:
            res = await asyncio.to_thread(cloudinary.uploader.destroy, path, resource_type="image", invalidate=True)
        except (cloudinary.exceptions.Error, OSError) as e:
            raise StorageError(f"delete from {bucket} failed: {e}", public_message="Failed to delete file") from e
        deleted = res.get("result") == "ok"
        logger.info("storage.delete", extra={"bucket": bucket, "path": path, "deleted": deleted})
        return deleted

    async def delete_many(self, bucket: str, paths: Iterable[str]) -> List[str]:
        paths = [p for p in paths if p]
        if not paths:
            return []
        try:
            res = await asyncio.to_thread(cloudinary.api.delete_resources, paths, resource_type="image")
        except (cloudinary.exceptions.Error, OSError) as e:
            raise StorageError(f"bulk delete from {bucket} failed: {e}", public_message="Failed to delete files") from e
        deleted = [path for path, result in (res.get("deleted") or {}).items() if result == "deleted"]
        logger.info("storage.delete_many", extra={"bucket": bucket, "requested": len(paths), "deleted": len(deleted)})
        return deleted

    def signed_url(self, path: str, ttl: int = SIGNED_URL_TTL_SECONDS) -> str:
        """Time limited download url for a private document."""
        public_id, ext = posixpath.splitext(path)
        try:
            return cloudinary.utils.private_download_url(
                public_id, ext.lstrip(".") or "pdf",
                resource_type="image", type="upload",
                expires_at=int(time.time()) + ttl,
            )
        except (cloudinary.exceptions.Error, ValueError) as e:
            raise StorageError(f"signing {path} failed: {e}", public_message="Failed to sign file url") from e


object_storage = ObjectStorage(
    cloud_name=media_settings.CLOUDINARY_CLOUD_NAME,
    api_key=media_settings.CLOUDINARY_API_KEY,
    api_secret=media_settings.CLOUDINARY_API_SECRET,
)


def get_storage() -> ObjectStorage:
    return object_storage
