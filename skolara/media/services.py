import asyncio
from PIL import UnidentifiedImageError
from fastapi import HTTPException, UploadFile, status
from skolara.media.constants import logger
from skolara.media.utils import FileTooLarge, file_upload


async def store_upload(storage, bucket: str, file: UploadFile) -> str:
    """Validate one uploaded image and push it to `bucket`; returns its public url."""
    try:
        if not file_upload.is_allowed_content_type(file.content_type):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image uploads allowed")

        tmp_path = file_upload.make_tmp_path(bucket)
        try:
            try:
                await asyncio.to_thread(file_upload._stream_save_to_disk_sync, file.file, tmp_path)
            except FileTooLarge:
                raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                                    detail=f"File too large (max {file_upload.MAX_UPLOAD_SIZE} bytes)")

            try:
                await asyncio.to_thread(file_upload._verify_image_sync, tmp_path)
            except (UnidentifiedImageError, SyntaxError, OSError):
                logger.warning("upload.invalid_image", extra={"bucket": bucket, "upload_filename": file.filename})
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid image")

            name = file_upload.build_object_name()
            url = await storage.upload(tmp_path, bucket, name)
        finally:
            tmp_path.unlink(missing_ok=True)
    finally:
        await file.close()

    logger.info("upload.success", extra={"bucket": bucket, "object_name": name})
    return url
