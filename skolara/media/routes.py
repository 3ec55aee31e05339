from typing import List
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from skolara.common.custom_exceptions import ProviderError
from skolara.common.utils import success_response
from skolara.media.constants import logger
from skolara.media.dependencies import validate_bucket
from skolara.media.services import store_upload
from skolara.media.storage import extract_file_path_from_url, get_storage

media_router = APIRouter()


@media_router.post("/{bucket}", status_code=status.HTTP_201_CREATED)
async def upload_file(bucket: str = Depends(validate_bucket), file: UploadFile = File(...),
                      storage=Depends(get_storage)):
    url = await store_upload(storage, bucket, file)
    return success_response({"url": url}, status.HTTP_201_CREATED)


@media_router.post("/{bucket}/batch", status_code=status.HTTP_201_CREATED)
async def upload_files(bucket: str = Depends(validate_bucket), files: List[UploadFile] = File(...),
                       storage=Depends(get_storage)):
    urls, errors = [], []
    for file in files:
        try:
            urls.append(await store_upload(storage, bucket, file))
        except HTTPException as e:
            errors.append({"filename": file.filename, "error": e.detail})
        except ProviderError as e:
            logger.warning("upload.batch.storage_failed", extra={"bucket": bucket, "upload_filename": file.filename})
            errors.append({"filename": file.filename, "error": e.public_message})

    if not urls:
        logger.warning("upload.batch.all_failed", extra={"bucket": bucket, "count": len(errors)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail={"message": "No files were uploaded", "errors": errors})

    return success_response({"urls": urls, "errors": errors}, status.HTTP_201_CREATED)


@media_router.delete("/{bucket}")
async def delete_file(bucket: str = Depends(validate_bucket), url: str = Query(..., min_length=1),
                      storage=Depends(get_storage)):
    path = extract_file_path_from_url(url, bucket)
    if not path:
        return success_response({"message": "Nothing to delete", "deleted": False})

    deleted = await storage.delete(bucket, path)
    return success_response({"message": "File deleted", "deleted": deleted})
