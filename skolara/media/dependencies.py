from fastapi import HTTPException, status
from skolara.media.constants import MEDIA_BUCKETS


def validate_bucket(bucket: str) -> str:
    if bucket not in MEDIA_BUCKETS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown bucket '{bucket}'")
    return bucket
