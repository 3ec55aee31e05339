from typing import List, Optional
from skolara.colleges.constants import logger
from skolara.common.custom_exceptions import ProviderError
from skolara.media.constants import IMAGES_BUCKET, LOGO_BUCKET
from skolara.media.storage import extract_file_path_from_url
from skolara.schema.full_schema import College


def college_row(college: College) -> dict:
    """Fields shown in the colleges table."""
    return {
        "id": college.id,
        "name": college.name,
        "location": college.location,
        "nirf_ranking": college.nirf_ranking,
        "logo": college.logo,
        "status": college.status,
        "created_at": college.created_at,
    }


def college_detail(college: College) -> dict:
    data = college_row(college)
    data.update(
        about=college.about,
        course_and_fees=college.course_and_fees,
        hostel=college.hostel,
        placement_and_scholarship=college.placement_and_scholarship,
        images=college.images or [],
        updated_at=college.updated_at,
    )
    return data


async def cleanup_college_files(storage, college_id: int, logo: Optional[str], images: List[str]):
    """
    Remove a deleted college's files from storage.
    Runs after the response is sent; failures are only logged.
    """
    logo_path = extract_file_path_from_url(logo, LOGO_BUCKET)
    image_paths = [p for p in (extract_file_path_from_url(url, IMAGES_BUCKET) for url in images or []) if p]

    if logo_path:
        try:
            await storage.delete(LOGO_BUCKET, logo_path)
        except ProviderError as e:
            logger.error("college.cleanup.logo_failed", extra={"college_id": college_id, "path": logo_path,
                                                                "error": str(e)})

    if image_paths:
        try:
            await storage.delete_many(IMAGES_BUCKET, image_paths)
        except ProviderError as e:
            logger.error("college.cleanup.images_failed", extra={"college_id": college_id,
                                                                  "count": len(image_paths), "error": str(e)})

    logger.info("college.cleanup.done", extra={"college_id": college_id, "logo": bool(logo_path),
                                               "images": len(image_paths)})
