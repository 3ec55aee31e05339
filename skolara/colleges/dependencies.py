from fastapi import HTTPException, Query, status
from skolara.colleges.constants import STATUS_FILTERS, logger
from skolara.colleges.models import CollegeIn


def validate_college_id(college_id: str) -> int:
    try:
        value = int(college_id)
    except (TypeError, ValueError):
        logger.warning("college.invalid_id", extra={"college_id": college_id})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid college ID")
    if value < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid college ID")
    return value


async def college_validation(payload: CollegeIn) -> dict:
    name = payload.name.strip()
    location = payload.location.strip()
    if not name or not location:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name and location are required")

    data = payload.model_dump()
    data.update(
        name=name,
        location=location,
        logo=(payload.logo or "").strip() or None,
        images=[img.strip() for img in payload.images if img and img.strip()],
    )
    return data


def status_filter(status_: str = Query("ALL", alias="status")) -> str:
    value = status_.strip().upper() or "ALL"
    if value not in STATUS_FILTERS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=f"status must be one of {', '.join(STATUS_FILTERS)}")
    return value
