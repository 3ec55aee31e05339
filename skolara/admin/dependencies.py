from typing import Optional
from fastapi import HTTPException, Query, status
from skolara.schema.full_schema import CollegeCourse


def course_filter(course: str = Query("", max_length=32)) -> Optional[CollegeCourse]:
    value = course.strip().upper()
    if not value or value == "ALL":
        return None
    try:
        return CollegeCourse(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown course '{course}'")


def validate_application_id(application_id: str) -> int:
    if not application_id.isdigit() or int(application_id) < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid application ID")
    return int(application_id)
