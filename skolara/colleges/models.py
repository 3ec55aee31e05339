from typing import List, Optional
from pydantic import BaseModel, Field


class CollegeIn(BaseModel):
    name: str = Field(..., max_length=255)
    location: str = Field(..., max_length=255)
    about: Optional[str] = None
    course_and_fees: Optional[str] = None
    hostel: Optional[str] = None
    placement_and_scholarship: Optional[str] = None
    nirf_ranking: Optional[int] = Field(None, ge=1)
    logo: Optional[str] = Field(None, max_length=1024)
    images: List[str] = Field(default_factory=list)
    status: bool = True

class CollegeStatusIn(BaseModel):
    status: bool
