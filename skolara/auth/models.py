from typing import Optional
from pydantic import BaseModel, Field
from skolara.schema.full_schema import CollegeCourse


class SendOtpIn(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=32, examples=["+919876543210"])

class VerifyOtpIn(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=32)
    otp: str = Field(..., min_length=1, max_length=12)

class RefreshTokenIn(BaseModel):
    auth_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)

class CreateAccountIn(BaseModel):
    auth_token: str = Field(..., min_length=1)
    first_name: str = Field(..., max_length=128)
    last_name: str = Field(..., max_length=128)
    email: Optional[str] = Field(None, max_length=320)
    college_course: CollegeCourse
