import enum
from datetime import datetime
from typing import List, Optional
from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Enum, ForeignKey, Integer, Text
from sqlmodel import Column, SQLModel, Field, Relationship, String
from skolara.common.utils import now


class CollegeCourse(str, enum.Enum):
    ENGINEERING = "ENGINEERING"
    MEDICAL = "MEDICAL"
    ARTS = "ARTS"
    LAW = "LAW"


class Student(SQLModel, table=True):
    """A phone-verified visitor; becomes a full user once signed_up is set."""
    id: Optional[int] = Field(default=None, primary_key=True)
    phone_number: int = Field(sa_column=Column(BigInteger, unique=True, index=True, nullable=False))  # E.164 digits
    first_name: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    last_name: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))
    college_course: Optional[CollegeCourse] = Field(default=None,
        sa_column=Column(Enum(CollegeCourse, name="college_course"), nullable=True))

    signed_up: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    is_verified_user: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))

    # only hashes of issued tokens are kept
    auth_token_hash: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    auth_token_expires_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))
    refresh_token_hash: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    refresh_token_expires_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))

    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    applications: List["AppliedCollege"] = Relationship(back_populates="student")


class College(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    location: str = Field(sa_column=Column(String(255), nullable=False, index=True))

    # rich-text (html) sections
    about: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    course_and_fees: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    hostel: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    placement_and_scholarship: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))

    nirf_ranking: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))
    logo: Optional[str] = Field(default=None, sa_column=Column(String(1024), nullable=True))
    images: Optional[List[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    status: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))  # active / inactive

    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    applications: List["AppliedCollege"] = Relationship(back_populates="college")


class AppliedCollege(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    college_id: int = Field(sa_column=Column(ForeignKey("college.id", ondelete="CASCADE"), index=True, nullable=False))
    student_id: int = Field(sa_column=Column(ForeignKey("student.id", ondelete="CASCADE"), index=True, nullable=False))
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    amount: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))  # in paise
    paid: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    # storage paths inside the documents bucket, served through signed urls
    sslc_path: Optional[str] = Field(default=None, sa_column=Column(String(1024), nullable=True))
    hsc_path: Optional[str] = Field(default=None, sa_column=Column(String(1024), nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))

    student: "Student" = Relationship(back_populates="applications")
    college: "College" = Relationship(back_populates="applications")


class OtpVerification(SQLModel, table=True):
    """One row per phone that has asked for an otp."""
    id: Optional[int] = Field(default=None, primary_key=True)
    mobile: str = Field(sa_column=Column(String(20), unique=True, index=True, nullable=False))  # formatted E.164
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    verified: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    send_count: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    attempts: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    # only populated when otps are generated locally (dev mode)
    otp_hash: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    otp_expires_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))

    last_sent_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))
    verified_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))
