from datetime import datetime
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from skolara.auth.constants import logger
from skolara.common.utils import now
from skolara.schema.full_schema import OtpVerification, Student


async def student_by_phone(session, phone_number: int) -> Optional[Student]:
    stmt = select(Student).where(Student.phone_number == phone_number)
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def student_by_id(session, student_id: int) -> Optional[Student]:
    stmt = select(Student).where(Student.id == student_id)
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def get_or_create_student(session, phone_number: int) -> Student:
    student = await student_by_phone(session, phone_number)
    if student:
        logger.debug("student.exists", extra={"student_id": student.id})
        return student

    student = Student(phone_number=phone_number, signed_up=False)
    session.add(student)
    try:
        await session.flush()
    except IntegrityError:
        # a concurrent send-otp for the same phone won the insert
        await session.rollback()
        student = await student_by_phone(session, phone_number)
        if student is None:
            raise
        return student

    logger.info("student.created", extra={"student_id": student.id})
    return student


async def save_student_tokens(session, student_id: int, *, auth_hash: Optional[str], auth_expires_at: Optional[datetime],
                              refresh_hash: Optional[str], refresh_expires_at: Optional[datetime], **values):
    stmt = (
        update(Student)
        .where(Student.id == student_id)
        .values(
            auth_token_hash=auth_hash,
            auth_token_expires_at=auth_expires_at,
            refresh_token_hash=refresh_hash,
            refresh_token_expires_at=refresh_expires_at,
            updated_at=now(),
            **values,
        )
    )
    await session.execute(stmt)


async def update_auth_token(session, student_id: int, auth_hash: str, auth_expires_at: datetime):
    stmt = (
        update(Student)
        .where(Student.id == student_id)
        .values(auth_token_hash=auth_hash, auth_token_expires_at=auth_expires_at, updated_at=now())
    )
    await session.execute(stmt)


async def clear_auth_token(session, student_id: int):
    stmt = (
        update(Student)
        .where(Student.id == student_id)
        .values(auth_token_hash=None, auth_token_expires_at=now(), updated_at=now())
    )
    await session.execute(stmt)


async def clear_all_tokens(session, student_id: int):
    stmt = (
        update(Student)
        .where(Student.id == student_id)
        .values(auth_token_hash=None, auth_token_expires_at=now(),
                refresh_token_hash=None, refresh_token_expires_at=None, updated_at=now())
    )
    await session.execute(stmt)


async def complete_student_account(session, student_id: int, first_name: str, last_name: str,
                                   email: Optional[str], college_course) -> Optional[Student]:
    stmt = (
        update(Student)
        .where(Student.id == student_id, Student.signed_up.is_(False))
        .values(
            first_name=first_name,
            last_name=last_name,
            email=email,
            college_course=college_course,
            signed_up=True,
            updated_at=now(),
        )
        .returning(Student.id)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def otp_record_by_mobile(session, mobile: str) -> Optional[OtpVerification]:
    stmt = select(OtpVerification).where(OtpVerification.mobile == mobile)
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def record_otp_sent(session, mobile: str, otp_hash: Optional[str] = None,
                          otp_expires_at: Optional[datetime] = None) -> OtpVerification:
    """
    Create or refresh the phone's otp record for a new send.
    Anything else pending on the session is rolled back if a concurrent first send wins the insert,
    so callers commit their own writes before this.
    """
    sent_at = now()
    record = await otp_record_by_mobile(session, mobile)
    if record is None:
        record = OtpVerification(mobile=mobile, send_count=0, attempts=0)
        session.add(record)
        try:
            await session.flush()
        except IntegrityError:
            # a concurrent send-otp for the same phone created the row first
            await session.rollback()
            record = await otp_record_by_mobile(session, mobile)
            if record is None:
                raise

    record.is_active = True
    record.verified = False
    record.send_count = (record.send_count or 0) + 1
    record.otp_hash = otp_hash
    record.otp_expires_at = otp_expires_at
    record.last_sent_at = sent_at
    record.updated_at = sent_at
    await session.flush()
    return record


async def record_otp_attempt(session, mobile: str, verified: bool):
    """Failed checks count towards `attempts`; a success marks the record verified."""
    if verified:
        values = {"verified": True, "verified_at": now(), "otp_hash": None, "otp_expires_at": None}
    else:
        values = {"attempts": OtpVerification.attempts + 1}
    stmt = update(OtpVerification).where(OtpVerification.mobile == mobile).values(updated_at=now(), **values)
    await session.execute(stmt)
