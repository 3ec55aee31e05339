from typing import Optional
from skolara.admin.constants import logger
from skolara.common.custom_exceptions import ProviderError
from skolara.schema.full_schema import AppliedCollege, OtpVerification, Student


def user_row(student: Student) -> dict:
    return {
        "id": str(student.id),
        "first_name": student.first_name or "",
        "last_name": student.last_name or "",
        "email": student.email or "",
        "course": student.college_course.value if student.college_course else "",
        "phone_number": str(student.phone_number),
        "created_at": student.created_at,
    }


def signed_document_url(storage, path: Optional[str]) -> Optional[str]:
    """Signed url for a stored document; None when missing or when signing fails."""
    if not path:
        return None
    try:
        return storage.signed_url(path)
    except ProviderError as e:
        logger.warning("application.signed_url_failed", extra={"path": path, "error": str(e)})
        return None


def application_row(storage, application: AppliedCollege, student: Student, college_name: Optional[str]) -> dict:
    name = f"{student.first_name or ''} {student.last_name or ''}".strip()
    return {
        "id": application.id,
        "college_id": application.college_id,
        "college_name": college_name,
        "student_id": student.id,
        "name": name,
        "phone": str(student.phone_number),
        "email": student.email or "",
        "is_active": application.is_active,
        "sslc_url": signed_document_url(storage, application.sslc_path),
        "hsc_url": signed_document_url(storage, application.hsc_path),
        "paid": application.paid,
        "amount": application.amount,
        "created_at": application.created_at,
    }


def phone_login_row(record: OtpVerification) -> dict:
    return {
        "id": record.id,
        "phone_number": record.mobile,
        "is_active": record.is_active,
        "verified": record.verified,
        "send_count": record.send_count,
        "attempts": record.attempts,
        "created_at": record.created_at,
    }
