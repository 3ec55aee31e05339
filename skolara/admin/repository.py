from typing import Optional
from sqlalchemy import String, cast, func, or_, select
from skolara.common.pagination import PageParams, escape_like
from skolara.schema.full_schema import AppliedCollege, College, CollegeCourse, OtpVerification, Student


def _prefix(term: str) -> str:
    return f"{escape_like(term)}%"


def _contains(term: str) -> str:
    return f"%{escape_like(term)}%"


async def list_signed_up_students(session, params: PageParams, course: Optional[CollegeCourse] = None):
    filters = [
        Student.signed_up.is_(True),
        Student.first_name.is_not(None),
        Student.last_name.is_not(None),
    ]
    if course is not None:
        filters.append(Student.college_course == course)
    if params.search_term:
        pattern = _prefix(params.search_term)
        filters.append(or_(
            Student.first_name.ilike(pattern, escape="\\"),
            Student.last_name.ilike(pattern, escape="\\"),
            Student.email.ilike(pattern, escape="\\"),
        ))

    total = (await session.execute(select(func.count(Student.id)).where(*filters))).scalar_one()

    stmt = (
        select(Student)
        .where(*filters)
        .order_by(Student.created_at.desc(), Student.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    res = await session.execute(stmt)
    return res.scalars().all(), total


def _application_filters(search: Optional[str]):
    if not search:
        return []
    pattern = _contains(search)
    return [or_(
        Student.first_name.ilike(pattern, escape="\\"),
        Student.last_name.ilike(pattern, escape="\\"),
        Student.email.ilike(pattern, escape="\\"),
        cast(Student.phone_number, String).ilike(pattern, escape="\\"),
    )]


def _applications_query():
    return (
        select(AppliedCollege, Student, College.name)
        .join(Student, AppliedCollege.student_id == Student.id)
        .outerjoin(College, AppliedCollege.college_id == College.id)
    )


async def list_applications(session, params: PageParams):
    """(application, student, college name) rows, newest first, and the total count."""
    filters = _application_filters(params.search_term)

    count_stmt = (
        select(func.count(AppliedCollege.id))
        .join(Student, AppliedCollege.student_id == Student.id)
        .where(*filters)
    )
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        _applications_query()
        .where(*filters)
        .order_by(AppliedCollege.created_at.desc(), AppliedCollege.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    res = await session.execute(stmt)
    return res.all(), total


async def get_application(session, application_id: int):
    stmt = _applications_query().where(AppliedCollege.id == application_id)
    res = await session.execute(stmt)
    return res.one_or_none()


async def list_phone_logins(session, params: PageParams):
    filters = []
    if params.search_term:
        filters.append(OtpVerification.mobile.ilike(_contains(params.search_term), escape="\\"))

    total = (await session.execute(select(func.count(OtpVerification.id)).where(*filters))).scalar_one()

    stmt = (
        select(OtpVerification)
        .where(*filters)
        .order_by(OtpVerification.created_at.desc(), OtpVerification.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    res = await session.execute(stmt)
    return res.scalars().all(), total
