from sqlalchemy import select, update
from skolara.schema.full_schema import OtpVerification, Student

url_prefix = "/api/v1"


async def request_otp(ac, phone):
    resp = await ac.post(f"{url_prefix}/auth/send-otp", json={"phone_number": phone})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["otp"]


async def login_with_otp(ac, phone):
    otp = await request_otp(ac, phone)
    resp = await ac.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": phone, "otp": otp})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def signed_up_student(ac, phone, first_name="Asha", last_name="Rao", email="Asha@Example.com",
                            college_course="ENGINEERING"):
    """Runs send-otp -> verify-otp -> create-account; returns the create-account data."""
    verified = await login_with_otp(ac, phone)
    resp = await ac.post(f"{url_prefix}/auth/create-account", json={
        "auth_token": verified["auth_token"],
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "college_course": college_course,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def load_student(session_factory, student_id):
    async with session_factory() as session:
        res = await session.execute(select(Student).where(Student.id == student_id))
        return res.scalar_one()


async def update_student(session_factory, student_id, **values):
    async with session_factory() as session:
        await session.execute(update(Student).where(Student.id == student_id).values(**values))
        await session.commit()


async def load_otp_record(session_factory, mobile):
    async with session_factory() as session:
        res = await session.execute(select(OtpVerification).where(OtpVerification.mobile == mobile))
        return res.scalar_one_or_none()


async def update_otp_record(session_factory, mobile, **values):
    async with session_factory() as session:
        await session.execute(update(OtpVerification).where(OtpVerification.mobile == mobile).values(**values))
        await session.commit()
