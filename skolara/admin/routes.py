from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from skolara.admin.constants import logger
from skolara.admin.dependencies import course_filter, validate_application_id
from skolara.admin.repository import get_application, list_applications, list_phone_logins, list_signed_up_students
from skolara.admin.services import application_row, phone_login_row, user_row
from skolara.auth.sms_provider import get_sms_provider
from skolara.common.pagination import PageParams, page_params, pagination_meta
from skolara.common.utils import success_response
from skolara.db.dependencies import get_session
from skolara.media.storage import get_storage
from skolara.schema.full_schema import CollegeCourse

admin_router = APIRouter()


@admin_router.get("/users")
async def get_users(params: PageParams = Depends(page_params), course: Optional[CollegeCourse] = Depends(course_filter),
                    session: AsyncSession = Depends(get_session)):
    students, total = await list_signed_up_students(session, params, course)
    return success_response({
        "users": [user_row(s) for s in students],
        "pagination": pagination_meta(params.page, params.limit, total),
        "filters": {"search": params.search, "course": course.value if course else "ALL"},
    })


@admin_router.get("/applications")
async def get_applications(params: PageParams = Depends(page_params), session: AsyncSession = Depends(get_session),
                           storage=Depends(get_storage)):
    rows, total = await list_applications(session, params)
    return success_response({
        "message": "Applications fetched successfully",
        "applications": [application_row(storage, *row) for row in rows],
        "pagination": pagination_meta(params.page, params.limit, total),
    })


@admin_router.get("/applications/{application_id}")
async def get_application_by_id(application_id: int = Depends(validate_application_id),
                                session: AsyncSession = Depends(get_session), storage=Depends(get_storage)):
    row = await get_application(session, application_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
    return success_response({"application": application_row(storage, *row)})


@admin_router.get("/loggedin-phones")
async def get_loggedin_phones(params: PageParams = Depends(page_params), session: AsyncSession = Depends(get_session)):
    records, total = await list_phone_logins(session, params)
    return success_response({
        "message": "Logged-in phones fetched successfully",
        "phones": [phone_login_row(r) for r in records],
        "pagination": pagination_meta(params.page, params.limit, total),
    })


@admin_router.get("/sms-provider/status")
async def sms_provider_status(sms_provider=Depends(get_sms_provider)):
    missing = sms_provider.missing_settings()
    if missing["account_sid"] or missing["auth_token"] or missing["phone_number"]:
        logger.warning("sms.status.not_configured", extra={"missing": [k for k, v in missing.items() if v]})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail={"message": "Missing SMS provider settings", "missing": missing})

    account_status = await sms_provider.fetch_account_status()
    return success_response(account_status)
