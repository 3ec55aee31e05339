from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from skolara.colleges.constants import logger
from skolara.colleges.dependencies import college_validation, status_filter, validate_college_id
from skolara.colleges.models import CollegeStatusIn
from skolara.colleges.repository import (create_college, delete_college, get_college, list_colleges,
                                         set_college_status, update_college)
from skolara.colleges.services import cleanup_college_files, college_detail, college_row
from skolara.common.pagination import PageParams, page_params, pagination_meta
from skolara.common.utils import success_response
from skolara.db.dependencies import get_session
from skolara.media.storage import get_storage

colleges_public_router = APIRouter()
colleges_admin_router = APIRouter()


@colleges_public_router.get("")
async def get_active_colleges(params: PageParams = Depends(page_params), session: AsyncSession = Depends(get_session)):
    colleges, total = await list_colleges(session, params, status_filter="ACTIVE")
    return success_response({
        "colleges": [college_row(c) for c in colleges],
        "pagination": pagination_meta(params.page, params.limit, total),
    })


@colleges_public_router.get("/{college_id}")
async def get_active_college(college_id: int = Depends(validate_college_id),
                             session: AsyncSession = Depends(get_session)):
    college = await get_college(session, college_id, active_only=True)
    if not college:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="College not found")
    return success_response({"college": college_detail(college)})


@colleges_admin_router.get("")
async def get_colleges(params: PageParams = Depends(page_params), status_value: str = Depends(status_filter),
                       session: AsyncSession = Depends(get_session)):
    colleges, total = await list_colleges(session, params, status_filter=status_value)
    return success_response({
        "colleges": [college_row(c) for c in colleges],
        "pagination": pagination_meta(params.page, params.limit, total),
        "filters": {"search": params.search_term or "", "status": status_value},
    })


@colleges_admin_router.get("/{college_id}")
async def get_college_by_id(college_id: int = Depends(validate_college_id),
                            session: AsyncSession = Depends(get_session)):
    college = await get_college(session, college_id)
    if not college:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="College not found")
    return success_response({"college": college_detail(college)})


@colleges_admin_router.post("", status_code=status.HTTP_201_CREATED)
async def add_college(data: dict = Depends(college_validation), session: AsyncSession = Depends(get_session)):
    logger.info("college.create.attempt", extra={"college_name": data["name"]})
    college = await create_college(session, data)
    await session.commit()

    logger.info("college.create.success", extra={"college_id": college.id})
    return success_response({"message": "College created successfully", "college": college_detail(college)},
                            status.HTTP_201_CREATED)


@colleges_admin_router.put("/{college_id}")
async def replace_college(college_id: int = Depends(validate_college_id), data: dict = Depends(college_validation),
                          session: AsyncSession = Depends(get_session)):
    updated = await update_college(session, college_id, data)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="College not found")
    await session.commit()

    college = await get_college(session, college_id)
    logger.info("college.update.success", extra={"college_id": college_id})
    return success_response({"message": "College updated successfully", "college": college_detail(college)})


@colleges_admin_router.patch("/{college_id}/status")
async def change_college_status(payload: CollegeStatusIn, college_id: int = Depends(validate_college_id),
                                session: AsyncSession = Depends(get_session)):
    updated = await set_college_status(session, college_id, payload.status)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="College not found")
    await session.commit()

    logger.info("college.status.changed", extra={"college_id": college_id, "active": payload.status})
    return success_response({"message": "College status updated", "id": college_id, "status": payload.status})


@colleges_admin_router.delete("/{college_id}")
async def remove_college(background_tasks: BackgroundTasks, college_id: int = Depends(validate_college_id),
                         session: AsyncSession = Depends(get_session), storage=Depends(get_storage)):
    deleted = await delete_college(session, college_id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="College not found")
    await session.commit()

    logo, images = deleted
    background_tasks.add_task(cleanup_college_files, storage, college_id, logo, images)

    logger.info("college.delete.success", extra={"college_id": college_id})
    return success_response({"message": "College deleted successfully", "id": college_id})
