from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import  AsyncSession
from skolara.common.logging_setup import get_logger
from skolara.common.utils import success_response
from skolara.db.dependencies import get_session

logger = get_logger("skolara.common")

home_router = APIRouter()


@home_router.get("/health")
async def health_check(session:AsyncSession=Depends(get_session)):
    try:
        await session.execute(select(1))
    except (SQLAlchemyError, OSError):
        logger.exception("health.db_unreachable")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database connection error")

    return success_response({"status": "healthy"})
