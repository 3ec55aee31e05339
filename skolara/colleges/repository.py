from typing import Optional
from sqlalchemy import delete, func, or_, select, update
from skolara.common.pagination import PageParams, escape_like
from skolara.common.utils import now
from skolara.schema.full_schema import College


def _college_filters(search: Optional[str], status_filter: str):
    filters = []
    if search:
        pattern = f"{escape_like(search)}%"
        filters.append(or_(College.name.ilike(pattern, escape="\\"), College.location.ilike(pattern, escape="\\")))
    if status_filter == "ACTIVE":
        filters.append(College.status.is_(True))
    elif status_filter == "INACTIVE":
        filters.append(College.status.is_(False))
    return filters


async def list_colleges(session, params: PageParams, status_filter: str = "ALL"):
    """Page of colleges (newest first) and the total matching count."""
    filters = _college_filters(params.search_term, status_filter)

    count_stmt = select(func.count()).select_from(College).where(*filters)
    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        select(College)
        .where(*filters)
        .order_by(College.created_at.desc(), College.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    res = await session.execute(stmt)
    return res.scalars().all(), total


async def get_college(session, college_id: int, active_only: bool = False) -> Optional[College]:
    stmt = select(College).where(College.id == college_id)
    if active_only:
        stmt = stmt.where(College.status.is_(True))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def create_college(session, data: dict) -> College:
    college = College(**data)
    session.add(college)
    await session.flush()
    await session.refresh(college)
    return college


async def update_college(session, college_id: int, data: dict) -> Optional[int]:
    stmt = (
        update(College)
        .where(College.id == college_id)
        .values(**data, updated_at=now())
        .returning(College.id)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def set_college_status(session, college_id: int, active: bool) -> Optional[int]:
    stmt = (
        update(College)
        .where(College.id == college_id)
        .values(status=active, updated_at=now())
        .returning(College.id)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def delete_college(session, college_id: int):
    """Deletes the row; returns (logo, images) of the deleted college or None."""
    stmt = (
        delete(College)
        .where(College.id == college_id)
        .returning(College.logo, College.images)
    )
    res = await session.execute(stmt)
    row = res.one_or_none()
    if row is None:
        return None
    return row[0], row[1] or []
