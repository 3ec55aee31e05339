from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import  AsyncSession
from skolara.db.connection import async_session

async def get_session() -> AsyncGenerator[AsyncSession,None]:
    # the session is opened on first execute and closed when the with block exits
    async with async_session() as session:
        yield session
