import logging
from contextlib import asynccontextmanager
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

@asynccontextmanager
async def write_guard(db: AsyncSession, action: str):
    """
    Wrap a unit of writes so storage failures roll back and surface as a
    single "Failed to <action>" error instead of a partial commit.
    """
    try:
        yield
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Storage error while trying to %s", action)
        raise HTTPException(500, f"Failed to {action}")
