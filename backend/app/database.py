"""Async SQLAlchemy engine and session factory.

Usage in routes:
    from app.database import get_db

    def get_file_service(db: AsyncSession = Depends(get_db)) -> FileService:
        return FileService(FileCatalog(db), file_storage)
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from app.config import settings


def engine_options(database_url: str) -> dict:
    """Pool sizing only applies to server databases; SQLite uses a static pool."""
    if database_url.startswith("sqlite"):
        return {"echo": False}
    return {"echo": False, "pool_size": 10, "max_overflow": 20, "pool_pre_ping": True}


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
