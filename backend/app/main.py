"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.config import settings
from app.database import engine, get_db
from app.error_handlers import register_error_handlers
from app.models import Base
from app.services.file_storage import file_storage

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the storage root on startup."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    file_storage.ensure_root()
    logger.info("Storage root: %s", file_storage.root)

    yield

    await engine.dispose()


app = FastAPI(
    title="File Catalog API",
    version="1.0.0",
    description="Catalog, query and download files kept under a storage root.",
    lifespan=lifespan,
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

register_error_handlers(app)


@app.get("/api/health")
async def health_check():
    """Verify API and database connectivity."""
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
    except Exception as e:
        return {"status": "error", "database": str(e)}


@app.get("/api/status")
async def status():
    """Simple liveness endpoint."""
    return {
        "status": "ok",
        "message": "API is online and running",
        "timestamp": datetime.now(timezone.utc),
    }


# Register routers
from app.routes.files import router as files_router
app.include_router(files_router)
