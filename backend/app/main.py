"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.config import settings
from app.database import async_session, engine, get_db
from app.models import Base
from app.services.system_config import SystemConfigStore

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, seed defaults and load the system settings."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    from app.services.seed_defaults import seed_all_defaults
    async with async_session() as session:
        await seed_all_defaults(session)

    # Handlers read this copy; it is refreshed only by the admin settings routes
    app.state.system_config = SystemConfigStore()
    async with async_session() as session:
        await app.state.system_config.reload(session)

    logger.info("Sheet Charts API started")
    yield

    await engine.dispose()


app = FastAPI(
    title="Sheet Charts API",
    version="1.0.0",
    description="Upload spreadsheets, derive charts and manage them.",
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
)


@app.get("/api/health")
async def health_check():
    """Verify API and database connectivity."""
    try:
        async for db in get_db():
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
    except Exception as e:
        return {"status": "error", "database": str(e)}


# Register routers
from app.routes.auth import router as auth_router
from app.routes.files import router as files_router
from app.routes.charts import router as charts_router
from app.routes.admin import router as admin_router
app.include_router(auth_router)
app.include_router(files_router)
app.include_router(charts_router)
app.include_router(admin_router)
