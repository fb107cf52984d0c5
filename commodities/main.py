import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from commodities.core.config import CORS_ORIGINS, DATABASE_URL, SEED_DEMO_DATA
from commodities.core.database import Base, SessionLocal, engine, ensure_data_dir
from commodities.core.errors import register_exception_handlers
from commodities.core.logging_setup import configure_logging
from commodities.core.startup_checks import ensure_migrations_applied, ensure_tables_exist
from commodities.middleware.observability import ObservabilityMiddleware
import commodities.models  # registers every model on Base.metadata before create_all

from commodities.routers.auth import router as auth_router
from commodities.routers.dashboard import router as dashboard_router
from commodities.routers.health import router as health_router
from commodities.routers.products import router as products_router
from commodities.routers.users import router as users_router
from commodities.services.seed import DEMO_USERS, seed_demo_data
from commodities.services.sessions import get_session_store

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Commodities Inventory API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_exception_handlers(app)


def _seed_if_enabled() -> None:
    if not SEED_DEMO_DATA:
        logger.info("%s demo seed disabled", STARTUP_PREFIX)
        return

    db = SessionLocal()
    try:
        if seed_demo_data(db):
            for entry in DEMO_USERS:
                logger.info("%s demo account email=%s role=%s", STARTUP_PREFIX, entry["email"], entry["role"])
    finally:
        db.close()


def _startup_tasks() -> None:
    try:
        ensure_data_dir()
        if DATABASE_URL.startswith("sqlite"):
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
        ensure_tables_exist(engine)
        _seed_if_enabled()
        purged = get_session_store().purge_expired()
        logger.info("%s ready expired_sessions_purged=%s", STARTUP_PREFIX, purged)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(dashboard_router)
app.include_router(products_router)
