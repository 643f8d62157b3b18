from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobledger.api.middleware import AuditMiddleware
from jobledger.api.v1.router import v1_router
from jobledger.common.logging import get_logger, setup_logging
from jobledger.config import settings
from jobledger.db.base import Base
from jobledger.db.models import *  # noqa: F401,F403 - register tables on Base.metadata
from jobledger.db.session import engine

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.CREATE_TABLES_ON_STARTUP:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Ensured database tables exist")
    yield
    await engine.dispose()


app = FastAPI(
    title="JobLedger API",
    description="Contracts, job payments and balances for a client/contractor marketplace",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuditMiddleware)

# API routes
app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "jobledger",
        "version": "1.0.0",
        "env": settings.APP_ENV,
    }
