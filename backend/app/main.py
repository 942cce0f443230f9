"""
FastAPI application entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api.api import api_router
from app.api.endpoints import health
from app.core.logger import logger
from app.db.database import init_db
from app.middleware.correlation import CorrelationMiddleware
from app.services.background_jobs import shutdown_scheduler, start_scheduler
from app.web import pages

app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(api_router, prefix="/api")
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(pages.router)

# ── Correlation ID middleware (must be added before CORS) ─────────────────────
app.add_middleware(CorrelationMiddleware)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


# ── Startup / Shutdown ────────────────────────────────────────────────────────

@app.on_event("startup")
async def startup_event():
    init_db()
    # expired sessions and reset tokens
    start_scheduler()
    logger.info("%s started", settings.APP_NAME)


@app.on_event("shutdown")
async def shutdown_event():
    shutdown_scheduler()
    logger.info("%s shutdown", settings.APP_NAME)
