"""
Gate Pass API

Check-in backend for event gates. Scanners look a pass up by phone,
booking ID or buyer name and admit part or all of the group; totals are
accumulated per booking and never exceed the purchased capacity unless an
admin PIN is presented.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from passgate.core.config import get_settings
from passgate.core.logging import setup_logging, get_logger
from passgate.core.metrics import metrics_endpoint
from passgate.api.errors import register_exception_handlers
from passgate.api.router import api_router
from passgate.api.middleware import GateRequestMiddleware
from passgate.infrastructure.redis_client import get_redis, close_redis, get_redis_stats
from passgate.services.strategy_factory import get_entry_lock

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    lock = get_entry_lock()
    logger.info(
        "gate_api_starting",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        entry_lock=type(lock).__name__,
        overrides_enabled=bool(settings.ADMIN_PIN),
    )

    if not settings.ADMIN_PIN:
        logger.warning("admin_pin_unset", message="Admin overrides will be refused")

    if settings.REDIS_ENABLED and await get_redis() is None:
        logger.warning("redis_unavailable", message="Check-ins rely on version checks only")

    yield

    await close_redis()
    logger.info("gate_api_stopped")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Gate check-in API with capacity-safe accumulation",
        lifespan=lifespan,
    )

    # Scanner apps are served from other origins
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    application.add_middleware(GateRequestMiddleware)
    register_exception_handlers(application)
    application.include_router(api_router)

    @application.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "redis": await get_redis_stats(),
        }

    @application.get("/metrics", tags=["Health"], include_in_schema=False)
    def metrics():
        return metrics_endpoint()

    @application.get("/", tags=["Root"])
    async def root():
        return {"message": f"Welcome to {settings.APP_NAME}", "docs": "/docs"}

    return application


app = create_app()
