import logging
from datetime import time

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1 import api_router
from .config import get_settings
from .core.cache import get_cache
from .core.database import create_tables
from .services.daily_image_service import find_similar_news, run_daily_image_job
from .services.image_storage import ImageStorageService
from .services.scheduler import DailyScheduler
from .services.telegram_bot import TelegramBot


def apply_logging_preferences():
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s"
)

apply_logging_preferences()

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def build_scheduler(settings) -> DailyScheduler:
    return DailyScheduler(
        job=run_daily_image_job,
        run_at=time(settings.schedule_hour, settings.schedule_minute),
        name="daily_image",
    )


def build_telegram_bot(settings) -> TelegramBot:
    storage = ImageStorageService(settings.image_storage_path)
    return TelegramBot(
        token=settings.telegram_bot_token,
        latest_image=storage.get_latest_image,
        similar_news=find_similar_news,
        api_url=settings.telegram_api_url,
        poll_timeout_seconds=settings.telegram_poll_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    apply_logging_preferences()
    logger.info("Starting News Image API", version="0.1.0")
    try:
        create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = build_scheduler(settings)
        scheduler.start()

    bot = None
    if settings.telegram_enabled and settings.telegram_bot_token:
        bot = build_telegram_bot(settings)
        bot.start()
    elif settings.telegram_enabled:
        logger.warning("Telegram bot disabled: TELEGRAM_BOT_TOKEN is not set")

    app.state.scheduler = scheduler
    app.state.telegram_bot = bot

    yield

    if bot:
        await bot.stop()
    if scheduler:
        await scheduler.stop()
    await get_cache().close()
    logger.info("Shutting down News Image API")


def create_application() -> FastAPI:
    app = FastAPI(
        title="News Image",
        description="Daily news summaries turned into generated images, with an admin API and a Telegram bot",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        )

    # Health check at root
    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
