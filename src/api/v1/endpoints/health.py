from datetime import datetime, timezone
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy import text

from ....core.cache import get_cache
from ....core.database import get_db
from ....config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check(
    request: Request,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "database": "unhealthy",
                "error": "Database connectivity failed",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    # Cache outages degrade, they do not fail the service
    cache_status = "healthy" if await get_cache().ping() else "degraded"

    # Background workers exist only when the lifespan started them
    scheduler = getattr(request.app.state, "scheduler", None)
    telegram_bot = getattr(request.app.state, "telegram_bot", None)

    logger.info("Health check passed", database_status="healthy", cache_status=cache_status)

    return {
        "status": "healthy",
        "service": "News Image API",
        "version": "0.1.0",
        "environment": "development" if settings.debug else "production",
        "database": "healthy",
        "cache": cache_status,
        "scheduler": {
            "running": bool(scheduler and scheduler.running),
            "last_run": scheduler.last_run if scheduler else None,
        },
        "telegram_bot": "running" if telegram_bot and telegram_bot.running else "disabled",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
