import secrets
from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..config import get_settings
from ..exceptions import ConfigurationError
from ..repositories.daily_image_repository import DailyImageRepository
from ..services.daily_image_service import DailyImageService, create_daily_image_service
from ..services.image_storage import ImageStorageService

logger = structlog.get_logger(__name__)


def get_daily_image_repository(db: Session = Depends(get_db)) -> DailyImageRepository:
    return DailyImageRepository(db)


def get_image_storage() -> ImageStorageService:
    return ImageStorageService(get_settings().image_storage_path)


def get_daily_image_service(
    repository: DailyImageRepository = Depends(get_daily_image_repository)
) -> DailyImageService:
    try:
        return create_daily_image_service(get_settings(), repository)
    except ConfigurationError as e:
        logger.error("daily_image_service_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=f"Service not configured: {str(e)}")


async def verify_admin_api_key(
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key")
) -> None:
    expected = get_settings().admin_api_key
    # compare_digest only accepts ASCII str, so compare the encoded bytes
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid API key")
