from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..schemas import DailyImageResponse
from ...dependencies import get_daily_image_repository, get_image_storage
from ....exceptions import ValidationError
from ....repositories.daily_image_repository import DailyImageRepository
from ....services.image_storage import ImageStorageService
from ....utils.date_utils import parse_iso_date

router = APIRouter()


@router.get("/latest")
async def get_latest_image(storage: ImageStorageService = Depends(get_image_storage)):
    """Serve the most recent daily image"""
    latest_image = storage.get_latest_image()
    if not latest_image:
        raise HTTPException(status_code=404, detail="No images available yet")
    return FileResponse(latest_image, media_type="image/png")


@router.get("/{date}", response_model=DailyImageResponse)
async def get_daily_image(
    date: str,
    repository: DailyImageRepository = Depends(get_daily_image_repository)
):
    """Stored daily image record for a date"""
    try:
        parse_iso_date(date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    record = repository.get(date)
    if not record:
        raise HTTPException(status_code=404, detail=f"No daily image for {date}")
    return record.to_dict()
