from fastapi import APIRouter, Depends, HTTPException, Query
import structlog

from ..schemas import (
    DailyImageResponse,
    FillVectorDBRequest,
    FillVectorDBResponse,
    GenerateImageRequest,
    SimilarNewsResponse,
)
from ...dependencies import get_daily_image_service, verify_admin_api_key
from ....exceptions import ExternalServiceError, StorageError, ValidationError, WorkflowError
from ....services.daily_image_service import DailyImageService

logger = structlog.get_logger(__name__)

router = APIRouter(dependencies=[Depends(verify_admin_api_key)])


@router.post("/generate-image", response_model=DailyImageResponse)
async def generate_image(
    request: GenerateImageRequest,
    service: DailyImageService = Depends(get_daily_image_service)
):
    """Generate (or return the stored) daily image for a date"""
    if not request.date:
        raise HTTPException(status_code=400, detail="Date is required")

    try:
        return await service.generate_daily_image(request.date, force=request.force)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (WorkflowError, ExternalServiceError, StorageError) as e:
        logger.error("generate_image_endpoint_failed", date=request.date, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate image")


@router.post("/fill-vector-db", response_model=FillVectorDBResponse)
async def fill_vector_db(
    request: FillVectorDBRequest,
    service: DailyImageService = Depends(get_daily_image_service)
):
    """Analyze one day's news and store its embedding"""
    if not request.date:
        raise HTTPException(status_code=400, detail="Date is required")

    try:
        return await service.fill_vector_db(request.date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (WorkflowError, ExternalServiceError) as e:
        logger.error("fill_vector_db_endpoint_failed", date=request.date, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fill vector DB")


@router.get("/similar-news", response_model=SimilarNewsResponse)
async def similar_news(
    query: str = Query(..., min_length=1, description="Free-text query"),
    limit: int = Query(5, ge=1, le=50, description="Number of matches"),
    service: DailyImageService = Depends(get_daily_image_service)
):
    """Past daily analyses closest to the query"""
    try:
        matches = await service.query_similar_news(query, limit=limit)
    except ExternalServiceError as e:
        logger.error("similar_news_endpoint_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to query similar news")
    return {"query": query, "matches": matches}
