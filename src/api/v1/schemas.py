from typing import Optional, List

from pydantic import BaseModel, Field


class GenerateImageRequest(BaseModel):
    date: Optional[str] = Field(None, description="Calendar date (YYYY-MM-DD)")
    force: bool = Field(False, description="Re-run the workflow even if an image exists for the date")


class FillVectorDBRequest(BaseModel):
    date: Optional[str] = Field(None, description="Calendar date (YYYY-MM-DD)")


class DailyImageResponse(BaseModel):
    date: str
    analysis: str
    image_path: str
    summary: Optional[str] = None
    themes: List[str] = Field(default_factory=list)
    image_prompt: Optional[str] = None


class FillVectorDBResponse(BaseModel):
    date: str
    status: str
    message: str


class SimilarNewsMatch(BaseModel):
    date: str
    analysis: str
    score: float


class SimilarNewsResponse(BaseModel):
    query: str
    matches: List[SimilarNewsMatch]
