from typing import List, Optional
from sqlalchemy.orm import Session

from ..models.daily_image import DailyImage


class DailyImageRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, date: str) -> Optional[DailyImage]:
        return self.session.query(DailyImage).filter(DailyImage.date == date).first()

    def upsert(self, date: str, analysis: str, image_path: str, summary: str = None,
               themes: List[str] = None, image_prompt: str = None) -> DailyImage:
        daily_image = self.get(date)
        if daily_image is None:
            daily_image = DailyImage(date=date)
            self.session.add(daily_image)

        daily_image.analysis = analysis
        daily_image.image_path = image_path
        daily_image.summary = summary
        daily_image.themes = list(themes or [])
        daily_image.image_prompt = image_prompt

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(daily_image)
        return daily_image
