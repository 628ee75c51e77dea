from sqlalchemy import Column, String, Text, DateTime, JSON
from sqlalchemy.sql import func

from ..core.database import Base


class DailyImage(Base):
    __tablename__ = "daily_images"

    date = Column(String(10), primary_key=True, index=True)  # YYYY-MM-DD
    analysis = Column(Text, nullable=False)
    image_path = Column(String(1000), nullable=False)

    summary = Column(Text)
    themes = Column(JSON)
    image_prompt = Column(Text)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "analysis": self.analysis,
            "image_path": self.image_path,
            "summary": self.summary,
            "themes": list(self.themes or []),
            "image_prompt": self.image_prompt,
        }
