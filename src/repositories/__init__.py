from .daily_image_repository import DailyImageRepository

__all__ = ["DailyImageRepository"]
