from .daily_image import DailyImage

__all__ = ["DailyImage"]
