import base64
from pathlib import Path
from typing import Optional

import httpx
import structlog

from ..exceptions import StorageError

logger = structlog.get_logger(__name__)

IMAGE_PREFIX = "image_"
IMAGE_SUFFIX = ".png"


class ImageStorageService:
    def __init__(self, storage_dir: str, download_timeout_seconds: int = 60):
        self.storage_dir = Path(storage_dir)
        self.download_timeout_seconds = download_timeout_seconds

    def image_path_for(self, date: str) -> Path:
        return self.storage_dir / f"{IMAGE_PREFIX}{date}{IMAGE_SUFFIX}"

    async def save_image(self, image_url: str, date: str) -> str:
        """Store the image behind image_url as image_{date}.png and return its path."""
        content = await self._load_bytes(image_url)

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.image_path_for(date)
        try:
            file_path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to write image {file_path}: {str(e)}")

        logger.info("image_saved", path=str(file_path), size_bytes=len(content))
        return str(file_path)

    async def _load_bytes(self, image_url: str) -> bytes:
        if image_url.startswith("data:"):
            try:
                _, encoded = image_url.split(",", 1)
                return base64.b64decode(encoded)
            except ValueError as e:
                raise StorageError(f"Malformed data URL: {str(e)}")

        try:
            async with httpx.AsyncClient(timeout=self.download_timeout_seconds, follow_redirects=True) as client:
                response = await client.get(image_url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to download image: {str(e)}")

    def get_latest_image(self) -> Optional[str]:
        # image_YYYY-MM-DD.png sorts chronologically
        try:
            image_files = sorted(
                path.name for path in self.storage_dir.iterdir()
                if path.name.startswith(IMAGE_PREFIX) and path.name.endswith(IMAGE_SUFFIX)
            )
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("image_listing_failed", path=str(self.storage_dir), error=str(e))
            return None

        if not image_files:
            return None
        return str(self.storage_dir / image_files[-1])
