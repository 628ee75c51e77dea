from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx
import openai
import structlog

from ..exceptions import ConfigurationError, ImageGenerationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ImageGenerationParams:
    size: int = 1024
    steps: int = 30
    guidance_scale: float = 7.5

    @property
    def size_label(self) -> str:
        return f"{self.size}x{self.size}"


class ImageGenerator(ABC):
    @abstractmethod
    async def generate(self, prompt: str, params: ImageGenerationParams) -> str:
        """Return a handle to the generated image (http(s) URL or data: URL)."""
        pass


class OpenAIImageGenerator(ImageGenerator):
    """DALL-E backend. Only the size parameter applies; steps and guidance are ignored."""

    def __init__(self, api_key: Optional[str], model: str = "dall-e-3", client: Optional[openai.AsyncOpenAI] = None):
        if client is None:
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY is required for OpenAI image generation")
            client = openai.AsyncOpenAI(api_key=api_key)
        self.client = client
        self.model = model

    async def generate(self, prompt: str, params: ImageGenerationParams) -> str:
        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=params.size_label,
                quality="standard",
            )
        except openai.OpenAIError as e:
            raise ImageGenerationError(f"OpenAI image generation failed: {str(e)}")

        if not response.data or not response.data[0].url:
            raise ImageGenerationError("OpenAI image generation returned no image")

        logger.info("image_generated", provider="openai", model=self.model, size=params.size_label)
        return response.data[0].url


class StabilityImageGenerator(ImageGenerator):
    """Stability AI text-to-image backend; honours size, steps and guidance scale."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.stability.ai",
        engine_id: str = "stable-diffusion-xl-1024-v1-0",
        timeout_seconds: int = 120,
    ):
        if not api_key:
            raise ConfigurationError("STABILITY_API_KEY is required for Stability image generation")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.engine_id = engine_id
        self.timeout_seconds = timeout_seconds

    async def generate(self, prompt: str, params: ImageGenerationParams) -> str:
        url = f"{self.base_url}/v1/generation/{self.engine_id}/text-to-image"
        payload = {
            "text_prompts": [{"text": prompt}],
            "cfg_scale": params.guidance_scale,
            "height": params.size,
            "width": params.size,
            "steps": params.steps,
            "samples": 1,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ImageGenerationError(
                f"Stability image generation failed with HTTP {e.response.status_code}: {e.response.text[:200]}"
            )
        except httpx.HTTPError as e:
            raise ImageGenerationError(f"Stability image generation request failed: {str(e)}")

        artifacts = data.get("artifacts") or []
        if not artifacts or not artifacts[0].get("base64"):
            raise ImageGenerationError("Stability image generation returned no image")

        logger.info("image_generated", provider="stability", engine=self.engine_id, steps=params.steps)
        return f"data:image/png;base64,{artifacts[0]['base64']}"


def create_image_generator(settings) -> ImageGenerator:
    if settings.image_provider == "stability":
        return StabilityImageGenerator(
            api_key=settings.stability_api_key,
            base_url=settings.stability_api_url,
            engine_id=settings.stability_engine_id,
            timeout_seconds=settings.image_request_timeout_seconds,
        )
    if settings.image_provider == "openai":
        return OpenAIImageGenerator(api_key=settings.openai_api_key, model=settings.openai_image_model)
    raise ConfigurationError(f"Unknown image provider: {settings.image_provider}")
