import httpx
import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from src.exceptions import ConfigurationError, ImageGenerationError
from src.services.image_generation_service import (
    ImageGenerationParams,
    OpenAIImageGenerator,
    StabilityImageGenerator,
    create_image_generator,
)


class TestOpenAIImageGenerator:
    async def test_generate_returns_url(self):
        client = MagicMock()
        client.images.generate = AsyncMock(return_value=MagicMock(data=[MagicMock(url="https://img/1.png")]))
        generator = OpenAIImageGenerator(api_key=None, client=client)

        url = await generator.generate("a city at dawn", ImageGenerationParams())

        assert url == "https://img/1.png"
        kwargs = client.images.generate.await_args.kwargs
        assert kwargs["size"] == "1024x1024"
        assert kwargs["n"] == 1

    async def test_empty_response_raises(self):
        client = MagicMock()
        client.images.generate = AsyncMock(return_value=MagicMock(data=[]))
        generator = OpenAIImageGenerator(api_key=None, client=client)

        with pytest.raises(ImageGenerationError):
            await generator.generate("prompt", ImageGenerationParams())

    def test_key_required_without_client(self):
        with pytest.raises(ConfigurationError):
            OpenAIImageGenerator(api_key=None)


class TestStabilityImageGenerator:
    @pytest.fixture(autouse=True)
    def setup_generator(self):
        self.generator = StabilityImageGenerator(api_key="test-stability-key")

    @patch('httpx.AsyncClient')
    async def test_generate_returns_data_url(self, mock_client):
        response = MagicMock()
        response.json.return_value = {"artifacts": [{"base64": "aGVsbG8=", "finishReason": "SUCCESS"}]}
        response.raise_for_status = MagicMock()
        post = AsyncMock(return_value=response)
        mock_client.return_value.__aenter__.return_value.post = post

        url = await self.generator.generate("prompt", ImageGenerationParams(size=1024, steps=30, guidance_scale=7.5))

        assert url == "data:image/png;base64,aGVsbG8="
        payload = post.await_args.kwargs["json"]
        assert payload["steps"] == 30
        assert payload["cfg_scale"] == 7.5
        assert payload["width"] == payload["height"] == 1024

    @patch('httpx.AsyncClient')
    async def test_request_error_raises(self, mock_client):
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(
            side_effect=httpx.ConnectError("refused")
        )

        with pytest.raises(ImageGenerationError):
            await self.generator.generate("prompt", ImageGenerationParams())


def test_unknown_provider_rejected():
    settings = MagicMock()
    settings.image_provider = "midjourney"

    with pytest.raises(ConfigurationError):
        create_image_generator(settings)
