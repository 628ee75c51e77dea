import structlog
from typing import Awaitable, Callable, Dict, List, Optional
from enum import Enum

import openai
import anthropic
import google.generativeai as genai

from ..exceptions import LLMServiceError

logger = structlog.get_logger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


DEFAULT_FALLBACK_ORDER = (LLMProvider.OPENAI, LLMProvider.GOOGLE, LLMProvider.ANTHROPIC)

GenerateFn = Callable[[str, str, float, int], Awaitable[str]]


class LLMService:
    """
    Single-completion text generation over OpenAI, Gemini and Claude.

    Only providers with an API key are registered. A call tries the preferred
    provider first and then the rest in fallback order; the first non-failing
    reply wins.
    """

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        google_api_key: Optional[str] = None,
        openai_model_name: str = "gpt-4-turbo-preview",
        anthropic_model_name: str = "claude-3-haiku-20240307",
        google_model_name: str = "gemini-1.5-flash",
        fallback_order=DEFAULT_FALLBACK_ORDER,
    ):
        self.openai_model_name = openai_model_name
        self.anthropic_model_name = anthropic_model_name
        self.google_model_name = google_model_name
        self.fallback_order = tuple(fallback_order)

        self.openai_client = None
        self.anthropic_client = None
        self.google_client = None

        if openai_api_key:
            try:
                self.openai_client = openai.AsyncOpenAI(api_key=openai_api_key)
            except Exception as e:
                logger.warning("openai_client_init_failed", error=str(e))

        if anthropic_api_key:
            try:
                self.anthropic_client = anthropic.AsyncAnthropic(api_key=anthropic_api_key)
            except Exception as e:
                logger.warning("anthropic_client_init_failed", error=str(e))

        if google_api_key:
            try:
                genai.configure(api_key=google_api_key)
                self.google_client = genai.GenerativeModel(self.google_model_name)
            except Exception as e:
                logger.warning("google_client_init_failed", error=str(e))

        logger.info("llm_service_initialized", providers=[p.value for p in self.get_available_providers()])

    @classmethod
    def from_settings(cls, settings) -> "LLMService":
        return cls(
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            google_api_key=settings.google_api_key,
            openai_model_name=settings.openai_model_name,
            anthropic_model_name=settings.anthropic_model_name,
            google_model_name=settings.google_model_name,
        )

    def _generators(self) -> Dict[LLMProvider, GenerateFn]:
        return {
            LLMProvider.OPENAI: self._generate_openai,
            LLMProvider.ANTHROPIC: self._generate_anthropic,
            LLMProvider.GOOGLE: self._generate_google,
        }

    def provider_order(self, preferred_provider: Optional[LLMProvider] = None) -> List[LLMProvider]:
        """Available providers in the order a call will try them."""
        order = list(self.fallback_order)
        if preferred_provider in order:
            order.remove(preferred_provider)
            order.insert(0, preferred_provider)
        available = set(self.get_available_providers())
        return [provider for provider in order if provider in available]

    async def generate_with_fallback(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 1000,
        preferred_provider: Optional[LLMProvider] = None
    ) -> str:
        providers = self.provider_order(preferred_provider)
        if not providers:
            raise LLMServiceError("No LLM provider configured. Set OPENAI_API_KEY, GOOGLE_API_KEY or ANTHROPIC_API_KEY.")

        generators = self._generators()
        errors = []
        for provider in providers:
            try:
                result = await generators[provider](system_prompt, user_prompt, temperature, max_tokens)
            except LLMServiceError as e:
                logger.warning("llm_provider_failed", provider=provider.value, error=str(e))
                errors.append(f"{provider.value}: {str(e)}")
                continue

            logger.info("llm_generation_completed", provider=provider.value, response_length=len(result))
            return result

        raise LLMServiceError(f"All LLM providers failed ({'; '.join(errors)})")

    async def _generate_openai(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = await self.openai_client.chat.completions.create(
                model=self.openai_model_name,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt}
                ]
            )
            return response.choices[0].message.content or ""

        except openai.AuthenticationError as e:
            raise LLMServiceError(f"OpenAI authentication failed: {str(e)}")
        except openai.RateLimitError as e:
            raise LLMServiceError(f"OpenAI rate limit exceeded: {str(e)}")
        except Exception as e:
            raise LLMServiceError(f"OpenAI generation failed: {str(e)}")

    async def _generate_anthropic(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = await self.anthropic_client.messages.create(
                model=self.anthropic_model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": user_prompt}
                ]
            )
            return response.content[0].text

        except Exception as e:
            raise LLMServiceError(f"Anthropic generation failed: {str(e)}")

    async def _generate_google(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            generation_config = genai.types.GenerationConfig(
                temperature=temperature,
                max_output_tokens=max_tokens
            )

            # Gemini takes a single prompt
            response = await self.google_client.generate_content_async(
                f"{system_prompt}\n\nUser: {user_prompt}",
                generation_config=generation_config
            )
            return response.text

        except Exception as e:
            raise LLMServiceError(f"Google generation failed: {str(e)}")

    def get_available_providers(self) -> List[LLMProvider]:
        clients = {
            LLMProvider.OPENAI: self.openai_client,
            LLMProvider.ANTHROPIC: self.anthropic_client,
            LLMProvider.GOOGLE: self.google_client,
        }
        return [provider for provider, client in clients.items() if client is not None]
