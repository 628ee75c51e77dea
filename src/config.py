from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

class Settings(BaseSettings):

    api_host: str = Field(default="localhost", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    # Admin API
    admin_api_key: Optional[str] = Field(default=None, description="Shared secret expected in the X-API-Key header")

    database_url: str = Field(
        default="sqlite:///./news_image.db",
        description="Database URL",
        examples=["sqlite:///./news_image.db"]
    )

    # LLM Provider API Keys
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key (chat, images, embeddings)")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    google_api_key: Optional[str] = Field(default=None, description="Google API key for Gemini")

    # LLM Model Names
    openai_model_name: str = Field(default="gpt-4-turbo-preview", description="OpenAI chat model name")
    anthropic_model_name: str = Field(default="claude-3-haiku-20240307", description="Anthropic Claude model name")
    google_model_name: str = Field(default="gemini-1.5-flash-latest", description="Google Gemini model name")
    preferred_llm_provider: str = Field(default="openai", description="Provider tried first by the workflow")
    analysis_temperature: float = Field(default=0.3, description="LLM temperature for news analysis")
    prompt_temperature: float = Field(default=0.7, description="LLM temperature for image prompt writing")
    llm_max_tokens: int = Field(default=1000, description="Max tokens per LLM call")

    # News source
    news_api_key: Optional[str] = Field(default=None, description="newsapi.org API key")
    news_api_url: str = Field(default="https://newsapi.org/v2/everything", description="NewsAPI search endpoint")
    news_query: str = Field(default="news", description="Search query sent to NewsAPI")
    news_page_size: int = Field(default=50, description="Maximum articles fetched per run")
    news_request_timeout_seconds: int = Field(default=30, description="Timeout for news search requests")

    # Image generation
    image_provider: str = Field(default="openai", description="Image provider: openai or stability")
    openai_image_model: str = Field(default="dall-e-3", description="OpenAI image model")
    stability_api_key: Optional[str] = Field(default=None, description="Stability AI API key")
    stability_api_url: str = Field(default="https://api.stability.ai", description="Stability AI base URL")
    stability_engine_id: str = Field(default="stable-diffusion-xl-1024-v1-0", description="Stability engine")
    image_size: int = Field(default=1024, description="Square output edge in pixels")
    image_steps: int = Field(default=30, description="Diffusion step count")
    image_guidance_scale: float = Field(default=7.5, description="Classifier-free guidance scale")
    image_request_timeout_seconds: int = Field(default=120, description="Timeout for image provider calls")
    image_storage_path: str = Field(
        default="./images",
        description="Directory for generated daily images",
        validation_alias=AliasChoices("IMAGE_STORAGE_PATH", "IMAGE_STORAGE_DIR"),
    )

    # Vector database
    pinecone_api_key: Optional[str] = Field(default=None, description="Pinecone API key")
    pinecone_index_name: str = Field(default="news-analysis", description="Pinecone index holding daily analyses")
    embedding_model_name: str = Field(default="text-embedding-3-small", description="OpenAI embedding model")

    # Cache
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    cache_ttl_seconds: int = Field(default=60 * 60 * 24, description="Default cache TTL (24 hours)")

    # Scheduler
    scheduler_enabled: bool = Field(default=True, description="Run the daily image job inside the API process")
    schedule_hour: int = Field(default=13, description="Local hour the daily job fires")
    schedule_minute: int = Field(default=5, description="Local minute the daily job fires")

    # Telegram bot
    telegram_enabled: bool = Field(default=True, description="Start the Telegram bot when a token is configured")
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    telegram_api_url: str = Field(default="https://api.telegram.org", description="Telegram Bot API base URL")
    telegram_poll_timeout_seconds: int = Field(default=30, description="Long-poll timeout for getUpdates")

    allowed_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins",
        validation_alias=AliasChoices("CORS_ALLOWED_ORIGINS", "ALLOWED_ORIGINS"),
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("image_provider", "preferred_llm_provider")
    @classmethod
    def normalize_provider(cls, value: str) -> str:
        return value.strip().lower()

    class Config:
        env_file = [".env", ".env.local"]  # .env.local takes precedence over .env
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
