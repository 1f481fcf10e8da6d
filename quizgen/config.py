from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    api_host: str = Field(default="localhost", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    # Gemini credentials, one per subscription tier
    gemini_api_key_free: Optional[str] = Field(default=None, description="Gemini API key used for Free tier users")
    gemini_api_key_basic: Optional[str] = Field(default=None, description="Gemini API key used for Basic tier users")
    gemini_api_key_pro: Optional[str] = Field(default=None, description="Gemini API key used for Pro tier users")

    # Gemini models, one per subscription tier
    gemini_free_model: str = Field(default="gemini-2.5-flash-lite", description="Model for Free tier")
    gemini_basic_model: str = Field(default="gemini-2.5-flash", description="Model for Basic tier")
    gemini_pro_model: str = Field(default="gemini-3-pro-preview", description="Model for Pro tier")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini REST base URL"
    )
    gemini_request_timeout_seconds: Optional[float] = Field(
        default=300.0,
        description="Timeout for a single Gemini HTTP call (None disables it)"
    )

    # Quiz generation
    generation_temperature: float = Field(default=0.7, description="Sampling temperature for quiz generation")
    retry_max_attempts: int = Field(default=5, description="Maximum attempts for a single-shot Gemini call")
    retry_base_delay_ms: int = Field(default=1000, description="Base delay for exponential backoff in milliseconds")
    retry_jitter_ms: int = Field(default=1000, description="Upper bound of random jitter added on 429/503")
    stream_estimated_total_bytes: int = Field(
        default=2000,
        description="Heuristic size of a streamed response, used only for progress estimation"
    )

    # YouTube transcripts
    transcript_languages: list[str] = Field(default_factory=lambda: ["en"], description="Preferred caption languages")

    frontend_url: str = Field(default="*", description="Origin allowed on SSE responses")
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
        validation_alias=AliasChoices("CORS_ALLOWED_ORIGINS", "ALLOWED_ORIGINS"),
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("allowed_origins", "transcript_languages", mode="before")
    @classmethod
    def parse_csv_list(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    class Config:
        env_file = [".env", ".env.local"]  # .env.local takes precedence over .env
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
