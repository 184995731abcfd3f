# contentgen/settings.py
import os
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="contentgen")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # search engines
    TAVILY_API_KEY: str | None = None
    EXA_API_KEY: str | None = None
    SEARCH_MAX_RESULTS: int = 10
    TAVILY_SEARCH_DEPTH: str = "basic"
    TAVILY_TIME_RANGE: str = "month"
    EXA_HIGHLIGHT_CHARS: int = 4000
    SEARCH_TIMEOUT: float = 30.0

    # OpenAI-compatible provider
    LLM_API_BASE_URL: str | None = None
    LLM_API_KEY: str | None = None
    LLM_MODEL: str = "gpt-3.5-turbo"

    # Gemini provider
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    LLM_GEMINI_API_BASE_URL: str | None = None

    # publishing
    WECHAT_APP_ID: str = ""
    WECHAT_APP_SECRET: str = ""
    PUBLISH_COMMAND: str = "wenyan publish -f {path}"
    PUBLISH_TIMEOUT: float = 120.0
    PUBLISH_MAX_JOBS: int = 100

    # storage / front-matter
    OUTPUT_DIR: str = "medias/docs"
    COVER_IMAGES: List[str] = Field(
        default_factory=lambda: ["assets/covers/greencover.jpg"]
    )

    # read root-level .env
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME


settings = Settings()
