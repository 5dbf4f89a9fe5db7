from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # API Configuration
    PROJECT_NAME: str = "Symvora Symptom Advisory"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None  # file logging only when set
    LOG_JSON: bool = True

    # CORS (development-stage defaults)
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_METHODS: List[str] = ["POST", "OPTIONS"]
    CORS_ALLOW_HEADERS: List[str] = ["Content-Type"]
    CORS_MAX_AGE: int = 600

    # AI provider (OpenAI-compatible chat completions). Disabled without a key.
    AI_PROVIDER_API_KEY: Optional[str] = None
    AI_PROVIDER_URL: str = "https://api.deepseek.com/chat/completions"
    AI_PROVIDER_MODEL: str = "deepseek-chat"
    AI_PROVIDER_TIMEOUT_SECONDS: float = 30.0

    @property
    def provider_enabled(self) -> bool:
        return bool(self.AI_PROVIDER_API_KEY)

@lru_cache()
def get_settings() -> Settings:
    return Settings()
