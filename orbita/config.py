from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    SERVICE_PORT: int = 8080
    MAX_BODY_SIZE: int = 65536
    LOG_JSON: bool = True
    # Secrets: 64-char hex AES-256 key and the OAuth state HMAC secret
    ENCRYPTION_KEY: str = ""
    OAUTH_STATE_SECRET: str = ""
    OAUTH_STATE_TTL_SECONDS: int = 600
    GITHUB_REDIRECT_URI: str | None = None
    # Authentication
    API_KEYS: str = ""  # Comma-separated list of API keys
    REQUIRE_AUTH: bool = False  # Whether to enforce authentication


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
