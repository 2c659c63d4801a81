from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union
import json
from pathlib import Path


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./cafeshift.db"
    CREATE_TABLES_ON_STARTUP: bool = False

    # Session cookie (signed JWT referencing a server-side session row)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "cafeshift_session"
    SESSION_MAX_AGE_HOURS: int = 24
    SESSION_COOKIE_SECURE: bool = False

    # CORS
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:5173"

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Try to parse as JSON first
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except (json.JSONDecodeError, ValueError):
                pass
            # If not JSON, split by comma
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    # Locale
    DEFAULT_TIMEZONE: str = "Asia/Manila"
    CURRENCY_SYMBOL: str = "₱"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path(__file__).parent.parent.parent / "logs"
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )


settings = Settings()
