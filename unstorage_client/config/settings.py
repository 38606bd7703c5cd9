from typing import Dict
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator


# =======================
# Logging Settings
# =======================
class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# =======================
# Main Settings
# =======================
class Settings(BaseSettings):
    """Client settings, read from UNSTORAGE_* environment variables and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="UNSTORAGE_",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = "http://localhost:3000"
    # Static headers sent with every request, e.g. {"Authorization": "Bearer ..."}
    headers: Dict[str, str] = Field(default_factory=dict)
    # Seconds, handed to httpx as-is
    timeout: float = 30.0
    # Surface non-2xx (other than 404 on reads) as errors instead of "absent"
    raise_on_error_status: bool = False
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("timeout", mode="after")
    @classmethod
    def check_timeout(cls, v):
        """Timeout must be positive."""
        if v <= 0:
            raise ValueError("timeout must be greater than zero")
        return v


settings = Settings()
