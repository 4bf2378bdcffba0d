import logging
import os
from pathlib import Path
from typing import Annotated, Union

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

log_format = logging.Formatter("%(asctime)s : %(levelname)s - %(message)s")

# root logger
root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)

# standard stream handler
stream_handler = logging.StreamHandler()
stream_handler.setFormatter(log_format)
root_logger.addHandler(stream_handler)

logger = logging.getLogger(__name__)

# Load .env file from docker/server directory unless overridden
env_path = Path(os.getenv("ENV_FILE", "./docker/server/.env"))
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"Loaded environment from {env_path}")
else:
    logger.warning(f"No .env file found at {env_path}, using process environment")


class Settings(BaseSettings):
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "predictsafe-api"
    ENV: str = "development"

    # Supabase Configuration
    SUPABASE_URL: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_URL", ""),
        description="Supabase project URL"
    )
    SUPABASE_KEY: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_KEY", ""),
        description="Supabase anon/public key"
    )

    # Database Configuration
    DATABASE_URL: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./predictsafe.db"),
        description="Async SQLAlchemy database URL"
    )

    # Server Configuration
    SERVER_HOST: AnyHttpUrl = "https://localhost"
    SERVER_PORT: int = 8001
    SITE_URL: str = "https://predictsafe.com"
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, list[str]]) -> list[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        elif isinstance(v, str):
            return [v]
        raise ValueError(v)

    # Sports data (apifootball.com v3)
    API_FOOTBALL_KEY: str = ""
    API_FOOTBALL_BASE_URL: str = "https://apiv3.apifootball.com"
    API_FOOTBALL_TIMEOUT: float = 20.0
    SYNC_FIXTURE_LIMIT: int = 50

    # SMTP
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM_NAME: str = "PredictSafe"

    # Subscription lifecycle
    DEFAULT_SUBSCRIPTION_DURATION_DAYS: int = 30
    DEFAULT_ACTIVATION_DURATION_DAYS: int = 30
    CORRECT_SCORE_ACTIVATION_DAYS: int = 7
    ENABLE_SIMULATED_GATEWAY: bool = False

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")


settings = Settings()


def validate_production_settings(current: Settings = settings) -> None:
    """Fail fast when a production deployment is missing required keys."""
    for key in ("SUPABASE_URL", "SUPABASE_KEY", "DATABASE_URL"):
        if not getattr(current, key):
            raise ValueError(f"{key} environment variable is required")
