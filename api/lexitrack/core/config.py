from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from pathlib import Path
import logging
import os

_logger = logging.getLogger(__name__)

# Look for .env in api directory (parent of lexitrack directory)
api_dir = Path(__file__).parent.parent.parent
env_path = api_dir / ".env"

if env_path.exists():
    load_dotenv(env_path, override=False)
    _logger.info(f"Loaded .env file from: {env_path}")
else:
    # Fallback to current directory
    current_env = Path(".env")
    if current_env.exists():
        load_dotenv(current_env, override=False)
        _logger.info(f"Loaded .env file from: {current_env.absolute()}")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = ""

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    # OpenAI-compatible Responses endpoint used for turn analysis and tutoring
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    analysis_model: str = "gpt-4.1-mini-2025-04-14"
    tutor_model: str = "gpt-4.1-mini-2025-04-14"
    llm_timeout_seconds: int = 60

    # Language used when a request does not name one
    default_language: str = "ru"

    # Learning job queue
    queue_max_attempts: int = 3
    queue_backoff_seconds: float = 2.0
    queue_keep_completed: int = 100
    queue_keep_failed: int = 50

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Hosting platforms provide DATABASE_URL uppercase
        if not kwargs.get("database_url"):
            kwargs["database_url"] = os.getenv("DATABASE_URL", "")
        if not kwargs.get("openai_api_key"):
            kwargs["openai_api_key"] = os.getenv("OPENAI_API_KEY", "")
        super().__init__(**kwargs)


# Create settings instance
settings = Settings()

# Validate required DATABASE_URL
if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is required")
