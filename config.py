import os
import logging
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

class Settings(BaseModel):
    """Runtime settings for LearnHub."""
    api_key: Optional[str] = Field(default=None, description="OpenRouter API key")
    model: str = Field(default="deepseek/deepseek-r1:free", description="Chat-completion model")
    base_url: str = Field(default="https://openrouter.ai/api/v1", description="OpenAI-compatible endpoint")
    app_title: str = Field(default="AI Learning Assistant", description="X-Title header sent to OpenRouter")
    referer: str = Field(default="http://localhost:8501", description="HTTP-Referer header sent to OpenRouter")
    storage_dir: str = Field(default=".learnhub", description="Directory for local key-value storage")
    use_canned_responses: bool = Field(default=False, description="Use canned replies instead of the API")
    log_level: str = Field(default="INFO", description="Logging level name")

def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")

def load_settings() -> Settings:
    """Load settings from the environment (and a .env file if present)."""
    load_dotenv()

    values = {
        "api_key": os.getenv("OPENROUTER_API_KEY") or None,
        "model": os.getenv("LEARNHUB_MODEL"),
        "base_url": os.getenv("LEARNHUB_BASE_URL"),
        "app_title": os.getenv("LEARNHUB_APP_TITLE"),
        "referer": os.getenv("LEARNHUB_REFERER"),
        "storage_dir": os.getenv("LEARNHUB_STORAGE_DIR"),
        "log_level": os.getenv("LEARNHUB_LOG_LEVEL"),
    }
    # Unset variables fall back to the model defaults
    settings = Settings(**{key: value for key, value in values.items() if value is not None})
    settings.use_canned_responses = _env_flag("LEARNHUB_USE_CANNED")
    return settings

def configure_logging(settings: Settings) -> None:
    """Set up root logging for an entry point."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
