"""
Configuration loader for BGG Stats.
Loads environment variables from .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv


# Load .env from the project root
PROJECT_ROOT = Path(__file__).parent.parent
ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(ENV_PATH)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""
    BGG_BASE_URL: str = os.getenv("BGG_BASE_URL", "https://boardgamegeek.com/boardgame")
    BGG_TIMEOUT_MS: int = int(os.getenv("BGG_TIMEOUT_MS", "60000"))
    BROWSER_HEADLESS: bool = _env_bool("BROWSER_HEADLESS", True)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_FILE: bool = _env_bool("LOG_TO_FILE", False)
    LOG_JSON: bool = _env_bool("LOG_JSON", False)


# Singleton instance
config = Config()
