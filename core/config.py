# core/config.py
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///canteen.db"
    pool_size: int = 2
    max_overflow: int = 8
    pool_timeout: float = 10.0
    echo: bool = False
    log_level: str = "INFO"
    app_name: str = "Canteen"
    host: str = "127.0.0.1"
    port: int = 3001


def load_settings() -> Settings:
    """Read settings from the environment (and .env, if present)."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///canteen.db"),
        pool_size=int(os.getenv("DB_POOL_SIZE", "2")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "8")),
        pool_timeout=float(os.getenv("DB_POOL_TIMEOUT", "10")),
        echo=os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        app_name=os.getenv("APP_NAME", "Canteen"),
        host=os.getenv("APP_HOST", "127.0.0.1"),
        port=int(os.getenv("APP_PORT", "3001")),
    )
