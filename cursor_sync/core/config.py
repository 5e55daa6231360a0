from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache
import os


class Settings(BaseSettings):
    """
    Application settings and configuration
    """

    # Application
    app_name: str = "Cursor Sync Server"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", "4000"))

    # Environment detection
    environment: str = os.getenv("ENVIRONMENT", "development")

    # CORS
    allowed_origins: List[str] = ["http://localhost:3000"]

    # Synchronization protocol
    throttle_interval_ms: int = 50  # one accepted cursor_move per connection per interval
    interpolation_window_ms: int = 50
    object_move_throttle_ms: int = 30  # client-side only, the server never throttles object_move

    # Coordinate bounds, inclusive on both ends
    coord_min: float = 0
    coord_max: float = 10000

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    )
    log_rotation: str = "50 MB"
    log_retention: str = "14 days"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Create settings instance with caching
@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings
    """
    return Settings()


settings = get_settings()
