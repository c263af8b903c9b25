"""Client configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Backend
    BACKEND_URL: str = "http://localhost:5000/api"
    REQUEST_TIMEOUT: float = 30.0

    # Durable session storage (token / user / role)
    STORAGE_PATH: Path = Path.home() / ".hrms_client" / "session.json"

    # Files
    DOWNLOAD_DIR: Path = Path.cwd()
    MAX_LEAVE_DOCUMENTS: int = 5

    # Lists
    DEFAULT_PAGE_SIZE: int = 10

    # Geolocation: fallback used when the position is denied or unavailable
    GEOLOCATION_TIMEOUT: float = 5.0
    FALLBACK_LATITUDE: float = 12.9716
    FALLBACK_LONGITUDE: float = 77.5946

    # App
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
