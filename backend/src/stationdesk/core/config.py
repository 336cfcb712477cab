import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Project Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = Path(
        os.getenv("STATIONDESK_DATA_DIR", str(BASE_DIR.parent / "data"))
    )

    # Database
    DB_NAME: str = "stationdesk.db"

    @property
    def DB_PATH(self) -> Path:
        return self.DATA_DIR / self.DB_NAME

    @property
    def DB_URL(self) -> str:
        # Use forward slashes so Windows paths work in the URL (no backslash escapes)
        path = self.DB_PATH.resolve().as_posix()
        return f"sqlite+aiosqlite:///{path}"

    @property
    def STATIONS_DIR(self) -> Path:
        return self.DATA_DIR / "stations"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_RETENTION: str = "10 days"
    LOG_ROTATION: str = "10 MB"

    # Performance & Debugging
    DB_ECHO: bool = False
    DB_BACKUP_RETENTION: int = 5
    SLOW_REQUEST_THRESHOLD: float = 1.0  # seconds

    # Export & Pagination
    EXPORT_BATCH_SIZE: int = 100
    PAGINATION_DEFAULT_PER_PAGE: int = 25
    PAGINATION_MAX_PER_PAGE: int = 500
    HISTORY_DEFAULT_DAYS: int = 14

    # Upper bound for long synchronous requests (CSV exports), in seconds
    SYNC_LONG_EXECUTION_TIME: int = 600


settings = Settings()

# Ensure data directory exists
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
