from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[2]  # backend/


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "dev"
    API_PREFIX: str = "/api"
    DATA_DIR: Path = BASE_DIR / "_data"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3002,http://localhost:3003"

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[Path] = None

    # resource locks (seconds)
    LOCK_MAX_WAIT_SECONDS: float = 5.0
    LOCK_POLL_INTERVAL_SECONDS: float = 0.1
    LOCK_STALE_AFTER_SECONDS: float = 30.0
    LOCK_SWEEP_INTERVAL_SECONDS: float = 60.0

    BACKUP_KEEP: int = 5
    BACKUP_INTERVAL_SECONDS: float = 3600.0

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def backup_dir(self) -> Path:
        return self.DATA_DIR / "backups"


settings = Settings()
