from functools import lru_cache
from pathlib import Path

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    app_name: str = "Repair Workflow Service"
    database_url: str = "sqlite+aiosqlite:///./data/repairflow.db"
    data_root: Path = Path("data")
    allow_origins: list[AnyHttpUrl | str] = ["*"]
    worker_group_name: str = "repair-workers"
    lead_worker_group_name: str | None = None
    lead_priority_minutes: int = 0
    note_max_length: int = 2000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    @property
    def data_path(self) -> Path:
        return self.data_root if self.data_root.is_absolute() else Path.cwd() / self.data_root

    @property
    def lead_priority_enabled(self) -> bool:
        return bool(self.lead_worker_group_name) and self.lead_priority_minutes > 0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return application settings instance."""

    settings = Settings()
    settings.data_path.mkdir(parents=True, exist_ok=True)
    return settings
