from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "ScheduleDiff"
    debug: bool = True
    database_url: str = "sqlite:///./schedulediff.db"  # env DATABASE_URL
    default_time_tolerance_minutes: float = 0
    default_detect_conflicts: bool = True
    default_include_statistics: bool = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
