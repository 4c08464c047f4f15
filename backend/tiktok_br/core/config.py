from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "tiktok-br-catalog"
    environment: str = "dev"
    debug: bool = False
    log_level: str = "INFO"

    require_brazil_signals: bool = True
    drop_if_no_image: bool = True
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    trending_max_sold: int = 1000
    trending_max_rating: float = 5

    keyword: str = "baby"
    limit: int = 20


@lru_cache
def get_settings() -> Settings:
    return Settings()
