from enum import StrEnum
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from ratewindow.core.keys import KEY_PREFIX

class StrategyType(StrEnum):
    TRANSACTION = "transaction"
    SCRIPT = "script"

class Settings(BaseSettings):
    app_name: str = "Ratewindow API"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = KEY_PREFIX
    rate_limit_strategy: StrategyType = StrategyType.TRANSACTION
    log_level: str = "INFO"
    # Logs every raw store reply at debug level
    log_store_replies: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

@lru_cache
def get_settings() -> Settings:
    return Settings()
