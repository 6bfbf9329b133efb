# poker_ledger/config.py
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./poker_ledger.db"
    env: Literal["dev", "stage", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"
    access_log: bool = True
    sql_echo: bool = False
    auto_init_db: bool = True

    @property
    def is_dev(self) -> bool:
        return self.env == "dev" or self.debug is True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
