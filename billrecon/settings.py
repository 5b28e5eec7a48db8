import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="BILLRECON_", extra="ignore")

    db_url: str = "sqlite:///billrecon.db"

    log_level: str = "INFO"
    log_json: bool = False

    timezone: str = "Asia/Muscat"
    currency_code: str = "OMR"
    currency_decimals: int = 3


settings = Settings()
