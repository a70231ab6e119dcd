# src/core/config/settings.py

from datetime import date
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Holdings engine configuration, read from the environment or the .env file
    at the repository root.
    """
    APP_NAME: str = "Holdings Ledger Engine API"
    APP_VERSION: str = "0.1.0"
    DEBUG_MODE: bool = False # enables uvicorn reload and FastAPI debug

    API_V1_STR: str = "/api/v1"

    LOG_LEVEL: str = "INFO"

    # Ledger replay
    DECIMAL_PRECISION: int = 28
    EXCLUDED_SECURITY_NAMES: list[str] = ["CASH", "TAX", "TDS", "TAX DEDUCTED AT SOURCE"]
    BONUS_SENTINEL_DATE: date = date(1900, 1, 1) # effective date of bonuses without an ex-date
    REJECT_UNDATED_BONUSES: bool = False

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[3] / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

settings = Settings()
