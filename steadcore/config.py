import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Content
    CONFIG_PATH: str = "../config"
    CONFIG_SOURCE: Literal["snapshot", "yaml"] = "snapshot"
    JSON_SNAPSHOT_NAME: str = "config.json"
    BINARY_SNAPSHOT_NAME: str = "config.bin.gz"

    # Verification diagnostics
    FUZZY_ITEM_THRESHOLD: float = 0.35
    FUZZY_PLANT_THRESHOLD: float = 0.2
    FUZZY_MAX_SUGGESTIONS: int = 5

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False

    @field_validator("FUZZY_ITEM_THRESHOLD", "FUZZY_PLANT_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("fuzzy search thresholds must be in (0, 1]")
        return v

    @field_validator("FUZZY_MAX_SUGGESTIONS")
    @classmethod
    def validate_max_suggestions(cls, v: int) -> int:
        if v < 1:
            raise ValueError("FUZZY_MAX_SUGGESTIONS must be at least 1")
        return v

    @property
    def binary_snapshot_path(self) -> str:
        return f"{self.CONFIG_PATH}/{self.BINARY_SNAPSHOT_NAME}"


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    if "CONFIG_PATH" not in settings.model_fields_set:
        logger.warning("CONFIG_PATH not set, defaulting to %s", settings.CONFIG_PATH)
    logger.debug("Config source: %s", settings.CONFIG_SOURCE)
    return settings
