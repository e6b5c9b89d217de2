from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MONGO_URI = (
    "mongodb://localhost:27027,localhost:27028,localhost:27029/"
    "?replicaSet=rs1&readPreference=secondary"
)
DEFAULT_DATABASE = "TransactionDemo"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Run configuration loaded from environment variables."""

    mongo_uri: str = DEFAULT_MONGO_URI
    database: str = Field(default=DEFAULT_DATABASE, validation_alias="MONGO_DATABASE")

    # Delete both collections' documents before the run
    reset: bool = Field(default=False, validation_alias="DEMO_RESET")
    # Wait for Enter before exiting
    pause: bool = Field(default=True, validation_alias="DEMO_PAUSE")

    log_level: LogLevel = "WARNING"

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value
