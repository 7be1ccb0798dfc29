"""Configuration for ROI Tracker."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration.

    Every field can be overridden with an ``ROI_TRACKER_`` environment
    variable, e.g. ``ROI_TRACKER_PORT=9000``.
    """

    model_config = SettingsConfigDict(env_prefix="ROI_TRACKER_")

    data_file: str = Field(default=".local/roi-tracker/store.json")
    storage_key: str = Field(default="roi-tracker-tasks")
    undo_timeout_seconds: float = Field(default=5.0, gt=0)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")
