"""
Configuration management for Image Relay.

Uses pydantic-settings to validate a YAML configuration file, with
IMAGE_RELAY_* environment variables taking precedence over file values.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx
import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path("config.yaml")


class Settings(BaseSettings):
    """Application settings, read once at startup and never mutated."""

    # API Configuration
    api_url: str
    api_key: str = ""
    api_key_header: str = "x-api-key"
    image_field: str = "imageFile"
    form_fields: Dict[str, str] = {"background.color": "FFFFFF"}
    request_timeout: Optional[float] = None  # None waits forever

    # Directory layout
    source_dir: Path = Path("source")
    destination_dir: Path = Path("destination")
    processed_dir: Path = Path("processed")

    # Watch Configuration
    settle_grace_period: float = 2.0  # seconds, 0 disables
    settle_poll_interval: float = 0.25
    ignored_suffixes: List[str] = [".tmp", ".swp", ".part", ".partial", ".crdownload"]
    skip_hidden: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="IMAGE_RELAY_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values read from the YAML file
        return (env_settings, init_settings)

    @field_validator("api_url")
    @classmethod
    def _require_api_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("api_url must not be empty")

        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"api_url is not a valid URL: {e}") from e

        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("api_url must be an http(s) URL with a host")
        return value

    @field_validator("api_key")
    @classmethod
    def _require_ascii_api_key(cls, value: str) -> str:
        # Header values go over the wire as ASCII
        if not value.isascii():
            raise ValueError("api_key must contain ASCII characters only")
        return value

    @field_validator("form_fields", mode="before")
    @classmethod
    def _stringify_form_fields(cls, value: Any) -> Any:
        # YAML turns margin: 10 into an int; the API only receives strings
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value

    @field_validator("ignored_suffixes")
    @classmethod
    def _normalise_suffixes(cls, value: List[str]) -> List[str]:
        return [s.lower() if s.startswith(".") else f".{s.lower()}" for s in value]

    def get_directories(self) -> list[Path]:
        """Directories that must exist before watching starts."""
        return [self.source_dir, self.destination_dir, self.processed_dir]


def load_settings(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> Settings:
    """
    Load settings from a YAML document.

    Args:
        path: Configuration file path

    Returns:
        Validated Settings instance

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    path = Path(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration {path}: {e}", path=path) from e

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {path} must be a mapping", path=path)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration {path}: {e}", path=path) from e
