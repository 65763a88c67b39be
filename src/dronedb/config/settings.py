"""Settings, connection profiles and logging configuration"""

import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file"""

    config_path: str = "config/database.yaml"
    log_level: str = "INFO"
    default_connection: str = "default"

    model_config = SettingsConfigDict(
        env_prefix="DRONEDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class DriverProfile(BaseModel):
    """
    Named connection profile

    Accepts both the plain key names and the ``db*`` names used by older
    configuration files (``dbhost``, ``dbuser``, ``dbpass``, ...).
    """

    model_config = ConfigDict(extra="forbid")

    driver: str
    host: Optional[str] = Field(None, validation_alias=AliasChoices("host", "dbhost"))
    port: Optional[int] = Field(None, validation_alias=AliasChoices("port", "dbport"))
    user: Optional[str] = Field(None, validation_alias=AliasChoices("user", "dbuser"))
    password: Optional[str] = Field(None, validation_alias=AliasChoices("password", "dbpass"))
    database: Optional[str] = Field(None, validation_alias=AliasChoices("database", "dbname"))
    charset: str = Field("utf8", validation_alias=AliasChoices("charset", "dbchar"))
    auto_connect: bool = True

    def describe(self) -> str:
        """Short description for log lines, never includes the password"""
        location = self.host or "local"
        if self.port:
            location = f"{location}:{self.port}"
        return f"{self.driver}://{self.user or ''}@{location}/{self.database or ''}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def load_yaml_config(config_path: str = "config/database.yaml") -> Dict[str, Any]:
    """Load YAML configuration file"""
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def load_profiles(config: Mapping[str, Any]) -> Dict[str, DriverProfile]:
    """
    Build connection profiles from the ``connections`` section of a config

    Args:
        config: Parsed configuration mapping

    Returns:
        Profiles keyed by connection name

    Raises:
        ConfigurationError: If the section or one of its entries is malformed
    """
    connections = config.get("connections") or {}
    if not isinstance(connections, Mapping):
        raise ConfigurationError("'connections' must be a mapping of connection names to profiles")

    profiles = {}
    for name, entry in connections.items():
        profiles[name] = to_profile(name, entry)
    return profiles


def to_profile(name: str, entry: Any) -> DriverProfile:
    """Coerce a raw mapping (or an existing profile) into a DriverProfile"""
    if isinstance(entry, DriverProfile):
        return entry
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Profile '{name}' must be a mapping")
    try:
        return DriverProfile.model_validate(dict(entry))
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid profile '{name}': {e}") from e


def setup_logging(level: Optional[str] = None) -> None:
    """Route loguru output to stderr at the configured level"""
    logger.remove()
    logger.add(sys.stderr, level=level or get_settings().log_level)
