"""Configuration module"""

from .settings import (
    DriverProfile,
    Settings,
    get_settings,
    load_profiles,
    load_yaml_config,
    setup_logging,
    to_profile,
)

__all__ = [
    "DriverProfile",
    "Settings",
    "get_settings",
    "load_profiles",
    "load_yaml_config",
    "setup_logging",
    "to_profile",
]
