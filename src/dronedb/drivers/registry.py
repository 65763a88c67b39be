"""Driver registry resolving named connection profiles to live drivers"""

import importlib
from enum import Enum
from threading import Lock
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Type, Union

from loguru import logger

from ..config.settings import (
    DriverProfile,
    Settings,
    get_settings,
    load_profiles,
    load_yaml_config,
    to_profile,
)
from ..exceptions import ConfigurationError, UnsupportedDriverError
from .base import AbstractDriver


class DriverKind(Enum):
    """Supported database backends"""
    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"
    SQLITE = "sqlite"

    @classmethod
    def from_name(cls, name: str) -> "DriverKind":
        """
        Resolve a configured driver name, aliases included

        Raises:
            UnsupportedDriverError: If the name is not known
        """
        kind = DRIVER_ALIASES.get(str(name).strip().lower())
        if kind is None:
            available = ", ".join(sorted(DRIVER_ALIASES))
            raise UnsupportedDriverError(
                f"The database driver '{name}' does not exist. "
                f"Available drivers: {available}"
            )
        return kind


DRIVER_ALIASES: Dict[str, DriverKind] = {
    "mysql": DriverKind.MYSQL,
    "mysqli": DriverKind.MYSQL,
    "postgres": DriverKind.POSTGRES,
    "postgresql": DriverKind.POSTGRES,
    "pgsql": DriverKind.POSTGRES,
    "sqlserver": DriverKind.SQLSERVER,
    "sqlsrv": DriverKind.SQLSERVER,
    "mssql": DriverKind.SQLSERVER,
    "oracle": DriverKind.ORACLE,
    "oci8": DriverKind.ORACLE,
    "sqlite": DriverKind.SQLITE,
    "sqlite3": DriverKind.SQLITE,
}

class DriverBackend(NamedTuple):
    """Where a driver class lives and the client library it needs"""
    module: str
    class_name: str
    client: str


DRIVER_BACKENDS: Dict[DriverKind, DriverBackend] = {
    DriverKind.MYSQL: DriverBackend("mysql", "MySQLDriver", "PyMySQL"),
    DriverKind.POSTGRES: DriverBackend("postgres", "PostgreSQLDriver", "psycopg2"),
    DriverKind.SQLSERVER: DriverBackend("sqlserver", "SQLServerDriver", "pymssql"),
    DriverKind.ORACLE: DriverBackend("oracle", "OracleDriver", "oracledb"),
    DriverKind.SQLITE: DriverBackend("sqlite", "SQLiteDriver", "sqlite3"),
}


def load_driver_class(kind: DriverKind) -> Type[AbstractDriver]:
    """
    Import the driver class for a backend

    Backend modules are imported on first use; a missing client library
    only fails the connections that use it.

    Raises:
        ConfigurationError: If the backend's client library is not installed
    """
    backend = DRIVER_BACKENDS[kind]
    try:
        module = importlib.import_module(f".{backend.module}", __package__)
    except ImportError as e:
        raise ConfigurationError(
            f"The {kind.value} driver is not available: install the "
            f"'{backend.client}' client library ({e})"
        ) from e
    return getattr(module, backend.class_name)

ProfileLike = Union[DriverProfile, Mapping[str, Any]]


class DriverRegistry:
    """
    Resolves connection names to drivers, one live driver per name

    The registry is the single source of truth for "one connection per
    logical name" within the object that owns it. It is not a pool: a
    driver is built on first resolution and handed back unchanged on every
    later call, with no health checks and no eviction.
    """

    def __init__(
        self,
        profiles: Optional[Mapping[str, ProfileLike]] = None,
        default_name: str = "default"
    ):
        """
        Initialize the registry

        Args:
            profiles: Connection profiles keyed by connection name
            default_name: Connection resolved when no name is given
        """
        self.default_name = default_name
        self._profiles: Dict[str, DriverProfile] = {}
        self._drivers: Dict[str, AbstractDriver] = {}
        self._lock = Lock()

        for name, profile in (profiles or {}).items():
            self.register(name, profile)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DriverRegistry":
        """Build a registry from the YAML file named by the settings"""
        settings = settings or get_settings()
        config = load_yaml_config(settings.config_path)
        profiles = load_profiles(config)
        logger.info(f"Loaded {len(profiles)} connection profile(s) from {settings.config_path}")
        return cls(profiles, default_name=settings.default_connection)

    def register(self, name: str, profile: ProfileLike) -> DriverProfile:
        """
        Add or replace a connection profile

        Args:
            name: Connection name
            profile: Profile or raw profile mapping

        Returns:
            The validated profile

        Raises:
            ConfigurationError: If a live driver already exists under the name
            UnsupportedDriverError: If the profile's driver kind is unknown
        """
        profile = to_profile(name, profile)
        DriverKind.from_name(profile.driver)

        with self._lock:
            if name in self._drivers:
                raise ConfigurationError(
                    f"The connection '{name}' is already established, "
                    "release it before registering a new profile"
                )
            if name in self._profiles:
                logger.warning(f"Replacing connection profile '{name}'")
            self._profiles[name] = profile

        return profile

    def resolve(self, name: Optional[str] = None) -> AbstractDriver:
        """
        Get the driver for a connection name, creating it on first use

        Args:
            name: Connection name, the registry default when omitted

        Returns:
            The cached driver for the name

        Raises:
            ConfigurationError: If no profile exists for the name or the
                backend client library is not installed
            DriverConnectionError: If auto-connect fails on first use
        """
        name = name or self.default_name
        with self._lock:
            if name in self._drivers:
                return self._drivers[name]

            profile = self._profiles.get(name)
            if profile is None:
                raise ConfigurationError(f"The connection '{name}' has not been configured")

            driver_class = load_driver_class(DriverKind.from_name(profile.driver))
            driver = driver_class(profile)
            self._drivers[name] = driver
            logger.info(f"Created {driver.name} driver for connection '{name}'")
            return driver

    def is_resolved(self, name: str) -> bool:
        """Check if a driver has been created for the name"""
        return name in self._drivers

    def names(self) -> List[str]:
        """Get all configured connection names"""
        return list(self._profiles)

    def get_profile(self, name: str) -> DriverProfile:
        """Get the profile registered under a name"""
        try:
            return self._profiles[name]
        except KeyError:
            raise ConfigurationError(f"The connection '{name}' has not been configured") from None

    def release(self, name: str) -> None:
        """
        Close and forget the driver for a name

        Args:
            name: Connection name
        """
        with self._lock:
            driver = self._drivers.pop(name, None)
        if driver is not None:
            driver.close()
            logger.info(f"Released connection '{name}'")

    def close_all(self) -> None:
        """Close every driver created by this registry"""
        with self._lock:
            drivers = list(self._drivers.values())
            self._drivers.clear()
        for driver in drivers:
            driver.close()
        logger.info("Closed all registry connections")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_all()
        return False
