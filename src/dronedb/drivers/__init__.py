"""
Database drivers module

Backend drivers live in their own modules (``dronedb.drivers.mysql``,
``.postgres``, ``.sqlserver``, ``.oracle``, ``.sqlite``) and are imported
by the registry when a connection first needs them.
"""

from .base import AbstractDriver, ExecutionResult
from .registry import (
    DRIVER_ALIASES,
    DRIVER_BACKENDS,
    DriverBackend,
    DriverKind,
    DriverRegistry,
    load_driver_class,
)

__all__ = [
    "AbstractDriver",
    "ExecutionResult",
    "DRIVER_ALIASES",
    "DRIVER_BACKENDS",
    "DriverBackend",
    "DriverKind",
    "DriverRegistry",
    "load_driver_class",
]
