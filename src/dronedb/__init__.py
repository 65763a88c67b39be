"""
dronedb - database access layer

Driver abstraction over MySQL, PostgreSQL, SQL Server, Oracle and SQLite,
a registry resolving named connection profiles to live drivers, and table
gateways that build parameterized CRUD statements for entities.

Usage:
    from dataclasses import dataclass
    from typing import Optional

    from dronedb import DriverRegistry, Entity, TableGateway

    @dataclass
    class Item(Entity):
        table_name = "ITEMS"

        ID: Optional[int] = None
        DESCRIPTION: Optional[str] = None

    with DriverRegistry({"default": {"driver": "mysql", "host": "localhost", ...}}) as registry:
        gateway = TableGateway(Item(), registry)
        gateway.insert({"ID": 1, "DESCRIPTION": "a"})
        rows = gateway.select({"ID": 1})
"""

from .config import DriverProfile, Settings, get_settings, setup_logging
from .db import AbstractTableGateway, Entity, GuardedTableGateway, TableGateway
from .drivers import AbstractDriver, DriverKind, DriverRegistry, ExecutionResult
from .exceptions import (
    ConfigurationError,
    DriverConnectionError,
    DriverStateError,
    DroneDbError,
    EmptyBufferError,
    InvalidIdentifierError,
    InvalidQueryError,
    PreconditionError,
    SchemaMismatchError,
    SecurityError,
    TransactionError,
    UnsupportedDriverError,
    ValidationError,
)
from .sql import SQLFunction, SQLValueEncoder, Statement
from .validation import QuickValidator, check_rule

__all__ = [
    "DriverProfile",
    "Settings",
    "get_settings",
    "setup_logging",
    "AbstractTableGateway",
    "Entity",
    "GuardedTableGateway",
    "TableGateway",
    "AbstractDriver",
    "DriverKind",
    "DriverRegistry",
    "ExecutionResult",
    "ConfigurationError",
    "DriverConnectionError",
    "DriverStateError",
    "DroneDbError",
    "EmptyBufferError",
    "InvalidIdentifierError",
    "InvalidQueryError",
    "PreconditionError",
    "SchemaMismatchError",
    "SecurityError",
    "TransactionError",
    "UnsupportedDriverError",
    "ValidationError",
    "SQLFunction",
    "SQLValueEncoder",
    "Statement",
    "QuickValidator",
    "check_rule",
]

__version__ = "0.1.0"
