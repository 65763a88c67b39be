"""Pytest configuration and fixtures."""

from dataclasses import dataclass
from typing import Any, List, Optional

import pytest

from dronedb import DriverRegistry, Entity, TableGateway

CREATE_ITEMS = "CREATE TABLE ITEMS (ID INTEGER NOT NULL PRIMARY KEY, DESCRIPTION VARCHAR(100))"


@dataclass
class Item(Entity):
    table_name = "ITEMS"

    ID: Optional[int] = None
    DESCRIPTION: Optional[str] = None


class FakeCursor:
    """DB-API cursor stand-in recording executed statements."""

    def __init__(self, connection):
        self.connection = connection
        self.description = None
        self.rowcount = -1
        self._rows: List[Any] = []
        self.closed = False

    def execute(self, sql, params=None):
        self.connection.executed.append((sql, params))
        if self.connection.fail_on and self.connection.fail_on in sql:
            raise self.connection.query_error
        if sql.lstrip().upper().startswith("SELECT"):
            self._rows = list(self.connection.rows)
            self.description = [(name,) for name in self.connection.columns]
            self.rowcount = len(self._rows)
        else:
            self._rows = []
            self.description = None
            self.rowcount = 1

    def fetchall(self):
        return self._rows

    def close(self):
        self.closed = True


class FakeConnection:
    """DB-API connection stand-in for backends without a server."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.executed = []
        self.calls = []
        self.rows: List[Any] = []
        self.columns: List[str] = []
        self.fail_on: Optional[str] = None
        self.query_error: Optional[Exception] = None
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def autocommit(self, enabled):
        self.calls.append(("autocommit", enabled))

    def begin(self):
        self.calls.append(("begin",))

    def commit(self):
        self.calls.append(("commit",))

    def rollback(self):
        self.calls.append(("rollback",))

    def close(self):
        self.closed = True


@pytest.fixture
def fake_connect():
    """Factory for a native connect() replacement returning one FakeConnection."""
    def factory(error: Optional[Exception] = None):
        state = {}

        def connect(*args, **kwargs):
            if error is not None:
                raise error
            state["connection"] = FakeConnection(**kwargs)
            return state["connection"]

        connect.state = state
        return connect

    return factory


@pytest.fixture
def sqlite_profile(tmp_path):
    """SQLite profile on a file in the test's temporary directory."""
    return {
        "driver": "sqlite",
        "database": str(tmp_path / "test.db"),
        "auto_connect": True,
    }


@pytest.fixture
def registry(sqlite_profile):
    """Registry with a single auto-connecting 'default' SQLite connection."""
    with DriverRegistry({"default": sqlite_profile}) as registry:
        yield registry


@pytest.fixture
def driver(registry):
    """Connected SQLite driver with the ITEMS table created."""
    driver = registry.resolve("default")
    driver.execute(CREATE_ITEMS)
    return driver


@pytest.fixture
def gateway(registry, driver):
    """Table gateway over ITEMS."""
    return TableGateway(Item(), registry)
