"""SQLite database driver"""

import sqlite3
from typing import Any, Dict, List

from loguru import logger

from .base import AbstractDriver, ErrorDetail


class SQLiteDriver(AbstractDriver):
    """
    SQLite driver implementation over the sqlite3 module

    ``profile.database`` is the database file path (``:memory:`` when
    omitted). Host, port, user and charset do not apply.
    """

    name = "SQLite"
    paramstyle = "named"
    native_error = (sqlite3.Error,)

    def _open(self) -> Any:
        """Establish SQLite connection"""
        database = self.profile.database or ":memory:"
        connection = sqlite3.connect(
            database,
            isolation_level=None,
            check_same_thread=False
        )
        connection.row_factory = sqlite3.Row
        logger.debug(f"Opened SQLite database: {database}")
        return connection

    def _set_autocommit(self, enabled: bool) -> None:
        if enabled:
            if self.connection.in_transaction:
                self.connection.commit()
            self.connection.isolation_level = None
        else:
            self.connection.isolation_level = "DEFERRED"

    def _begin(self) -> None:
        if not self.connection.in_transaction:
            self.connection.execute("BEGIN")

    def _error_details(self, error: BaseException) -> List[ErrorDetail]:
        return [(getattr(error, "sqlite_errorcode", None), str(error))]

    def _fetch_rows(self, cursor: Any) -> List[Dict[str, Any]]:
        return [dict(row) for row in cursor.fetchall()]
