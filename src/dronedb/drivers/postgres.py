"""PostgreSQL database driver"""

from typing import Any, Dict, List

import psycopg2
from psycopg2.extras import RealDictCursor
from loguru import logger

from .base import AbstractDriver, ErrorDetail


class PostgreSQLDriver(AbstractDriver):
    """PostgreSQL driver implementation over psycopg2"""

    name = "PostgreSQL"
    paramstyle = "pyformat"
    native_error = (psycopg2.Error,)

    def _open(self) -> Any:
        """Establish PostgreSQL connection"""
        profile = self.profile
        logger.debug(f"Opening PostgreSQL connection to {profile.describe()}")
        connection = psycopg2.connect(
            host=profile.host or "localhost",
            port=profile.port or 5432,
            user=profile.user,
            password=profile.password,
            dbname=profile.database,
            client_encoding=profile.charset,
            cursor_factory=RealDictCursor
        )
        connection.autocommit = True
        return connection

    def _set_autocommit(self, enabled: bool) -> None:
        self.connection.autocommit = enabled

    def _error_details(self, error: BaseException) -> List[ErrorDetail]:
        message = getattr(error, "pgerror", None) or str(error)
        return [(getattr(error, "pgcode", None), message.strip())]

    def _fetch_rows(self, cursor: Any) -> List[Dict[str, Any]]:
        return [dict(row) for row in cursor.fetchall()]
