"""MySQL database driver"""

from typing import Any, Dict, List

import pymysql
from loguru import logger

from .base import AbstractDriver


class MySQLDriver(AbstractDriver):
    """MySQL driver implementation over PyMySQL"""

    name = "MySQL"
    paramstyle = "pyformat"
    native_error = (pymysql.MySQLError,)

    def _open(self) -> Any:
        """Establish MySQL connection"""
        profile = self.profile
        logger.debug(f"Opening MySQL connection to {profile.describe()}")
        return pymysql.connect(
            host=profile.host or "localhost",
            port=profile.port or 3306,
            user=profile.user,
            password=profile.password or "",
            database=profile.database,
            charset=profile.charset,
            autocommit=True,
            cursorclass=pymysql.cursors.DictCursor
        )

    def _set_autocommit(self, enabled: bool) -> None:
        self.connection.autocommit(enabled)

    def _begin(self) -> None:
        self.connection.begin()

    def _fetch_rows(self, cursor: Any) -> List[Dict[str, Any]]:
        return list(cursor.fetchall())
