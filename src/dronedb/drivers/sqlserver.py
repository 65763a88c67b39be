"""SQL Server database driver"""

from typing import Any, Dict, List, Optional

import pymssql
from loguru import logger

from .base import AbstractDriver, BoundValues


class SQLServerDriver(AbstractDriver):
    """SQL Server driver implementation over pymssql"""

    name = "SQLServer"
    paramstyle = "pyformat"
    native_error = (pymssql.Error,)

    def _open(self) -> Any:
        """Establish SQL Server connection"""
        profile = self.profile
        logger.debug(f"Opening SQL Server connection to {profile.describe()}")
        return pymssql.connect(
            server=profile.host or "localhost",
            port=str(profile.port or 1433),
            user=profile.user,
            password=profile.password,
            database=profile.database,
            charset=profile.charset.upper().replace("UTF8", "UTF-8"),
            as_dict=True,
            autocommit=True
        )

    def _set_autocommit(self, enabled: bool) -> None:
        self.connection.autocommit(enabled)

    def _send(self, cursor: Any, sql: str, bound_values: Optional[BoundValues]) -> None:
        # pymssql skips interpolation for empty parameters
        if bound_values is not None and not bound_values:
            cursor.execute(sql.replace("%%", "%"))
        else:
            super()._send(cursor, sql, bound_values)

    def _fetch_rows(self, cursor: Any) -> List[Dict[str, Any]]:
        return list(cursor.fetchall())
