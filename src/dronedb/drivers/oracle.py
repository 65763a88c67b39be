"""Oracle database driver"""

from typing import Any, List

import oracledb
from loguru import logger

from .base import AbstractDriver, ErrorDetail


class OracleDriver(AbstractDriver):
    """
    Oracle driver implementation over python-oracledb

    ``profile.database`` is the service name. Thin mode always talks UTF-8,
    so ``profile.charset`` is not used.
    """

    name = "Oracle"
    paramstyle = "named"
    native_error = (oracledb.Error,)

    def _open(self) -> Any:
        """Establish Oracle connection"""
        profile = self.profile
        logger.debug(f"Opening Oracle connection to {profile.describe()}")
        connection = oracledb.connect(
            user=profile.user,
            password=profile.password,
            host=profile.host or "localhost",
            port=profile.port or 1521,
            service_name=profile.database
        )
        connection.autocommit = True
        return connection

    def _set_autocommit(self, enabled: bool) -> None:
        self.connection.autocommit = enabled

    def _error_details(self, error: BaseException) -> List[ErrorDetail]:
        details = []
        for arg in getattr(error, "args", ()):
            if hasattr(arg, "code") and hasattr(arg, "message"):
                details.append((arg.code, arg.message))
        return details or [(None, str(error))]
