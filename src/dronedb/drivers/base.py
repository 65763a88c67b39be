"""Base database driver interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

from loguru import logger

from ..config.settings import DriverProfile
from ..exceptions import (
    BackendError,
    DriverConnectionError,
    DriverStateError,
    EmptyBufferError,
    InvalidQueryError,
    TransactionError,
)

BoundValues = Union[Mapping[str, Any], Sequence[Any]]
ErrorDetail = Tuple[Optional[Union[int, str]], str]


@dataclass(frozen=True)
class ExecutionResult:
    """Counters of an executed statement"""
    num_rows: int
    num_fields: int
    rows_affected: int


class AbstractDriver(ABC):
    """
    Abstract base class for database drivers

    A driver owns one native connection and the state of the last executed
    statement (counters and buffered rows). Every backend speaks DB-API 2.0,
    so execution, fetching and transaction bookkeeping live here; subclasses
    only open the connection and translate the few calls that differ.
    """

    name = "abstract"
    paramstyle = "named"
    native_error: Tuple[Type[BaseException], ...] = ()

    def __init__(self, profile: DriverProfile):
        """
        Initialize the driver

        Args:
            profile: Connection profile; the driver connects immediately
                when ``profile.auto_connect`` is set
        """
        self.profile = profile
        self.connection = None
        self.errors: List[ErrorDetail] = []
        self.transaction_mode = False
        self.transaction_result: Optional[bool] = None
        self._autocommit = True
        self._reset_state()

        if profile.auto_connect:
            self.connect()

    @abstractmethod
    def _open(self) -> Any:
        """Open and return a native connection with autocommit enabled"""
        pass

    @abstractmethod
    def _set_autocommit(self, enabled: bool) -> None:
        """Toggle autocommit on the native connection"""
        pass

    def _begin(self) -> None:
        """Start a native transaction"""
        self._set_autocommit(False)

    def _error_details(self, error: BaseException) -> List[ErrorDetail]:
        """Decode a native exception into (code, message) pairs"""
        args = getattr(error, "args", ())
        if len(args) >= 2 and isinstance(args[0], int):
            message = args[1]
            if isinstance(message, bytes):
                message = message.decode("utf-8", errors="replace")
            return [(args[0], str(message).strip())]
        return [(None, str(error))]

    def _fetch_rows(self, cursor: Any) -> List[Dict[str, Any]]:
        """Materialize the pending result set as a list of mappings"""
        columns = [column[0] for column in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def _bind(self, bound_values: BoundValues) -> Union[Dict[str, Any], Tuple[Any, ...]]:
        if isinstance(bound_values, Mapping):
            return dict(bound_values)
        return tuple(bound_values)

    def _send(self, cursor: Any, sql: str, bound_values: Optional[BoundValues]) -> None:
        """
        Hand a statement to the cursor

        pyformat clients only unescape ``%%`` when parameters are passed, so
        they always get the (possibly empty) parameters unless none were given.
        """
        if bound_values is None or (not bound_values and self.paramstyle != "pyformat"):
            cursor.execute(sql)
        else:
            cursor.execute(sql, self._bind(bound_values))

    def _fail_transaction(self) -> None:
        if self.transaction_mode:
            self.transaction_result = False

    def _reset_state(self) -> None:
        self.num_rows = 0
        self.num_fields = 0
        self.rows_affected = 0
        self.array_result: Optional[List[Dict[str, Any]]] = None

    def _require_connection(self, action: str) -> None:
        if self.connection is None:
            raise DriverStateError(f"Cannot {action} without an established connection")

    def _backend_error(
        self,
        error_class: Type[BackendError],
        error: BaseException
    ) -> BackendError:
        """
        Record a native error and convert it to a layer exception

        Each reported error is chained to the previous one, the first to the
        native exception itself.
        """
        details = self._error_details(error)
        self.errors.extend(details)

        previous: BaseException = error
        for code, message in details:
            current = error_class(message, code)
            current.__cause__ = previous
            previous = current
        return previous

    @property
    def connected(self) -> bool:
        """Check if the driver holds a live connection"""
        return self.connection is not None

    def placeholder(self, token: str) -> str:
        """Render a bind token in the backend parameter style"""
        if self.paramstyle == "pyformat":
            return f"%({token})s"
        return f":{token}"

    def literal(self, expression: str) -> str:
        """Escape raw SQL text for the backend parameter style"""
        if self.paramstyle == "pyformat":
            return expression.replace("%", "%%")
        return expression

    def connect(self) -> Any:
        """
        Establish the backend connection

        Returns:
            The native connection handle

        Raises:
            DriverConnectionError: If the backend refuses the connection
        """
        if self.connection is not None:
            logger.debug(f"{self.name} driver is already connected")
            return self.connection

        try:
            self.connection = self._open()
        except self.native_error as e:
            logger.error(f"Failed to connect to {self.name} ({self.profile.describe()}): {e}")
            raise self._backend_error(DriverConnectionError, e)

        self._autocommit = True
        logger.info(f"Successfully connected to {self.name} database")
        return self.connection

    def reconnect(self) -> Any:
        """Tear down and re-establish the live connection"""
        self._require_connection("reconnect")
        self.disconnect()
        return self.connect()

    def disconnect(self) -> bool:
        """Close the live connection"""
        self._require_connection("disconnect")
        self.connection.close()
        self.connection = None
        self.transaction_mode = False
        logger.info(f"{self.name} connection closed")
        return True

    def close(self) -> None:
        """Release the connection if there is one"""
        if self.connection is not None:
            self.disconnect()

    def execute(self, sql: str, bound_values: Optional[BoundValues] = None) -> ExecutionResult:
        """
        Execute a statement and buffer its results

        Args:
            sql: Statement text, placeholders in the backend parameter style
            bound_values: Values for the placeholders; with ``None`` the
                statement is sent as written

        Returns:
            Counters of the executed statement

        Raises:
            InvalidQueryError: If the backend rejects the statement or the
                client library cannot send it
        """
        self._require_connection("execute statements")
        self._reset_state()

        cursor = self.connection.cursor()
        try:
            self._send(cursor, sql, bound_values)

            description = cursor.description
            rows = self._fetch_rows(cursor) if description else []
            rowcount = cursor.rowcount
        except self.native_error as e:
            self._fail_transaction()
            logger.error(f"{self.name} rejected statement: {e}")
            raise self._backend_error(InvalidQueryError, e)
        except Exception as e:
            self._fail_transaction()
            logger.error(f"{self.name} could not send statement: {type(e).__name__}: {e}")
            self.errors.append((None, str(e)))
            raise InvalidQueryError(str(e)) from e
        finally:
            cursor.close()

        self.array_result = rows
        self.num_rows = len(rows)
        self.num_fields = len(description) if description else 0
        self.rows_affected = 0 if description else max(rowcount or 0, 0)

        if self.transaction_mode:
            self.transaction_result = self.transaction_result is not False

        return ExecutionResult(self.num_rows, self.num_fields, self.rows_affected)

    def get_array_result(self) -> List[Dict[str, Any]]:
        """
        Get the rows buffered by the last executed statement

        Raises:
            EmptyBufferError: If no statement has been executed successfully
        """
        if self.array_result is None:
            raise EmptyBufferError("There is no data in the buffer, execute a statement first")
        return list(self.array_result)

    def autocommit(self, enabled: bool) -> None:
        """Toggle backend autocommit"""
        self._require_connection("change autocommit")
        self._set_autocommit(enabled)
        self._autocommit = enabled

    def begin_transaction(self) -> None:
        """
        Start a transaction and reset its success accumulator

        Raises:
            TransactionError: If the backend refuses to start a transaction
        """
        self._require_connection("begin a transaction")
        try:
            self._begin()
        except self.native_error as e:
            self.errors.extend(self._error_details(e))
            logger.error(f"Could not begin transaction on {self.name}: {e}")
            raise TransactionError("Could not begin transaction") from e

        self.transaction_mode = True
        self.transaction_result = None

    def commit(self) -> bool:
        """Commit the current work"""
        self._require_connection("commit")
        try:
            self.connection.commit()
        except self.native_error as e:
            raise self._backend_error(InvalidQueryError, e)
        return True

    def rollback(self) -> bool:
        """Roll back the current work"""
        self._require_connection("roll back")
        try:
            self.connection.rollback()
        except self.native_error as e:
            raise self._backend_error(InvalidQueryError, e)
        return True

    def end_transaction(self) -> bool:
        """
        Finish the transaction started by begin_transaction()

        Commits when every statement since begin_transaction() succeeded (or
        none ran), rolls back otherwise.

        Returns:
            True if the transaction was committed
        """
        if not self.transaction_mode:
            raise DriverStateError("No transaction has been started")

        committed = self.transaction_result is not False
        self.transaction_mode = False
        if committed:
            self.commit()
        else:
            logger.warning(f"Rolling back failed transaction on {self.name}")
            self.rollback()

        self._set_autocommit(self._autocommit)
        return committed

    def __enter__(self):
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
        return False

    def __del__(self):
        if getattr(self, "connection", None) is not None:
            self.close()
