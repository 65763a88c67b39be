"""Exceptions raised by the database access layer"""

from typing import Optional


class DroneDbError(Exception):
    """Base exception for all database layer errors"""
    pass


class BackendError(DroneDbError):
    """
    Error reported by a native database client

    Carries the backend error code and message. When the backend reports
    several errors at once they are chained through ``__cause__``.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code}] {self.message}"


class ConfigurationError(DroneDbError):
    """Missing connection profile or malformed configuration"""
    pass


class UnsupportedDriverError(ConfigurationError):
    """The configured driver kind is not known"""
    pass


class DriverConnectionError(BackendError):
    """The backend refused the connection"""
    pass


class InvalidQueryError(BackendError):
    """The backend rejected a statement"""
    pass


class DriverStateError(DroneDbError, RuntimeError):
    """Operation not allowed in the current driver state"""
    pass


class EmptyBufferError(DriverStateError):
    """Results were read before any successful execution"""
    pass


class TransactionError(DroneDbError, RuntimeError):
    """The backend refused to begin a transaction"""
    pass


class PreconditionError(DroneDbError, ValueError):
    """Caller input violates a statement builder precondition"""
    pass


class InvalidIdentifierError(PreconditionError):
    """Table or column name is not a plain SQL identifier"""
    pass


class SecurityError(PreconditionError):
    """Statement would touch every row of a table"""
    pass


class SchemaMismatchError(DroneDbError, KeyError):
    """A row carries a column the entity does not declare"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ValidationError(DroneDbError):
    """Validation rules reference a field missing from the form"""
    pass
