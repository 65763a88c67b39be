"""Table gateways building and running CRUD statements for one entity"""

from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from ..drivers.base import AbstractDriver, ExecutionResult
from ..drivers.registry import DriverRegistry
from ..exceptions import PreconditionError, SecurityError
from ..sql.encoder import SQLValueEncoder, Statement, validate_identifier
from .entity import Entity


class AbstractTableGateway:
    """Gives a gateway access to the driver of a named connection"""

    def __init__(self, registry: DriverRegistry, connection_identifier: str = "default"):
        """
        Initialize gateway

        Args:
            registry: Registry owning the connections
            connection_identifier: Name of the connection to use
        """
        self.registry = registry
        self.connection_identifier = connection_identifier

    @property
    def db(self) -> AbstractDriver:
        """The live driver for this gateway's connection"""
        return self.registry.resolve(self.connection_identifier)

    def run(self, statement: Statement) -> ExecutionResult:
        """Execute a built statement on the gateway's driver"""
        logger.debug(f"Executing: {statement.sql} ({len(statement.bind_values)} bound values)")
        return self.db.execute(statement.sql, statement.bind_values)


class TableGateway(AbstractTableGateway):
    """
    Builds parameterized SELECT/INSERT/UPDATE/DELETE statements for the
    table of one entity and runs them on the entity's connection.

    Column/value mappings accept plain values (bound), ``None`` (``NULL``),
    ``SQLFunction`` (emitted verbatim) and, in WHERE mappings, lists of
    values (``IN``).
    """

    def __init__(self, entity: Entity, registry: DriverRegistry):
        super().__init__(registry, entity.connection_identifier)
        self.entity = entity

    @property
    def table(self) -> str:
        table_name = self.entity.table_name
        if not table_name:
            raise PreconditionError(
                f"The entity '{type(self.entity).__name__}' has no table name"
            )
        return validate_identifier(table_name)

    def _encoder(self) -> SQLValueEncoder:
        db = self.db
        return SQLValueEncoder(db.placeholder, literal=db.literal)

    def build_select(self, where: Optional[Mapping[str, Any]] = None) -> Statement:
        encoder = self._encoder()
        where_clause = encoder.where_clause(dict(where or {}))
        return Statement(f"SELECT * FROM {self.table}{where_clause}", encoder.bind_values)

    def build_insert(self, data: Mapping[str, Any]) -> Statement:
        if not data:
            raise PreconditionError("Missing values for INSERT statement")

        encoder = self._encoder()
        columns = encoder.columns(data.keys())
        values = ", ".join(encoder.scalar(column, value) for column, value in data.items())
        return Statement(
            f"INSERT INTO {self.table} ({columns}) VALUES ({values})",
            encoder.bind_values
        )

    def build_update(self, set_: Mapping[str, Any], where: Mapping[str, Any]) -> Statement:
        if not set_:
            raise PreconditionError("Missing SET arguments")

        encoder = self._encoder()
        assignments = ", ".join(encoder.assignment(column, value) for column, value in set_.items())
        where_clause = encoder.where_clause(dict(where))
        return Statement(
            f"UPDATE {self.table} SET {assignments}{where_clause}",
            encoder.bind_values
        )

    def build_delete(self, where: Mapping[str, Any]) -> Statement:
        if not where:
            raise PreconditionError(
                "You cannot delete rows without WHERE clause. Use TRUNCATE statement instead"
            )

        encoder = self._encoder()
        where_clause = encoder.where_clause(dict(where))
        return Statement(f"DELETE FROM {self.table}{where_clause}", encoder.bind_values)

    def select(self, where: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Select rows of the entity's table

        Args:
            where: Column/value predicates joined by AND; all rows when empty

        Returns:
            Rows as mappings of column name to value
        """
        statement = self.build_select(where)
        self.run(statement)
        return self.db.get_array_result()

    def select_entities(self, where: Optional[Mapping[str, Any]] = None) -> List[Entity]:
        """Select rows and hydrate them as entities of the bound entity's class"""
        entity_class = type(self.entity)
        return [entity_class.from_row(row) for row in self.select(where)]

    def insert(self, data: Mapping[str, Any]) -> ExecutionResult:
        """
        Insert one row

        Raises:
            PreconditionError: If data is empty
        """
        return self.run(self.build_insert(data))

    def update(self, set_: Mapping[str, Any], where: Mapping[str, Any]) -> ExecutionResult:
        """
        Update rows

        An empty ``where`` updates every row of the table. Gateways that must
        never do that should use GuardedTableGateway.

        Raises:
            PreconditionError: If set_ is empty
        """
        statement = self.build_update(set_, where)
        if not where:
            logger.warning(f"Updating every row of {self.table}: no WHERE clause given")
        return self.run(statement)

    def delete(self, where: Mapping[str, Any]) -> ExecutionResult:
        """
        Delete rows

        Raises:
            PreconditionError: If where is empty
        """
        return self.run(self.build_delete(where))


class GuardedTableGateway(TableGateway):
    """Table gateway refusing to update a whole table"""

    def build_update(self, set_: Mapping[str, Any], where: Mapping[str, Any]) -> Statement:
        if set_ and not where:
            raise SecurityError("You cannot update rows without WHERE clause")
        return super().build_update(set_, where)
