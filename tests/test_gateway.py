"""Tests for table gateways, run on SQLite."""

from dataclasses import dataclass
from typing import Optional

import pytest

from dronedb import (
    Entity,
    GuardedTableGateway,
    InvalidQueryError,
    PreconditionError,
    SQLFunction,
    SecurityError,
    TableGateway,
)

from conftest import Item


@dataclass
class Wide(Entity):
    table_name = "WIDE"

    A: Optional[int] = None
    B: Optional[int] = None
    C: Optional[int] = None
    D: Optional[int] = None


@pytest.fixture
def seeded(gateway):
    gateway.insert({"ID": 500, "DESCRIPTION": "NEW ELEMENT ONE"})
    gateway.insert({"ID": 501, "DESCRIPTION": "NEW ELEMENT TWO"})
    gateway.insert({"ID": 502, "DESCRIPTION": None})
    return gateway


class TestStatementBuilding:
    """Tests for the SQL produced by the builders."""

    def test_select_all(self, gateway):
        statement = gateway.build_select()

        assert statement.sql == "SELECT * FROM ITEMS"
        assert statement.bind_values == {}

    def test_select_where(self, gateway):
        statement = gateway.build_select({"ID": [1, 2], "DESCRIPTION": None})

        assert statement.sql == "SELECT * FROM ITEMS WHERE ID IN (:p1, :p2) AND DESCRIPTION IS NULL"
        assert statement.bind_values == {"p1": 1, "p2": 2}

    def test_insert(self, gateway):
        statement = gateway.build_insert({"ID": 1, "DESCRIPTION": None, "CREATED": SQLFunction("CURRENT_TIMESTAMP")})

        assert statement.sql == (
            "INSERT INTO ITEMS (ID, DESCRIPTION, CREATED) VALUES (:p1, NULL, CURRENT_TIMESTAMP)"
        )
        assert statement.bind_values == {"p1": 1}

    def test_update_tokens_never_collide(self, gateway):
        """Test SET and WHERE draw tokens from one counter."""
        statement = gateway.build_update(
            {"DESCRIPTION": "x", "ID": 9},
            {"ID": 1, "DESCRIPTION": "y"}
        )

        assert statement.sql == (
            "UPDATE ITEMS SET DESCRIPTION = :p1, ID = :p2 WHERE ID = :p3 AND DESCRIPTION = :p4"
        )
        assert list(statement.bind_values) == ["p1", "p2", "p3", "p4"]

    def test_update_without_where(self, gateway):
        statement = gateway.build_update({"DESCRIPTION": "b"}, {})

        assert statement.sql == "UPDATE ITEMS SET DESCRIPTION = :p1"

    def test_delete(self, gateway):
        statement = gateway.build_delete({"ID": 500})

        assert statement.sql == "DELETE FROM ITEMS WHERE ID = :p1"
        assert statement.bind_values == {"p1": 500}

    def test_entity_without_table(self, registry):
        @dataclass
        class Nameless(Entity):
            ID: Optional[int] = None

        with pytest.raises(PreconditionError, match="no table name"):
            TableGateway(Nameless(), registry).build_select()


class TestCrud:
    """Tests for executed CRUD statements."""

    def test_insert_then_select(self, gateway):
        """Test an inserted row reads back exactly."""
        result = gateway.insert({"ID": 1, "DESCRIPTION": "a"})

        assert result.rows_affected == 1
        assert gateway.select({"ID": 1}) == [{"ID": 1, "DESCRIPTION": "a"}]

    def test_update_then_select(self, gateway):
        """Test an updated column reads back."""
        gateway.insert({"ID": 1, "DESCRIPTION": "a"})

        result = gateway.update({"DESCRIPTION": "b"}, {"ID": 1})

        assert result.rows_affected == 1
        assert gateway.select({"ID": 1})[0]["DESCRIPTION"] == "b"

    def test_select_all(self, seeded):
        rows = seeded.select()

        assert [row["ID"] for row in rows] == [500, 501, 502]
        assert seeded.db.num_rows == 3
        assert seeded.db.num_fields == 2
        assert seeded.db.rows_affected == 0

    def test_select_is_null(self, seeded):
        assert seeded.select({"DESCRIPTION": None}) == [{"ID": 502, "DESCRIPTION": None}]

    def test_select_in_list(self, seeded):
        rows = seeded.select({"ID": [500, 502, 999]})

        assert sorted(row["ID"] for row in rows) == [500, 502]

    def test_select_empty_list(self, seeded):
        assert seeded.select({"ID": []}) == []

    def test_select_function(self, seeded):
        rows = seeded.select({"ID": SQLFunction("(SELECT MAX(ID) FROM ITEMS)")})

        assert rows == [{"ID": 502, "DESCRIPTION": None}]

    def test_select_entities(self, seeded):
        items = seeded.select_entities({"ID": 500})

        assert len(items) == 1
        assert type(items[0]) is type(seeded.entity)
        assert items[0].DESCRIPTION == "NEW ELEMENT ONE"

    def test_insert_null(self, gateway):
        gateway.insert({"ID": 7, "DESCRIPTION": None})

        assert gateway.select({"ID": 7}) == [{"ID": 7, "DESCRIPTION": None}]

    def test_values_are_not_interpolated(self, gateway):
        """Test quotes in values are data, not SQL."""
        gateway.insert({"ID": 8, "DESCRIPTION": "it's'); DROP TABLE ITEMS; --"})

        assert gateway.select({"ID": 8})[0]["DESCRIPTION"] == "it's'); DROP TABLE ITEMS; --"

    def test_update_set_null(self, seeded):
        seeded.update({"DESCRIPTION": None}, {"ID": 500})

        assert seeded.select({"ID": 500})[0]["DESCRIPTION"] is None

    def test_update_without_where_updates_every_row(self, seeded):
        """Test an empty WHERE is not rejected and touches the whole table."""
        result = seeded.update({"DESCRIPTION": "EVERYTHING"}, {})

        assert result.rows_affected == 3
        assert {row["DESCRIPTION"] for row in seeded.select()} == {"EVERYTHING"}

    def test_delete(self, seeded):
        result = seeded.delete({"ID": 500})

        assert result.rows_affected == 1
        assert seeded.select({"ID": 500}) == []

    def test_delete_in_list(self, seeded):
        result = seeded.delete({"ID": [500, 501]})

        assert result.rows_affected == 2

    def test_many_columns_in_set_and_where(self, registry, driver):
        """Test N>=2 columns in both clauses bind to distinct tokens."""
        driver.execute("CREATE TABLE WIDE (A INTEGER, B INTEGER, C INTEGER, D INTEGER)")
        wide = TableGateway(Wide(), registry)
        wide.insert({"A": 1, "B": 2, "C": 3, "D": 4})
        wide.insert({"A": 1, "B": 5, "C": 3, "D": 4})

        result = wide.update({"C": 30, "D": 40}, {"A": 1, "B": 2})

        assert result.rows_affected == 1
        assert wide.select({"A": 1, "B": 2}) == [{"A": 1, "B": 2, "C": 30, "D": 40}]
        assert wide.select({"B": 5}) == [{"A": 1, "B": 5, "C": 3, "D": 4}]


class TestPreconditions:
    """Tests for rejected inputs."""

    def test_empty_insert(self, gateway):
        with pytest.raises(PreconditionError):
            gateway.insert({})

    def test_update_without_set(self, gateway):
        with pytest.raises(PreconditionError):
            gateway.update({}, {"ID": 500})

    def test_update_without_set_or_where(self, gateway):
        with pytest.raises(PreconditionError):
            gateway.update({}, {})

    def test_delete_without_where(self, seeded):
        """Test a table-wide delete is refused and nothing is removed."""
        with pytest.raises(PreconditionError, match="TRUNCATE"):
            seeded.delete({})

        assert len(seeded.select()) == 3

    def test_delete_with_where_is_not_a_precondition_error(self, gateway):
        result = gateway.delete({"ID": 12345})

        assert result.rows_affected == 0

    def test_list_in_insert(self, gateway):
        with pytest.raises(PreconditionError):
            gateway.insert({"ID": [1, 2]})

    def test_driver_errors_propagate(self, gateway):
        """Test backend rejections reach the caller unchanged."""
        gateway.insert({"ID": 1, "DESCRIPTION": "a"})

        with pytest.raises(InvalidQueryError):
            gateway.insert({"ID": 1, "DESCRIPTION": "duplicate"})
        with pytest.raises(InvalidQueryError):
            gateway.select({"WRONG": 1})


class TestGuardedGateway:
    """Tests for the gateway that closes the full-table update gap."""

    def test_update_without_where(self, registry, driver):
        gateway = GuardedTableGateway(Item(), registry)

        with pytest.raises(SecurityError):
            gateway.update({"DESCRIPTION": "x"}, {})

    def test_update_with_where(self, registry, driver):
        gateway = GuardedTableGateway(Item(), registry)
        gateway.insert({"ID": 1, "DESCRIPTION": "a"})

        assert gateway.update({"DESCRIPTION": "b"}, {"ID": 1}).rows_affected == 1


class TestTransactionsThroughGateway:
    """Tests for transactions driven from the gateway's driver."""

    def test_failed_statement_rolls_back(self, gateway):
        db = gateway.db
        db.begin_transaction()
        gateway.insert({"ID": 1, "DESCRIPTION": "a"})
        with pytest.raises(InvalidQueryError):
            gateway.insert({"ID": 1, "DESCRIPTION": "duplicate"})

        assert db.end_transaction() is False
        assert gateway.select() == []

    def test_successful_statements_commit(self, gateway):
        db = gateway.db
        db.begin_transaction()
        gateway.insert({"ID": 1, "DESCRIPTION": "a"})
        gateway.insert({"ID": 2, "DESCRIPTION": "b"})

        assert db.end_transaction() is True
        assert len(gateway.select()) == 2
