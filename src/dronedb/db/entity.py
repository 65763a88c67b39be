"""Entity base class"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Tuple, Type, TypeVar

from ..exceptions import SchemaMismatchError

E = TypeVar("E", bound="Entity")


@dataclass
class Entity:
    """
    Plain record descriptor for one table

    Subclasses are dataclasses whose fields are the table columns, in
    order, and set ``table_name`` (and optionally ``connection_identifier``)
    at class level. Both may be overridden on an instance.

    Usage:
        @dataclass
        class User(Entity):
            table_name = "USERS"

            ID: Optional[int] = None
            NAME: Optional[str] = None

        user = User.from_row({"ID": 1, "NAME": "John"})
    """

    table_name: ClassVar[str] = ""
    connection_identifier: ClassVar[str] = "default"

    @classmethod
    def property_names(cls) -> Tuple[str, ...]:
        """Get the declared property names in declaration order"""
        return tuple(f.name for f in fields(cls))

    @classmethod
    def _check_keys(cls, data: Mapping[str, Any]) -> None:
        declared = cls.property_names()
        for key in data:
            if key not in declared:
                raise SchemaMismatchError(
                    f"The property '{key}' does not exist in the class '{cls.__name__}'"
                )

    @classmethod
    def from_row(cls: Type[E], row: Mapping[str, Any]) -> E:
        """
        Build an entity from a fetched row

        Raises:
            SchemaMismatchError: If the row has a column the entity does not declare
        """
        cls._check_keys(row)
        return cls(**row)

    def exchange_array(self, data: Mapping[str, Any]) -> None:
        """
        Set every property passed in the mapping

        Raises:
            SchemaMismatchError: If a key has no declared property; nothing
                is assigned in that case
        """
        self._check_keys(data)
        for key, value in data.items():
            setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        """Get the properties as an ordered mapping"""
        return {name: getattr(self, name) for name in self.property_names()}
