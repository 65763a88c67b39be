"""Entities and table gateways"""

from .entity import Entity
from .gateway import AbstractTableGateway, GuardedTableGateway, TableGateway

__all__ = [
    "Entity",
    "AbstractTableGateway",
    "GuardedTableGateway",
    "TableGateway",
]
