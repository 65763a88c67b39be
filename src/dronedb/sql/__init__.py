"""SQL generation module"""

from .encoder import SQLFunction, SQLValueEncoder, Statement, validate_identifier

__all__ = [
    "SQLFunction",
    "SQLValueEncoder",
    "Statement",
    "validate_identifier",
]
