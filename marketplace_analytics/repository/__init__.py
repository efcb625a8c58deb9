"""
Data Store Module
"""
from .interfaces import DataStore, COUNTABLE_ENTITIES
from .sql_store import SqlDataStore, chunked

__all__ = [
    "DataStore",
    "COUNTABLE_ENTITIES",
    "SqlDataStore",
    "chunked",
]
