"""
Request Dependencies
"""

from marketplace_analytics.config import get_settings
from marketplace_analytics.database.connection import get_session_factory
from marketplace_analytics.repository.interfaces import DataStore
from marketplace_analytics.repository.sql_store import SqlDataStore


def get_data_store() -> DataStore:
    """SQL-backed data store; each query opens its own session."""
    return SqlDataStore(
        get_session_factory(),
        max_ids_per_query=get_settings().analytics.max_ids_per_query,
    )
