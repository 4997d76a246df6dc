"""
softscope configuration for the example app.
"""

from app.database import engine
from app.models import ALL_MODELS
from softscope import DataClient, LoggingHook, ScopeConfig, extend_with_soft_delete
from softscope.adapters.sqlalchemy import SQLAlchemyExecutor


def setup_client() -> DataClient:
    """
    Set up the data client for the application.

    Reads SOFTSCOPE_* environment variables, configures logging, and returns
    a client whose list reads hide soft-deleted rows.
    """
    config = ScopeConfig.from_env()
    config.apply_logging()

    client = DataClient(SQLAlchemyExecutor(ALL_MODELS, engine=engine))
    client = client.use(LoggingHook())
    return extend_with_soft_delete(client, config)


# Global client instance
db = setup_client()
