"""
Database setup.
"""

from sqlalchemy import create_engine

from app.models import Base

# Use SQLite for the example
DATABASE_URL = "sqlite:///./example.db"

engine = create_engine(
    DATABASE_URL,
    echo=False,
)


def init_db() -> None:
    """Initialize the database (drop and create tables)."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
