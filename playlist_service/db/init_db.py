"""
Utility to create all tables from SQLAlchemy metadata.

Note: In production use proper migration tooling (e.g., Alembic).
"""

from typing import Optional

from sqlalchemy.engine import Engine

from playlist_service.db.models import Base
from playlist_service.db.session import get_engine


# PUBLIC_INTERFACE
def create_all_tables(engine: Optional[Engine] = None) -> None:
    """Create all tables if they do not exist yet (existing tables are left untouched)."""
    Base.metadata.create_all(bind=engine or get_engine())
