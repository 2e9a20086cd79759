from typing import Optional

from fulltext_search.config import Settings, get_settings
from fulltext_search.db.interfaces.base import BaseDatabase
from fulltext_search.db.interfaces.relational import SQLDatabase


def make_database(settings: Optional[Settings] = None) -> BaseDatabase:
    """Factory function to create and start the shared database."""
    if settings is None:
        settings = get_settings()
    database = SQLDatabase(config=settings.database)
    database.startup()
    return database
