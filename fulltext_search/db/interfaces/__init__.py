from .base import BaseDatabase, BaseRepository
from .relational import Base, SQLDatabase

__all__ = ["Base", "BaseDatabase", "BaseRepository", "SQLDatabase"]
