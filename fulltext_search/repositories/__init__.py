from .search_index import SearchIndexRepository

__all__ = ["SearchIndexRepository"]
