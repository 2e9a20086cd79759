from .search_record import METADATA_FIELDS, TEXT_FIELDS, SearchRecord

__all__ = ["METADATA_FIELDS", "TEXT_FIELDS", "SearchRecord"]
