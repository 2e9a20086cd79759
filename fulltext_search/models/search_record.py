from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Integer, Text
from sqlalchemy.dialects.mysql import LONGTEXT

from fulltext_search.config import get_settings
from fulltext_search.db.interfaces.relational import Base

# Columns holding searchable text, in field-tag order
TEXT_FIELDS = (
    "authors",
    "title",
    "abstract",
    "galley_text",
    "disciplines",
    "subjects",
    "keywords",
    "type",
    "coverage",
)

METADATA_FIELDS = tuple(field for field in TEXT_FIELDS if field != "galley_text")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchRecord(Base):
    __tablename__ = get_settings().index.table_name

    # BigInteger does not autoincrement on SQLite
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    context_id = Column(BigInteger, nullable=False, index=True)
    submission_id = Column(BigInteger, nullable=False, unique=True)

    # ===== Flattened metadata =====
    title = Column(Text, nullable=True)
    abstract = Column(Text, nullable=True)
    authors = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    subjects = Column(Text, nullable=True)
    disciplines = Column(Text, nullable=True)
    coverage = Column(Text, nullable=True)
    type = Column(Text, nullable=True)

    # ===== Extracted file text =====
    galley_text = Column(Text().with_variant(LONGTEXT, "mysql", "mariadb"), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<SearchRecord submission_id={self.submission_id} context_id={self.context_id}>"
