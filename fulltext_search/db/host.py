"""Read-only views of the host application's tables.

The index never writes to these tables. They are declared on their own
``MetaData`` so that schema creation for the index leaves them alone; the
column subset is only what the index joins or filters on.
"""

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, MetaData, String, Table, Text

from fulltext_search.config import HostSchemaSettings


@dataclass(frozen=True)
class HostTables:
    metadata: MetaData
    submissions: Table
    publications: Table
    contexts: Table
    context_settings: Table
    context_id_column: str

    @property
    def context_id(self):
        return self.contexts.c[self.context_id_column]


@lru_cache
def host_tables(settings: HostSchemaSettings) -> HostTables:
    metadata = MetaData()

    submissions = Table(
        settings.submissions_table,
        metadata,
        Column("submission_id", BigInteger, primary_key=True),
        Column("context_id", BigInteger, nullable=False),
        Column("current_publication_id", BigInteger, nullable=True),
        Column("status", Integer, nullable=False),
    )
    publications = Table(
        settings.publications_table,
        metadata,
        Column("publication_id", BigInteger, primary_key=True),
        Column("submission_id", BigInteger, nullable=False),
        Column("date_published", DateTime, nullable=True),
    )
    contexts = Table(
        settings.context_table,
        metadata,
        Column(settings.context_id_column, BigInteger, primary_key=True),
        Column("path", String(32), nullable=False),
        Column("seq", Float, nullable=False, default=0),
    )
    context_settings = Table(
        settings.context_settings_table,
        metadata,
        Column(settings.context_id_column, BigInteger, nullable=False),
        Column("locale", String(28), nullable=False, default=""),
        Column("setting_name", String(255), nullable=False),
        Column("setting_value", Text, nullable=True),
    )
    return HostTables(
        metadata=metadata,
        submissions=submissions,
        publications=publications,
        contexts=contexts,
        context_settings=context_settings,
        context_id_column=settings.context_id_column,
    )
