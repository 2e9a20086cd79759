import logging
from typing import List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fulltext_search.exceptions import SchemaError
from fulltext_search.models.search_record import TEXT_FIELDS, SearchRecord

logger = logging.getLogger(__name__)

INDEX_FORMATS = {
    "postgresql": "CREATE INDEX {index} ON {table} USING GIN (to_tsvector('{config}', coalesce({column}, '')))",
    "mysql": "ALTER TABLE {table} ADD FULLTEXT {index} ({column})",
    "mariadb": "ALTER TABLE {table} ADD FULLTEXT {index} ({column})",
}


class SearchIndexSchema:
    """Creates the index table and one full-text index per text column."""

    def __init__(self, engine: Engine, ts_config: str = "simple"):
        self.engine = engine
        self.ts_config = ts_config
        self.table = SearchRecord.__table__

    def exists(self) -> bool:
        return inspect(self.engine).has_table(self.table.name)

    def fulltext_index_statements(self) -> List[str]:
        """DDL for the full-text indexes, empty for engines without one."""
        index_format = INDEX_FORMATS.get(self.engine.dialect.name)
        if index_format is None:
            return []

        quote = self.engine.dialect.identifier_preparer.quote
        config = self.ts_config.replace("'", "''")
        return [
            index_format.format(
                index=quote(f"{self.table.name}_{field}"),
                table=quote(self.table.name),
                column=quote(field),
                config=config,
            )
            for field in TEXT_FIELDS
        ]

    def create(self) -> bool:
        """Create the table and its indexes if the table is missing.

        Returns True when the schema was created, False when it already existed.
        """
        try:
            if self.exists():
                logger.info(f"Search index table {self.table.name} already exists")
                return False

            statements = self.fulltext_index_statements()
            with self.engine.begin() as conn:
                self.table.create(bind=conn)
                for statement in statements:
                    conn.execute(text(statement))

            if not statements:
                logger.warning(f"No full-text indexes for {self.engine.dialect.name} databases")
            logger.info(f"Created search index table {self.table.name} with {len(statements)} full-text indexes")
            return True
        except SQLAlchemyError as e:
            raise SchemaError(f"Failed to create the search index table: {e}") from e
