"""Full-text ranking strategies, one per storage engine."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Type

from sqlalchemy import Float, func, literal_column, type_coerce
from sqlalchemy.dialects.mysql import match
from sqlalchemy.engine import Engine
from sqlalchemy.sql.elements import ColumnElement

from fulltext_search.exceptions import UnsupportedDialectError

logger = logging.getLogger(__name__)


class RankingDialect(ABC):
    """Builds the match predicate and score term of one column against one query."""

    name: str = ""

    @abstractmethod
    def predicate(self, column: ColumnElement, query: str) -> ColumnElement:
        pass

    @abstractmethod
    def score(self, column: ColumnElement, query: str) -> ColumnElement:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class TsVectorDialect(RankingDialect):
    """PostgreSQL ``tsvector``/``tsquery`` matching ranked with ``ts_rank``."""

    name = "postgresql"

    def __init__(self, ts_config: str = "simple"):
        self.ts_config = ts_config

    def _config(self) -> ColumnElement:
        # Inline literal so the expression matches the GIN index definition
        escaped = self.ts_config.replace("'", "''")
        return literal_column(f"'{escaped}'")

    def document(self, column: ColumnElement) -> ColumnElement:
        return func.to_tsvector(self._config(), func.coalesce(column, literal_column("''")))

    def tsquery(self, query: str) -> ColumnElement:
        return func.plainto_tsquery(self._config(), query)

    def predicate(self, column: ColumnElement, query: str) -> ColumnElement:
        return self.document(column).op("@@")(self.tsquery(query))

    def score(self, column: ColumnElement, query: str) -> ColumnElement:
        return type_coerce(func.ts_rank(self.document(column), self.tsquery(query)), Float)


class NaturalLanguageDialect(RankingDialect):
    """MySQL ``MATCH ... AGAINST`` in natural language mode.

    The relevance value doubles as the predicate: rows with zero relevance
    do not match.
    """

    name = "mysql"

    def relevance(self, column: ColumnElement, query: str) -> ColumnElement:
        return match(column, against=query).in_natural_language_mode()

    def predicate(self, column: ColumnElement, query: str) -> ColumnElement:
        return self.relevance(column, query)

    def score(self, column: ColumnElement, query: str) -> ColumnElement:
        return type_coerce(self.relevance(column, query), Float)


DIALECTS: Dict[str, Type[RankingDialect]] = {
    "postgresql": TsVectorDialect,
    "mysql": NaturalLanguageDialect,
    "mariadb": NaturalLanguageDialect,
}


def select_dialect(engine: Engine, ts_config: str = "simple") -> RankingDialect:
    """Ranking dialect for the engine's storage backend."""
    dialect_name = engine.dialect.name
    dialect_class = DIALECTS.get(dialect_name)
    if dialect_class is None:
        raise UnsupportedDialectError(f"No full-text ranking dialect for '{dialect_name}' databases")

    logger.info(f"Using {dialect_class.__name__} for {dialect_name} full-text search")
    if dialect_class is TsVectorDialect:
        return TsVectorDialect(ts_config=ts_config)
    return dialect_class()
