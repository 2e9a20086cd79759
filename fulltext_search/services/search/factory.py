from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from fulltext_search.config import Settings, get_settings
from fulltext_search.db.host import host_tables
from fulltext_search.services.search.dialects import RankingDialect, select_dialect
from fulltext_search.services.search.service import SearchService


def make_ranking_dialect(engine: Engine, settings: Optional[Settings] = None) -> RankingDialect:
    """Factory function to pick the ranking dialect of an engine."""
    if settings is None:
        settings = get_settings()
    return select_dialect(engine, ts_config=settings.index.ts_config)


def make_search_service(
    session: Session,
    dialect: Optional[RankingDialect] = None,
    settings: Optional[Settings] = None,
) -> SearchService:
    """Factory function to create a search service bound to a session."""
    if settings is None:
        settings = get_settings()
    if dialect is None:
        dialect = make_ranking_dialect(session.get_bind(), settings)
    return SearchService(session=session, dialect=dialect, host=host_tables(settings.host))
