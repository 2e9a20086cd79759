from .dialects import NaturalLanguageDialect, RankingDialect, TsVectorDialect, select_dialect
from .factory import make_ranking_dialect, make_search_service
from .query_builder import SubmissionQueryBuilder, resolve_fields
from .service import SearchService

__all__ = [
    "NaturalLanguageDialect",
    "RankingDialect",
    "SearchService",
    "SubmissionQueryBuilder",
    "TsVectorDialect",
    "make_ranking_dialect",
    "make_search_service",
    "resolve_fields",
    "select_dialect",
]
