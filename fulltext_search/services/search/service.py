import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fulltext_search.db.host import HostTables
from fulltext_search.exceptions import QueryError
from fulltext_search.services.search.dialects import RankingDialect
from fulltext_search.services.search.query_builder import DateBound, SubmissionQueryBuilder

logger = logging.getLogger(__name__)


def context_id_of(context: Any) -> Optional[int]:
    """Id of a context given as an id, an object with ``id``, or None."""
    if context is None:
        return None
    if isinstance(context, int):
        return context
    context_id = getattr(context, "id", context)
    return int(context_id) if context_id is not None else None


class SearchService:
    """Runs ranked searches against the index table."""

    def __init__(self, session: Session, dialect: RankingDialect, host: HostTables):
        self.session = session
        self.dialect = dialect
        self.host = host

    def search(
        self,
        context: Any,
        keywords: Mapping[Any, Optional[str]],
        order_by: str = "score",
        order_direction: str = "desc",
        exclude: Optional[Iterable[int]] = None,
        page: int = 1,
        per_page: int = 25,
        published_from: DateBound = None,
        published_to: DateBound = None,
    ) -> Tuple[List[int], int]:
        """
        Search the index for submissions matching every keyword entry.

        Args:
            context: Context (or context id) to search, None for all contexts
            keywords: Query strings keyed by field tag
            order_by: Sort key, only "score" is supported
            order_direction: "asc" or "desc"
            exclude: Submission ids to leave out
            page: 1-based page number
            per_page: Number of ids per page
            published_from: Optional inclusive lower publication date
            published_to: Optional inclusive upper publication date

        Returns:
            Submission ids of the page, and the total number of matches
        """
        query_builder = SubmissionQueryBuilder(
            dialect=self.dialect,
            keywords=keywords,
            context_id=context_id_of(context),
            exclude=exclude,
            order_by=order_by,
            order_direction=order_direction,
            page=page,
            per_page=per_page,
            published_from=published_from,
            published_to=published_to,
            host=self.host,
        )

        try:
            total = self.session.scalar(query_builder.build_count()) or 0
            ids = [int(row.submission_id) for row in self.session.execute(query_builder.build())]
        except SQLAlchemyError as e:
            logger.error(f"Search query failed: {e}")
            raise QueryError(f"Search query failed: {e}") from e

        logger.info(f"Search {dict(keywords)!r} returned {len(ids)} of {total} results")
        return ids, int(total)
