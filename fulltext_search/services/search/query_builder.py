import logging
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from dateutil import parser as date_parser
from sqlalchemy import Select, func, literal, or_, select
from sqlalchemy.sql.elements import ColumnElement

from fulltext_search.db.host import HostTables
from fulltext_search.models.search_record import TEXT_FIELDS, SearchRecord
from fulltext_search.services.search.dialects import RankingDialect

logger = logging.getLogger(__name__)

# Host search type flags
SEARCH_AUTHOR = 0x01
SEARCH_TITLE = 0x02
SEARCH_ABSTRACT = 0x04
SEARCH_DISCIPLINE = 0x08
SEARCH_SUBJECT = 0x10
SEARCH_KEYWORD = 0x11
SEARCH_TYPE = 0x20
SEARCH_COVERAGE = 0x40
SEARCH_GALLEY_FILE = 0x80

FIELD_COLUMNS: Dict[int, str] = {
    SEARCH_AUTHOR: "authors",
    SEARCH_TITLE: "title",
    SEARCH_ABSTRACT: "abstract",
    SEARCH_GALLEY_FILE: "galley_text",
    SEARCH_DISCIPLINE: "disciplines",
    SEARCH_SUBJECT: "subjects",
    SEARCH_KEYWORD: "keywords",
    SEARCH_TYPE: "type",
    SEARCH_COVERAGE: "coverage",
}

FIELD_NAMES: Dict[str, str] = {
    "author": "authors",
    "authors": "authors",
    "title": "title",
    "abstract": "abstract",
    "galley": "galley_text",
    "galley_text": "galley_text",
    "galleyfulltext": "galley_text",
    "discipline": "disciplines",
    "disciplines": "disciplines",
    "subject": "subjects",
    "subjects": "subjects",
    "keyword": "keywords",
    "keywords": "keywords",
    "type": "type",
    "coverage": "coverage",
}

ORDER_KEYS = ("score",)

DateBound = Union[datetime, date, str, None]


def resolve_fields(field_tag: Any) -> List[str]:
    """Index columns searched for a field tag; unknown tags search every column."""
    if isinstance(field_tag, str):
        tag = field_tag.strip().lower()
        if tag.isdigit():
            field_tag = int(tag)
        elif tag in FIELD_NAMES:
            return [FIELD_NAMES[tag]]
    if isinstance(field_tag, int) and not isinstance(field_tag, bool) and field_tag in FIELD_COLUMNS:
        return [FIELD_COLUMNS[field_tag]]
    return list(TEXT_FIELDS)


def parse_date_bound(value: DateBound, end_of_day: bool = False) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    return date_parser.parse(str(value))


class SubmissionQueryBuilder:
    """
    Query builder for ranked submission search over the index table.

    Builds SQLAlchemy statements with:
    - Per-field keyword matching (OR across a field's columns, AND across fields)
    - Summed relevance score from the ranking dialect
    - Context scoping, exclusions and publication date range
    - Score ordering and page slicing
    """

    def __init__(
        self,
        dialect: RankingDialect,
        keywords: Optional[Mapping[Any, Optional[str]]] = None,
        context_id: Optional[int] = None,
        exclude: Optional[Iterable[int]] = None,
        order_by: str = "score",
        order_direction: str = "desc",
        page: int = 1,
        per_page: int = 25,
        published_from: DateBound = None,
        published_to: DateBound = None,
        host: Optional[HostTables] = None,
    ):
        """
        Initialize query builder.

        Args:
            dialect: Ranking strategy of the active storage engine
            keywords: Query strings keyed by field tag
            context_id: Restrict to one context, or search all of them
            exclude: Submission ids never returned
            order_by: Sort key; only "score" is supported
            order_direction: "asc" or "desc"
            page: 1-based page number
            per_page: Page size
            published_from: Inclusive lower bound on the publication date
            published_to: Inclusive upper bound on the publication date
            host: Host tables, required for the date filter
        """
        self.dialect = dialect
        self.keywords = {tag: query for tag, query in (keywords or {}).items() if query and str(query).strip()}
        self.context_id = context_id
        self.exclude = sorted({int(submission_id) for submission_id in (exclude or [])})
        self.order_by = order_by.lower() if order_by and order_by.lower() in ORDER_KEYS else "score"
        self.order_direction = "asc" if str(order_direction).lower() == "asc" else "desc"
        self.page = page
        self.per_page = per_page
        self.published_from = parse_date_bound(published_from)
        self.published_to = parse_date_bound(published_to, end_of_day=True)
        self.host = host

        if (self.published_from or self.published_to) and host is None:
            raise ValueError("Host tables are required to filter by publication date")

    @property
    def offset(self) -> int:
        return max(0, (self.page - 1) * self.per_page)

    def build(self) -> Select:
        """Build the ranked statement for the requested page."""
        return self.build_filtered().offset(self.offset).limit(self.per_page)

    def build_count(self) -> Select:
        """Count of every row matched by the filtered statement, ignoring pagination."""
        filtered = self.build_filtered().order_by(None)
        return select(func.count()).select_from(filtered.subquery())

    def build_filtered(self) -> Select:
        """Build the ranked, filtered and ordered statement without pagination."""
        match_clauses, score_terms = self._build_match()
        score = self._build_score(score_terms)

        stmt = select(SearchRecord.submission_id, score)
        stmt = self._build_date_join(stmt)

        filters = self._build_filters() + match_clauses
        if filters:
            stmt = stmt.where(*filters)

        return stmt.order_by(*self._build_sort(score))

    def _build_match(self) -> Tuple[List[ColumnElement], List[ColumnElement]]:
        """One OR-group per keyword entry, plus every column's score term."""
        match_clauses = []
        score_terms = []

        for field_tag, query in self.keywords.items():
            columns = [getattr(SearchRecord, field) for field in resolve_fields(field_tag)]
            predicates = []
            for column in columns:
                predicates.append(self.dialect.predicate(column, query))
                score_terms.append(self.dialect.score(column, query))
            match_clauses.append(or_(*predicates))

        return match_clauses, score_terms

    def _build_score(self, score_terms: List[ColumnElement]) -> ColumnElement:
        if not score_terms:
            return literal(1).label("score")

        total = score_terms[0]
        for term in score_terms[1:]:
            total = total + term
        return total.label("score")

    def _build_filters(self) -> List[ColumnElement]:
        """Build filter clauses (don't affect scoring)."""
        filters = []

        if self.context_id is not None:
            filters.append(SearchRecord.context_id == self.context_id)

        if self.exclude:
            filters.append(SearchRecord.submission_id.not_in(self.exclude))

        if self.published_from or self.published_to:
            date_published = self.host.publications.c.date_published
            if self.published_from:
                filters.append(date_published >= self.published_from)
            if self.published_to:
                filters.append(date_published <= self.published_to)

        return filters

    def _build_date_join(self, stmt: Select) -> Select:
        if not (self.published_from or self.published_to):
            return stmt

        submissions = self.host.submissions
        publications = self.host.publications
        return stmt.join(
            submissions, submissions.c.submission_id == SearchRecord.submission_id
        ).join(
            publications, publications.c.publication_id == submissions.c.current_publication_id
        )

    def _build_sort(self, score: ColumnElement) -> List[ColumnElement]:
        """Score in the requested direction, then submission id for a stable page order."""
        score_order = score.asc() if self.order_direction == "asc" else score.desc()
        return [score_order, SearchRecord.submission_id.asc()]
