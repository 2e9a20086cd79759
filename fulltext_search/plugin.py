import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from fulltext_search import hooks
from fulltext_search.config import Settings, get_settings
from fulltext_search.db.host import host_tables
from fulltext_search.db.interfaces.base import BaseDatabase
from fulltext_search.db.schema import SearchIndexSchema
from fulltext_search.exceptions import ConfigurationError, SchemaError
from fulltext_search.repositories.search_index import SearchIndexRepository
from fulltext_search.schemas.search import RebuildResponse, SearchResults
from fulltext_search.schemas.submission import Submission
from fulltext_search.services.indexer import Indexer, ProgressCallback
from fulltext_search.services.search.dialects import RankingDialect
from fulltext_search.services.search.factory import make_ranking_dialect, make_search_service
from fulltext_search.services.search.query_builder import DateBound
from fulltext_search.services.submissions import SubmissionSource

logger = logging.getLogger(__name__)


class FullTextSearchPlugin:
    """Database-backed full-text search for the host's submissions.

    Subscribes to the host's indexing hooks to keep the index current and
    answers the host's search hook with ranked results. Indexing failures are
    logged and never reach the host; search failures become a generic error.
    """

    def __init__(
        self,
        database: BaseDatabase,
        source: Optional[SubmissionSource],
        settings: Optional[Settings] = None,
        dialect: Optional[RankingDialect] = None,
    ):
        self.database = database
        self.source = source
        self.settings = settings or get_settings()
        self.dialect = dialect
        self.installed = False

    # ============================================================
    # REGISTRATION
    # ============================================================

    def register(self, registry: hooks.HookRegistry) -> bool:
        self.ensure_schema()
        self.select_dialect()
        self.register_indexing_hooks(registry)
        self.register_search_hook(registry)
        return self.installed

    def ensure_schema(self) -> None:
        """Create the index table if missing; stay uninstalled when that fails."""
        try:
            SearchIndexSchema(self.database.engine, ts_config=self.settings.index.ts_config).create()
            self.installed = True
        except SchemaError:
            logger.exception("Failed to create the search index table, indexing is disabled")

    def select_dialect(self) -> None:
        if self.dialect is not None:
            return
        try:
            self.dialect = make_ranking_dialect(self.database.engine, self.settings)
        except ConfigurationError as e:
            logger.error(f"Full-text search unavailable: {e}")

    def register_indexing_hooks(self, registry: hooks.HookRegistry) -> None:
        registry.register(hooks.METADATA_CHANGED, self.metadata_changed)
        registry.register(hooks.FILE_CHANGED, self.submission_file_changed)
        registry.register(hooks.FILE_DELETED, self.submission_file_deleted)
        registry.register(hooks.SUBMISSION_DELETED, self.submission_deleted)
        registry.register(hooks.PUBLICATION_UNPUBLISHED, self.publication_unpublished)

    def register_search_hook(self, registry: hooks.HookRegistry) -> None:
        registry.register(hooks.RETRIEVE_RESULTS, self.retrieve_results)

    # ============================================================
    # INDEXING HOOKS
    # ============================================================

    def _index(self, description: str, operation: Callable[[Indexer], Any]) -> None:
        if not self.installed:
            logger.debug(f"Search index not installed, skipping {description}")
            return
        try:
            with self.database.get_session() as session:
                operation(Indexer(session, self.source, self.settings))
                session.commit()
        except Exception:
            logger.exception(f"Search indexing failed: {description}")

    def metadata_changed(self, submission: Submission) -> None:
        self._index(
            f"metadata of submission {submission.id}",
            lambda indexer: indexer.index_submission(submission),
        )

    def submission_file_changed(self, submission_id: int, file_type: Any, submission_file_id: int) -> None:
        self._index(
            f"file {submission_file_id} of submission {submission_id}",
            lambda indexer: indexer.index_submission_file(int(submission_id), int(submission_file_id)),
        )

    def submission_file_deleted(self, submission_id: int) -> None:
        self._index(
            f"file removal from submission {submission_id}",
            lambda indexer: indexer.remove_file_from_index(int(submission_id)),
        )

    def submission_deleted(self, submission_id: int) -> None:
        self._index(
            f"deletion of submission {submission_id}",
            lambda indexer: indexer.delete_submission(int(submission_id)),
        )

    def publication_unpublished(self, new_publication: Any, publication: Any, submission: Submission) -> None:
        self._index(
            f"unpublishing of submission {submission.id}",
            lambda indexer: indexer.delete_submission(submission.id),
        )

    # ============================================================
    # SEARCH HOOK
    # ============================================================

    def retrieve_results(
        self,
        context: Any,
        keywords: Optional[Mapping[Any, Optional[str]]],
        published_from: DateBound,
        published_to: DateBound,
        order_by: Optional[str],
        order_dir: Optional[str],
        exclude: Optional[Iterable[int]],
        page: int,
        items_per_page: Optional[int],
    ) -> SearchResults:
        """Ranked page of submission ids, or an error message and no results.

        Without a page size the configured default page size applies.
        """
        try:
            if self.dialect is None:
                raise ConfigurationError("No full-text ranking dialect selected")
            with self.database.get_session() as session:
                service = make_search_service(session, dialect=self.dialect, settings=self.settings)
                ids, total = service.search(
                    context,
                    dict(keywords or {}),
                    order_by=str(order_by or "score"),
                    order_direction=str(order_dir or "desc"),
                    exclude=list(exclude or []),
                    page=int(page),
                    per_page=int(items_per_page or self.settings.index.default_per_page),
                    published_from=published_from,
                    published_to=published_to,
                )
            return SearchResults(ids=ids, total=total)
        except Exception:
            logger.exception("Full-text search failed")
            return SearchResults(error=self.settings.index.search_error_message)

    # ============================================================
    # ADMINISTRATION
    # ============================================================

    def all_contexts(self) -> Dict[int, str]:
        with self.database.get_session() as session:
            return self._repository(session).all_contexts(self.settings.host.primary_locale)

    def clear_standard_search_tables(self) -> None:
        with self.database.get_session() as session:
            self._repository(session).clear_legacy_search_tables(
                self.settings.index.legacy_search_tables,
                truncate=self.settings.index.truncate_legacy_tables,
            )
            session.commit()

    def rebuild_index(
        self,
        context_ids: Iterable[Optional[int]],
        clear_standard_search: bool = False,
        progress: Optional[ProgressCallback] = None,
    ) -> RebuildResponse:
        if not self.installed:
            raise SchemaError("Search index table is not installed")
        if self.source is None:
            raise ConfigurationError("No submission source configured, cannot rebuild")

        if clear_standard_search:
            self.clear_standard_search_tables()

        with self.database.get_session() as session:
            results = Indexer(session, self.source, self.settings).rebuild(context_ids, progress=progress)

        return RebuildResponse(
            contexts=results["contexts"],
            submissions_indexed=results["submissions_indexed"],
            files_indexed=results["files_indexed"],
            records_pruned=results["records_pruned"],
            errors=results["errors"],
        )

    def _repository(self, session) -> SearchIndexRepository:
        return SearchIndexRepository(
            session,
            host=host_tables(self.settings.host),
            published_status=self.settings.host.published_status,
        )
