import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from fulltext_search.config import Settings, get_settings
from fulltext_search.db.host import host_tables
from fulltext_search.exceptions import SubmissionNotFound
from fulltext_search.repositories.search_index import SearchIndexRepository
from fulltext_search.schemas.submission import Submission
from fulltext_search.services.file_parser.extractor import extract_text
from fulltext_search.services.normalizer import normalize
from fulltext_search.services.submissions import SubmissionSource

logger = logging.getLogger(__name__)

# progress(context_id, done, total) after every submission of a rebuild
ProgressCallback = Callable[[int, int, int], None]


class Indexer:
    """Keeps the index records of submissions in step with the host."""

    def __init__(self, session: Session, source: SubmissionSource, settings: Optional[Settings] = None):
        self.session = session
        self.source = source
        self.settings = settings or get_settings()
        self.repository = SearchIndexRepository(
            session,
            host=host_tables(self.settings.host),
            published_status=self.settings.host.published_status,
        )

    def index_submission(self, submission: Submission) -> None:
        """Write every metadata field of the submission's current publication."""
        fields = normalize(submission)
        self.repository.upsert(submission.id, submission.context_id, fields)
        logger.debug(f"Indexed metadata of submission {submission.id}")

    def index_submission_file(self, submission_id: int, submission_file_id: int) -> bool:
        """Replace the galley text of a submission with the text of one file.

        Returns False when the file does not exist.
        """
        submission_file = self.source.get_submission_file(submission_file_id)
        if submission_file is None:
            logger.info(f"Submission file {submission_file_id} not found, nothing to index")
            return False

        submission = self.source.get_submission(submission_id)
        if submission is None:
            raise SubmissionNotFound(f"Submission {submission_id} not found")

        galley_text = extract_text(submission_file, self.settings.parser)
        self.repository.upsert(submission_id, submission.context_id, {"galley_text": galley_text})
        logger.debug(f"Indexed {len(galley_text)} chars of file {submission_file_id} for submission {submission_id}")
        return True

    def remove_file_from_index(self, submission_id: int) -> None:
        self.repository.clear_galley_text(submission_id)

    def delete_submission(self, submission_id: int) -> None:
        if self.repository.delete_by_submission(submission_id):
            logger.debug(f"Removed submission {submission_id} from the index")

    def rebuild(
        self,
        context_ids: Iterable[Optional[int]],
        progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """
        Reindex every published submission of the contexts, then prune the rest.

        SEQUENTIAL PROCESSING: each submission (metadata and proof files) is
        committed before moving to the next, so an interrupted rebuild keeps
        its progress and can simply be run again.
        """
        results: Dict[str, Any] = {
            "contexts": [],
            "submissions_indexed": 0,
            "files_indexed": 0,
            "records_pruned": 0,
            "errors": [],
            "processing_time": 0,
        }
        start_time = datetime.now()
        context_ids = [int(context_id) for context_id in context_ids if context_id]
        known_contexts = self.repository.all_contexts(self.settings.host.primary_locale)

        for context_id in context_ids:
            if context_id not in known_contexts:
                logger.warning(f"Context {context_id} not found, skipping")
                continue

            results["contexts"].append(context_id)
            submissions = list(self.source.iter_published_submissions(context_id))
            logger.info(f"Rebuilding context {context_id}: {len(submissions)} published submissions")

            for i, submission in enumerate(submissions, 1):
                try:
                    self.index_submission(submission)
                    for submission_file in self.source.iter_submission_files(
                        submission.id, [self.settings.host.proof_file_stage]
                    ):
                        if self.index_submission_file(submission.id, submission_file.id):
                            results["files_indexed"] += 1
                    self.session.commit()
                    results["submissions_indexed"] += 1
                except Exception as e:
                    self.session.rollback()
                    error_msg = f"Error indexing submission {submission.id}: {e}"
                    logger.error(error_msg)
                    results["errors"].append(error_msg)

                if progress is not None:
                    progress(context_id, i, len(submissions))

        results["records_pruned"] = self.repository.prune_unpublished(context_ids)
        self.session.commit()

        results["processing_time"] = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Rebuild completed in {results['processing_time']:.1f}s: "
            f"{results['submissions_indexed']} submissions, "
            f"{results['files_indexed']} files, "
            f"{results['records_pruned']} pruned, "
            f"{len(results['errors'])} errors"
        )
        return results
