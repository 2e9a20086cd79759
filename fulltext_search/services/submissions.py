from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from fulltext_search.schemas.submission import Submission, SubmissionFile


class SubmissionSource(ABC):
    """Read model of the host's submissions and their files."""

    @abstractmethod
    def get_submission(self, submission_id: int) -> Optional[Submission]:
        """Submission with its current publication, or None."""

    @abstractmethod
    def get_submission_file(self, submission_file_id: int) -> Optional[SubmissionFile]:
        """Submission file, or None."""

    @abstractmethod
    def iter_published_submissions(self, context_id: int) -> Iterator[Submission]:
        """Published submissions of a context."""

    @abstractmethod
    def iter_submission_files(self, submission_id: int, file_stages: Iterable[int]) -> Iterator[SubmissionFile]:
        """Files of a submission in the given stages."""
