from .search import RebuildRequest, RebuildResponse, SearchRequest, SearchResults
from .submission import Author, Publication, Submission, SubmissionFile

__all__ = [
    "Author",
    "Publication",
    "RebuildRequest",
    "RebuildResponse",
    "SearchRequest",
    "SearchResults",
    "Submission",
    "SubmissionFile",
]
