class SearchIndexException(Exception):
    """Base exception for search index errors."""


class SchemaError(SearchIndexException):
    """Exception raised when the index table or its full-text indexes cannot be created."""


class QueryError(SearchIndexException):
    """Exception raised when the storage backend rejects a search query."""


class SubmissionNotFound(SearchIndexException):
    """Exception raised when the host has no submission for a given id."""


class ParsingException(Exception):
    """Base exception for file parsing errors."""


class ExtractionFailure(ParsingException):
    """Exception raised when a submission file cannot be opened or read."""


class ConfigurationError(Exception):
    """Exception raised when configuration is invalid."""


class UnsupportedDialectError(ConfigurationError):
    """Exception raised when the database engine has no full-text ranking dialect."""
