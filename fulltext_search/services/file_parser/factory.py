import logging
from pathlib import Path
from typing import Dict, Optional, Type

from fulltext_search.config import ParserSettings, get_settings
from fulltext_search.schemas.submission import SubmissionFile
from fulltext_search.services.file_parser.base import SearchFileParser, resolve_path
from fulltext_search.services.file_parser.parsers import HtmlParser, PdfParser, PlainTextParser

logger = logging.getLogger(__name__)

PARSERS_BY_MIMETYPE: Dict[str, Type[SearchFileParser]] = {
    "text/plain": PlainTextParser,
    "text/html": HtmlParser,
    "application/xhtml+xml": HtmlParser,
    "text/xml": HtmlParser,
    "application/xml": HtmlParser,
    "application/pdf": PdfParser,
}

PARSERS_BY_EXTENSION: Dict[str, Type[SearchFileParser]] = {
    ".txt": PlainTextParser,
    ".html": HtmlParser,
    ".htm": HtmlParser,
    ".xhtml": HtmlParser,
    ".xml": HtmlParser,
    ".pdf": PdfParser,
}


def make_file_parser(
    submission_file: SubmissionFile,
    settings: Optional[ParserSettings] = None,
) -> Optional[SearchFileParser]:
    """Parser for a submission file, or None when its format is not indexed."""
    if settings is None:
        settings = get_settings().parser

    path = resolve_path(submission_file.path, settings.files_dir)
    mimetype = (submission_file.mimetype or "").split(";")[0].strip().lower()
    parser_class = PARSERS_BY_MIMETYPE.get(mimetype) or PARSERS_BY_EXTENSION.get(Path(path).suffix.lower())
    if parser_class is None:
        logger.debug(f"No parser for file {submission_file.id} ({mimetype or path.suffix})")
        return None

    if path.is_file() and path.stat().st_size > settings.max_file_size_mb * 1024 * 1024:
        logger.warning(f"File {submission_file.id} exceeds {settings.max_file_size_mb}MB, not indexed")
        return None

    if parser_class is PdfParser:
        return PdfParser(path, max_pages=settings.max_pages)
    return parser_class(path)
