import logging
from typing import Optional

from fulltext_search.config import ParserSettings
from fulltext_search.schemas.submission import SubmissionFile
from fulltext_search.services.file_parser.factory import make_file_parser
from fulltext_search.services.normalizer import implode_localized

logger = logging.getLogger(__name__)


def extract_text(submission_file: SubmissionFile, settings: Optional[ParserSettings] = None) -> str:
    """Plain text of a submission file, or an empty string when it cannot be read."""
    parser = make_file_parser(submission_file, settings)
    if parser is None:
        return ""

    if not parser.open():
        logger.warning(f"Could not open submission file {submission_file.id}, indexing it without text")
        return ""

    try:
        text = implode_localized(parser.read())
    except Exception as e:
        logger.warning(f"Could not read submission file {submission_file.id}: {e}")
        return ""
    finally:
        parser.close()

    logger.debug(f"Extracted {len(text)} chars from submission file {submission_file.id}")
    return text
