"""Flattens multi-locale submission metadata into index fields."""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bs4 import BeautifulSoup

from fulltext_search.schemas.submission import Author, Publication, Submission

_WHITESPACE_RE = re.compile(r"\s+")


def strip_tags(value: Any) -> str:
    """Plain text of a value that may hold HTML markup."""
    if value is None:
        return ""
    value = str(value)
    if "<" not in value:
        return value
    return BeautifulSoup(value, "html.parser").get_text()


def implode_localized(values: Iterable[Any]) -> str:
    """Join values with single spaces after stripping markup, dropping empties."""
    parts = []
    for value in values:
        text = _WHITESPACE_RE.sub(" ", strip_tags(value)).strip()
        if text:
            parts.append(text)
    return " ".join(parts)


def localized_values(value: Optional[Any]) -> List[Any]:
    """Values of a locale map, or the value itself when it is not localized."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        return list(value.values())
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def flatten_localized_list(value: Optional[Mapping[str, Iterable[str]]]) -> List[str]:
    out: List[str] = []
    for items in localized_values(value):
        out.extend(localized_values(items))
    return out


def author_values(authors: Iterable[Author]) -> List[Any]:
    values: List[Any] = []
    for author in authors:
        values.extend(localized_values(author.given_name))
        values.extend(localized_values(author.family_name))
        values.extend(localized_values(author.preferred_public_name))
        values.extend(localized_values(author.affiliation))
    return values


def normalize(submission: Submission, publication: Optional[Publication] = None) -> Dict[str, str]:
    """Metadata fields of the index record for a submission.

    Uses the submission's current publication unless one is given. The
    returned mapping holds every metadata column but never ``galley_text``.
    """
    publication = publication or submission.current_publication
    if publication is None:
        raise ValueError(f"Submission {submission.id} has no current publication")

    return {
        "title": implode_localized(publication.full_titles().values()),
        "abstract": implode_localized(localized_values(publication.abstract)),
        "authors": implode_localized(author_values(publication.authors)),
        "keywords": implode_localized(flatten_localized_list(publication.keywords)),
        "subjects": implode_localized(flatten_localized_list(publication.subjects)),
        "disciplines": implode_localized(flatten_localized_list(publication.disciplines)),
        "coverage": implode_localized(localized_values(publication.coverage)),
        "type": implode_localized(localized_values(publication.type)),
    }
