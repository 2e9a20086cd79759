from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Locale code -> value, e.g. {"en": "Title", "fr_CA": "Titre"}
Localized = Dict[str, Optional[str]]
LocalizedList = Dict[str, List[str]]


class Author(BaseModel):
    """Author of a publication as exposed by the host."""

    model_config = ConfigDict(frozen=True)

    given_name: Union[Localized, str, None] = None
    family_name: Union[Localized, str, None] = None
    preferred_public_name: Union[Localized, str, None] = None
    affiliation: Union[Localized, str, None] = None


class Publication(BaseModel):
    """Versioned metadata snapshot of a submission."""

    id: int
    title: Localized = Field(default_factory=dict)
    prefix: Localized = Field(default_factory=dict)
    subtitle: Localized = Field(default_factory=dict)
    abstract: Localized = Field(default_factory=dict)
    keywords: LocalizedList = Field(default_factory=dict)
    subjects: LocalizedList = Field(default_factory=dict)
    disciplines: LocalizedList = Field(default_factory=dict)
    coverage: Union[Localized, str, None] = None
    type: Union[Localized, str, None] = None
    authors: List[Author] = Field(default_factory=list)
    date_published: Optional[datetime] = None

    def full_titles(self) -> Dict[str, str]:
        """Prefixed title with its subtitle, for every locale that has a title."""
        titles = {}
        for locale, title in self.title.items():
            if not title:
                continue
            prefix = self.prefix.get(locale)
            full_title = f"{prefix} {title}" if prefix else title
            subtitle = self.subtitle.get(locale)
            if subtitle:
                full_title = f"{full_title}: {subtitle}"
            titles[locale] = full_title
        return titles


class Submission(BaseModel):
    """Submission as exposed by the host, with its current publication."""

    id: int
    context_id: int
    status: int
    current_publication: Optional[Publication] = None


class SubmissionFile(BaseModel):
    """File attached to a submission."""

    id: int
    submission_id: int
    file_stage: int
    path: str
    mimetype: Optional[str] = None
    name: Optional[str] = None
