from datetime import date, datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class SearchResults(BaseModel):
    """Ranked page of submission ids returned to the host search pipeline."""

    ids: List[int] = Field(default_factory=list)
    total: int = 0
    error: Optional[str] = None


class SearchRequest(BaseModel):
    context_id: Optional[int] = None
    keywords: Dict[str, str] = Field(default_factory=dict)
    published_from: Optional[Union[datetime, date]] = None
    published_to: Optional[Union[datetime, date]] = None
    order_by: str = "score"
    order_direction: str = "desc"
    exclude: List[int] = Field(default_factory=list)
    page: int = 1
    per_page: Optional[int] = Field(default=None, ge=1, le=1000)


class RebuildRequest(BaseModel):
    context_ids: List[int] = Field(default_factory=list)
    clear_standard_search: bool = False


class RebuildResponse(BaseModel):
    contexts: List[int]
    submissions_indexed: int
    files_indexed: int
    records_pruned: int
    errors: List[str] = Field(default_factory=list)
