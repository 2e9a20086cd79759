from fastapi import APIRouter

from fulltext_search.dependencies import PluginDep
from fulltext_search.schemas.search import SearchRequest, SearchResults

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResults)
def search_submissions(request: SearchRequest, plugin: PluginDep) -> SearchResults:
    """Ranked submission ids for per-field keyword queries."""
    return plugin.retrieve_results(
        request.context_id,
        request.keywords,
        request.published_from,
        request.published_to,
        request.order_by,
        request.order_direction,
        request.exclude,
        request.page,
        request.per_page,
    )
