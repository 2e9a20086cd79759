import logging
from typing import Dict

from fastapi import APIRouter, HTTPException

from fulltext_search.dependencies import PluginDep
from fulltext_search.exceptions import ConfigurationError, SchemaError
from fulltext_search.schemas.search import RebuildRequest, RebuildResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/contexts")
def list_contexts(plugin: PluginDep) -> Dict[int, str]:
    return plugin.all_contexts()


@router.post("/rebuild", response_model=RebuildResponse)
def rebuild_index(request: RebuildRequest, plugin: PluginDep) -> RebuildResponse:
    """Reindex the selected contexts, optionally clearing the standard search tables first."""
    if not request.context_ids and not request.clear_standard_search:
        raise HTTPException(status_code=422, detail="Select at least one context or clear the standard search")

    if not request.context_ids:
        plugin.clear_standard_search_tables()
        return RebuildResponse(contexts=[], submissions_indexed=0, files_indexed=0, records_pruned=0)

    def log_progress(context_id: int, done: int, total: int) -> None:
        if done == total or done % 100 == 0:
            logger.info(f"Context {context_id}: {done}/{total} submissions reindexed")

    try:
        return plugin.rebuild_index(
            request.context_ids,
            clear_standard_search=request.clear_standard_search,
            progress=log_progress,
        )
    except (SchemaError, ConfigurationError) as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
