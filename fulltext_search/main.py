import importlib
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from fulltext_search.config import Settings, get_settings
from fulltext_search.db.factory import make_database
from fulltext_search.db.interfaces.base import BaseDatabase
from fulltext_search.exceptions import ConfigurationError
from fulltext_search.hooks import HookRegistry
from fulltext_search.plugin import FullTextSearchPlugin
from fulltext_search.routers import admin, ping, search
from fulltext_search.services.search.dialects import RankingDialect
from fulltext_search.services.submissions import SubmissionSource

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_submission_source(path: Optional[str]) -> Optional[SubmissionSource]:
    """Instantiate the host submission source from a "module:factory" path."""
    if not path:
        return None
    module_name, _, attribute = path.partition(":")
    if not attribute:
        raise ConfigurationError(f"Invalid submission source '{path}', expected 'module:factory'")
    factory = getattr(importlib.import_module(module_name), attribute)
    return factory()


def create_app(
    settings: Optional[Settings] = None,
    source: Optional[SubmissionSource] = None,
    dialect: Optional[RankingDialect] = None,
    database: Optional[BaseDatabase] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting full-text search API...")
        app.state.settings = settings

        db = database or make_database(settings)
        app.state.database = db
        logger.info("Database connected")

        submission_source = source or load_submission_source(settings.submission_source)
        if submission_source is None:
            logger.warning("No submission source configured, rebuilds are disabled")

        plugin = FullTextSearchPlugin(db, submission_source, settings=settings, dialect=dialect)
        app.state.hooks = HookRegistry()
        app.state.plugin = plugin
        if plugin.register(app.state.hooks):
            logger.info("Search index ready")
        else:
            logger.warning("Search index not installed")

        logger.info("API ready")
        yield

        db.teardown()
        logger.info("API shutdown complete")

    app = FastAPI(
        title="Submission Full-Text Search API",
        description="Database-backed full-text search over published submissions",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(ping.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, port=8000, host="0.0.0.0")
