from typing import Annotated

from fastapi import Depends, Request

from fulltext_search.config import Settings
from fulltext_search.db.interfaces.base import BaseDatabase
from fulltext_search.plugin import FullTextSearchPlugin


def get_request_settings(request: Request) -> Settings:
    """Get settings from the request state."""
    return request.app.state.settings


def get_database(request: Request) -> BaseDatabase:
    """Get database from the request state."""
    return request.app.state.database


def get_plugin(request: Request) -> FullTextSearchPlugin:
    """Get the search plugin from the request state."""
    return request.app.state.plugin


# Dependency type aliases for better type hints
SettingsDep = Annotated[Settings, Depends(get_request_settings)]
DatabaseDep = Annotated[BaseDatabase, Depends(get_database)]
PluginDep = Annotated[FullTextSearchPlugin, Depends(get_plugin)]
