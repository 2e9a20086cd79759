from fastapi import APIRouter
from sqlalchemy import text

from fulltext_search.dependencies import DatabaseDep, PluginDep, SettingsDep

router = APIRouter(tags=["health"])


@router.get("/ping")
def ping(settings: SettingsDep, database: DatabaseDep, plugin: PluginDep) -> dict:
    database_status = "healthy"
    try:
        with database.get_session() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        database_status = f"unhealthy: {e}"

    return {
        "status": "ok" if database_status == "healthy" else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": database_status,
        "index_installed": plugin.installed,
        "dialect": plugin.dialect.name if plugin.dialect else None,
    }
