import logging

from fastapi import FastAPI, Depends

from manifest_index.api.search import router as search_router
from manifest_index.core.config import IndexSettings
from manifest_index.core.dependencies import get_settings
from manifest_index.core.errors import DriverUnavailableError
from manifest_index.storage.driver import initialize_driver, require_driver

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Scoop manifest index",
    version="0.1.0",
    description="SQLite-backed search index over bucket manifests.",
)


@app.on_event("startup")
async def startup_event() -> None:
    """
    Check the SQLite driver before serving anything; a missing or outdated
    driver stops startup.
    """
    try:
        status = require_driver()
    except DriverUnavailableError as e:
        logger.critical(f"Cannot start manifest index: {e}")
        raise
    settings = get_settings()
    logger.info(f"Using SQLite {status.sqlite_version}, index at {settings.db_path}")


@app.get("/health")
async def health(settings: IndexSettings = Depends(get_settings)) -> dict:
    """
    Lightweight health check endpoint.
    """
    status = initialize_driver()
    return {
        "status": "ok" if status.available else "unavailable",
        "sqlite_version": status.sqlite_version,
        "db_path": str(settings.db_path),
    }


app.include_router(search_router, tags=["index"])


if __name__ == "__main__":
    """
    Allow running `python -m manifest_index.main` to start the Uvicorn
    development server.
    """
    import uvicorn

    uvicorn.run(
        "manifest_index.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
