import logging
import os

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.product import CatalogEntry
from app.models.sync_request import SyncRequest
from app.models.sync_response import SyncResponse
from app.services.catalog import SqliteCatalog
from app.services.errors import CatalogSyncError
from app.services.fetcher import _validate_url, fetch_bytes, fetch_url
from app.services.storage import LocalBlobStore
from app.services.sync import SyncDriver

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


def get_catalog():
    catalog = SqliteCatalog(os.environ.get("CATALOG_DB_PATH", "data/catalog.db"))
    try:
        yield catalog
    finally:
        catalog.close()


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(os.environ.get("STORAGE_ROOT", "storage"))


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Synchronise the catalog with the remote product listing",
    description=(
        "Walks the listing at `base_url` page by page (`?page=1`, `?page=2`, …) "
        "until a page without products, stores each product image and "
        "inserts or updates the matching catalog entry by its vendor identifier."
    ),
)
@limiter.limit("2/minute")
async def sync_catalog(
    request: Request,
    body: SyncRequest,
    catalog: SqliteCatalog = Depends(get_catalog),
    blob_store: LocalBlobStore = Depends(get_blob_store),
) -> SyncResponse:
    """Run one full catalog sync and report what was processed."""
    config = body.to_config()
    logger.info(
        "Sync request received",
        extra={"url": config.base_url, "max_pages": config.max_pages},
    )

    try:
        _validate_url(config.base_url)
    except ValueError as exc:
        logger.warning("Invalid or blocked URL: %s – %s", config.base_url, exc)
        raise HTTPException(status_code=400, detail=str(exc))

    external_ids = []

    def on_page_loaded(url: str) -> None:
        logger.info("Sync: page loaded %s", url)

    def on_item_processed(entry: CatalogEntry) -> None:
        logger.info("Sync: upserted appliance %s (#%d)", entry.external_id, entry.id)
        external_ids.append(entry.external_id)

    driver = SyncDriver(
        config, catalog, blob_store, fetch_page=fetch_url, fetch_image=fetch_bytes
    )
    try:
        summary = await driver.sync(on_page_loaded, on_item_processed)
    except ValueError as exc:
        # Redirect targets and image URLs taken from the listing itself
        logger.error("Blocked upstream URL during sync of %s: %s", config.base_url, exc)
        raise HTTPException(status_code=502, detail=str(exc))
    except httpx.TimeoutException:
        logger.error("Timeout during sync of %s", config.base_url)
        raise HTTPException(status_code=504, detail="The listing site timed out.")
    except httpx.HTTPStatusError as exc:
        logger.error("HTTP error during sync of %s: %s", config.base_url, exc)
        raise HTTPException(
            status_code=502, detail=f"Listing site returned HTTP {exc.response.status_code}."
        )
    except (httpx.RequestError, RuntimeError, CatalogSyncError) as exc:
        logger.error("Error during sync of %s: %s", config.base_url, exc)
        raise HTTPException(status_code=502, detail=str(exc))

    return SyncResponse(
        base_url=config.base_url,
        pages_visited=summary.pages_visited,
        items_processed=summary.items_processed,
        items_skipped=summary.items_skipped,
        external_ids=external_ids,
    )
