"""Sync driver: persists each scraped product and reports progress."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
from urllib.parse import urljoin

from app.models.events import WalkSummary
from app.models.product import CatalogEntry, ProductRecord
from app.models.sync_config import SyncConfig
from app.services.catalog import SqliteCatalog
from app.services.fetcher import fetch_bytes, fetch_url
from app.services.storage import LocalBlobStore
from app.services.walker import PageFetcher, run

logger = logging.getLogger(__name__)

ImageFetcher = Callable[[str], Awaitable[bytes]]


class SyncDriver:
    """Runs a full listing walk, storing images and upserting catalog entries.

    Collaborators are injected so that tests and callers can swap the network
    and storage layers.
    """

    def __init__(
        self,
        config: SyncConfig,
        catalog: SqliteCatalog,
        blob_store: LocalBlobStore,
        fetch_page: PageFetcher = fetch_url,
        fetch_image: ImageFetcher = fetch_bytes,
    ):
        self.config = config
        self.catalog = catalog
        self.blob_store = blob_store
        self.fetch_page = fetch_page
        self.fetch_image = fetch_image

    async def process_one(self, record: ProductRecord) -> CatalogEntry:
        """Store the product image, then upsert the catalog entry.

        The two steps are independent: a failed upsert leaves the image that
        was already written in place.
        """
        if record.image_asset_key is None:
            logger.warning("Sync: no asset key for %s – image not stored", record.product_url)
        else:
            image_url = urljoin(self.config.base_url, record.image_source_url)
            data = await self.fetch_image(image_url)
            await asyncio.to_thread(
                self.blob_store.put, record.image_asset_key, data, visibility="public"
            )

        return await asyncio.to_thread(
            self.catalog.update_or_create, record.external_id, record
        )

    async def sync(
        self,
        on_page_loaded: Optional[Callable[[str], None]] = None,
        on_item_processed: Optional[Callable[[CatalogEntry], None]] = None,
    ) -> WalkSummary:
        """Walk every listing page from page 1 and persist each product found."""
        summary = await run(
            self.config,
            self.process_one,
            on_page_loaded=on_page_loaded,
            on_item_processed=on_item_processed,
            fetch_page=self.fetch_page,
        )
        logger.info(
            "Sync: finished %s – %d pages, %d products, %d skipped",
            self.config.base_url,
            summary.pages_visited,
            summary.items_processed,
            summary.items_skipped,
        )
        return summary
