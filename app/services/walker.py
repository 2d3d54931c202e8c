"""Page walker: visits listing pages 1, 2, 3, … until one has no product cards."""

import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional
from urllib.parse import parse_qsl, urlencode, urlparse

from bs4 import BeautifulSoup, Tag

from app.models.events import (
    Fatal,
    ItemProcessed,
    ItemSkipped,
    PageLoaded,
    Skipped,
    WalkEvent,
    WalkSummary,
)
from app.models.product import CatalogEntry, ProductRecord
from app.models.sync_config import SyncConfig
from app.services.fetcher import fetch_url
from app.services.normalizer import classify_fragment

logger = logging.getLogger(__name__)

PRODUCT_CARD_SELECTOR = "div.search-results-product"

PageFetcher = Callable[[str], Awaitable[str]]
RecordProcessor = Callable[[ProductRecord], Awaitable[CatalogEntry]]


def build_page_url(base_url: str, page_index: int) -> str:
    """Return *base_url* with its ``page`` query parameter set to *page_index*."""
    parsed = urlparse(base_url)
    params = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != "page"]
    params.append(("page", str(page_index)))
    return parsed._replace(query=urlencode(params)).geturl()


def find_fragments(html: str) -> List[Tag]:
    """Return the product cards of a listing page in document order."""
    soup = BeautifulSoup(html, "lxml")
    return soup.select(PRODUCT_CARD_SELECTOR)


async def walk_pages(
    config: SyncConfig,
    process: RecordProcessor,
    fetch_page: PageFetcher = fetch_url,
) -> AsyncIterator[WalkEvent]:
    """Walk the listing and yield one event per page and per product card.

    Pages are fetched strictly one after another; *process* is awaited for
    each record before the next card is looked at.  The walk ends on the
    first page without product cards, or after ``config.max_pages`` pages.

    Raises:
        MalformedProductError / MissingIdentifierError: for a fatal card.
        Anything raised by *fetch_page* or *process*.
    """
    page_index = 1

    while True:
        if config.max_pages is not None and page_index > config.max_pages:
            logger.warning(
                "Walker: stopping after %d pages without reaching an empty page",
                config.max_pages,
            )
            return

        page_url = build_page_url(config.base_url, page_index)
        html = await fetch_page(page_url)
        fragments = find_fragments(html)
        logger.info("Walker: loaded %s (%d products)", page_url, len(fragments))
        yield PageLoaded(url=page_url, page_index=page_index)

        if not fragments:
            return

        for fragment in fragments:
            outcome = classify_fragment(fragment, config)
            if isinstance(outcome, Fatal):
                raise outcome.error
            if isinstance(outcome, Skipped):
                yield ItemSkipped(page_url=page_url, reason=outcome.reason)
                continue
            entry = await process(outcome.record)
            yield ItemProcessed(entry=entry)

        page_index += 1


async def run(
    config: SyncConfig,
    process: RecordProcessor,
    on_page_loaded: Optional[Callable[[str], None]] = None,
    on_item_processed: Optional[Callable[[CatalogEntry], None]] = None,
    fetch_page: PageFetcher = fetch_url,
) -> WalkSummary:
    """Drain :func:`walk_pages`, invoking the observers in-line as events arrive."""
    pages = processed = skipped = 0

    async for event in walk_pages(config, process, fetch_page=fetch_page):
        if isinstance(event, PageLoaded):
            pages += 1
            if on_page_loaded is not None:
                on_page_loaded(event.url)
        elif isinstance(event, ItemProcessed):
            processed += 1
            if on_item_processed is not None:
                on_item_processed(event.entry)
        else:
            skipped += 1

    return WalkSummary(pages_visited=pages, items_processed=processed, items_skipped=skipped)
