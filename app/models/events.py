from typing import NamedTuple, Union

from app.models.product import CatalogEntry, ProductRecord


class PageLoaded(NamedTuple):
    url: str
    page_index: int


class ItemProcessed(NamedTuple):
    entry: CatalogEntry


class ItemSkipped(NamedTuple):
    page_url: str
    reason: str


WalkEvent = Union[PageLoaded, ItemProcessed, ItemSkipped]


# Outcome of turning one product card into a record.


class Ok(NamedTuple):
    record: ProductRecord


class Skipped(NamedTuple):
    reason: str


class Fatal(NamedTuple):
    error: Exception


FragmentOutcome = Union[Ok, Skipped, Fatal]


class WalkSummary(NamedTuple):
    pages_visited: int
    items_processed: int
    items_skipped: int
